"""
OpenAPI -> Markdown conversion pipeline.

Stages, each finished before the next starts:
1. parse and analyze the document into a schema graph
2. generate example payloads for every named schema (read-only lookup)
3. find schemas shared across endpoints (read-only map)
4. render the Markdown document
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from oasdoc.builder.example_resolver import ExampleResolver
from oasdoc.builder.payload_builder import DEFAULT_EXAMPLE_DEPTH, DEFAULT_SEED, build_component_examples
from oasdoc.exporter.markdown_exporter import MarkdownExporter, group_by_tags
from oasdoc.exporter.markdown_renderer import MarkdownRenderer
from oasdoc.introspection.field_extractor import DEFAULT_MAX_DEPTH, FieldExtractor
from oasdoc.introspection.schema_analyzer import SchemaAnalyzer, parse_openapi_text
from oasdoc.introspection.usage_analyzer import SchemaUsage, SchemaUsageAnalyzer
from oasdoc.schema.errors import DocumentError
from oasdoc.schema.models import ApiDocument

logger = logging.getLogger(__name__)


@dataclass
class ConvertOptions:
    """Options for one conversion"""
    title: str = ""
    description: str = ""
    enable_shared_schemas: bool = True
    debug: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    example_max_depth: int = DEFAULT_EXAMPLE_DEPTH
    example_seed: int = DEFAULT_SEED


@dataclass
class DebugInfo:
    """Visibility into the conversion, for tests and troubleshooting"""
    parsed_paths: int = 0
    extracted_ops: int = 0
    tags_found: List[str] = field(default_factory=list)
    untagged_ops: int = 0
    parameter_counts: Dict[str, int] = field(default_factory=dict)
    response_counts: Dict[str, int] = field(default_factory=dict)
    request_body_count: int = 0
    shared_schema_count: int = 0
    nested_schema_depth: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parsed_paths": self.parsed_paths,
            "extracted_ops": self.extracted_ops,
            "tags_found": list(self.tags_found),
            "untagged_ops": self.untagged_ops,
            "parameter_counts": dict(self.parameter_counts),
            "response_counts": dict(self.response_counts),
            "request_body_count": self.request_body_count,
            "shared_schema_count": self.shared_schema_count,
            "nested_schema_depth": dict(self.nested_schema_depth),
        }


@dataclass
class ConvertResult:
    """Markdown output plus generation metadata"""
    markdown: str
    endpoint_count: int = 0
    tag_count: int = 0
    warnings: List[str] = field(default_factory=list)
    shared_schemas: Dict[str, SchemaUsage] = field(default_factory=dict)
    debug: Optional[DebugInfo] = None


def convert(openapi: Union[str, bytes, Dict[str, Any]], options: ConvertOptions) -> ConvertResult:
    """
    Convert an OpenAPI 3.x document to Markdown API documentation

    Args:
        openapi: Raw JSON/YAML text or an already parsed document
        options: Conversion options; ``title`` is required

    Raises:
        DocumentError: Empty input, empty title, unparseable or non-3.x document
        StructuralError: The schema graph cannot be traversed
        UnsupportedSchemaError: An inline body needs a generated example
    """
    if not openapi:
        raise DocumentError("openapi input cannot be empty")
    if not options.title:
        raise DocumentError("title cannot be empty")

    spec = openapi if isinstance(openapi, dict) else parse_openapi_text(openapi)
    document = SchemaAnalyzer().analyze_openapi_spec(spec)

    payloads = build_component_examples(
        document.components,
        max_depth=options.example_max_depth,
        seed=options.example_seed,
    )

    shared_schemas = SchemaUsageAnalyzer().identify_shared_schemas(document.endpoints)
    rendered_shared = shared_schemas if options.enable_shared_schemas else {}

    renderer = MarkdownRenderer(rendered_shared, max_depth=options.max_depth)
    exporter = MarkdownExporter(
        document,
        renderer,
        ExampleResolver(payloads),
        title=options.title,
        description=options.description,
    )
    markdown = exporter.generate()

    result = ConvertResult(
        markdown=markdown,
        endpoint_count=len(document.endpoints),
        tag_count=len(group_by_tags(document.endpoints)),
        warnings=exporter.warnings,
        shared_schemas=shared_schemas,
    )

    if options.debug:
        result.debug = collect_debug_info(document, shared_schemas, options.max_depth)

    logger.info(
        f"Converted {result.endpoint_count} endpoints in {result.tag_count} tags "
        f"({len(shared_schemas)} shared schemas, {len(result.warnings)} warnings)"
    )
    return result


def collect_debug_info(
    document: ApiDocument,
    shared_schemas: Dict[str, SchemaUsage],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> DebugInfo:
    """Counts gathered from the analyzed document"""
    debug = DebugInfo(
        parsed_paths=document.path_count,
        extracted_ops=len(document.endpoints),
        tags_found=sorted(group_by_tags(document.endpoints)),
        shared_schema_count=len(shared_schemas),
    )

    for endpoint in document.endpoints:
        if not endpoint.tags:
            debug.untagged_ops += 1
        if endpoint.request_body is not None:
            debug.request_body_count += 1
        for param in endpoint.parameters:
            debug.parameter_counts[param.location] = debug.parameter_counts.get(param.location, 0) + 1
        for response in endpoint.responses:
            debug.response_counts[response.code] = debug.response_counts.get(response.code, 0) + 1

    extractor = FieldExtractor(max_depth=max_depth)
    for name, schema in document.components.items():
        debug.nested_schema_depth[name] = extractor.measure_depth(schema)

    return debug
