"""
Schema Analyzer - Parses OpenAPI 3.x documents into a schema graph.

Supports:
- JSON and YAML input
- $ref resolution for schemas, parameters, request bodies and responses
- Self-referencing and mutually recursive component schemas
- allOf / oneOf / discriminator metadata
- Media-type and schema level examples
"""

import json
import logging
from typing import Any, Dict, List, Optional, Set, Union

import yaml

from oasdoc.schema.errors import DocumentError, StructuralError
from oasdoc.schema.models import (
    NO_EXAMPLE,
    ApiDocument,
    Endpoint,
    MediaType,
    Parameter,
    RequestBody,
    Response,
    SchemaKind,
    SchemaNode,
)

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"

# Order in which operations of one path item are emitted
OPERATION_METHODS = ["get", "put", "post", "delete", "options", "head", "patch", "trace"]


def extract_schema_name(ref: str) -> str:
    """
    Extract schema name from a $ref (e.g., "#/components/schemas/Pet" -> "Pet")

    Raises:
        StructuralError: If the reference is not a local component schema reference
    """
    if not ref.startswith(SCHEMA_REF_PREFIX):
        raise StructuralError(f"invalid schema reference format: {ref}")

    name = ref[len(SCHEMA_REF_PREFIX):]
    if not name:
        raise StructuralError(f"empty schema name in reference: {ref}")

    return name


def parse_openapi_text(openapi: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parse raw OpenAPI text (JSON or YAML) into a dictionary

    Raises:
        DocumentError: If the input is empty or cannot be parsed
    """
    if isinstance(openapi, bytes):
        try:
            openapi = openapi.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentError(f"failed to parse openapi document: {e}") from e

    if not openapi or not openapi.strip():
        raise DocumentError("openapi input cannot be empty")

    try:
        spec = json.loads(openapi)
    except json.JSONDecodeError:
        try:
            spec = yaml.safe_load(openapi)
        except yaml.YAMLError as e:
            raise DocumentError(f"failed to parse openapi document: {e}") from e

    if not isinstance(spec, dict):
        raise DocumentError("failed to parse openapi document: top level must be a mapping")

    return spec


class SchemaAnalyzer:
    """Analyzes OpenAPI 3.x documents and builds the schema graph"""

    def __init__(self):
        self.api_document = ApiDocument()
        self._spec: Dict[str, Any] = {}
        self._raw_schemas: Dict[str, Any] = {}
        self._resolving_aliases: Set[str] = set()

    def analyze_openapi_spec(self, spec: Dict[str, Any]) -> ApiDocument:
        """
        Analyze an OpenAPI 3.x document

        Args:
            spec: OpenAPI spec dictionary (parsed from JSON/YAML)

        Returns:
            ApiDocument with endpoints and named component schemas

        Raises:
            DocumentError: If the version is missing or not 3.x
            StructuralError: If a schema cannot be traversed
        """
        version = spec.get("openapi")
        if not version:
            if spec.get("swagger"):
                raise DocumentError(f"only openapi 3.x is supported, got version: {spec['swagger']}")
            raise DocumentError("failed to determine openapi version")

        version = str(version)
        if not version.startswith("3."):
            raise DocumentError(f"only openapi 3.x is supported, got version: {version}")

        self._spec = spec
        info = spec.get("info") or {}
        self.api_document.openapi_version = version
        self.api_document.title = info.get("title", "")
        self.api_document.version = str(info.get("version", ""))
        self.api_document.description = info.get("description", "") or ""

        self._build_components()

        paths = spec.get("paths") or {}
        self.api_document.path_count = len(paths)
        for path, path_item in paths.items():
            self._process_path(path, path_item or {})

        logger.info(
            f"Analyzed {len(self.api_document.endpoints)} endpoints and "
            f"{len(self.api_document.components)} component schemas"
        )
        return self.api_document

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _build_components(self) -> None:
        """Create named nodes first so references can point at them, then fill them in"""
        components = self._spec.get("components") or {}
        self._raw_schemas = components.get("schemas") or {}

        for name, raw in self._raw_schemas.items():
            if not isinstance(raw, dict):
                raise StructuralError(f"schema '{name}' must be a mapping")
            if "$ref" not in raw:
                self.api_document.components[name] = SchemaNode(name=name)

        for name, raw in self._raw_schemas.items():
            if "$ref" in raw:
                # Pure alias: A -> B resolves to B's node
                self.api_document.components[name] = self._resolve_alias(name)

        for name, raw in self._raw_schemas.items():
            if "$ref" not in raw:
                self._fill_node(self.api_document.components[name], raw)

    def _resolve_alias(self, name: str) -> SchemaNode:
        if name in self._resolving_aliases:
            raise StructuralError(f"circular schema alias: {name}")

        self._resolving_aliases.add(name)
        try:
            target = extract_schema_name(self._raw_schemas[name]["$ref"])
            if target not in self._raw_schemas:
                raise StructuralError(f"schema alias '{name}' points to missing schema '{target}'")
            if "$ref" in self._raw_schemas[target]:
                return self._resolve_alias(target)
            return self.api_document.components[target]
        finally:
            self._resolving_aliases.discard(name)

    def _ref_schema(self, ref: str) -> Optional[SchemaNode]:
        """Resolve a schema $ref, returning None when the target does not exist"""
        name = extract_schema_name(ref)
        node = self.api_document.components.get(name)
        if node is None:
            logger.warning(f"Unresolved schema reference: {ref}")
        return node

    def _build_schema(self, raw: Any) -> Optional[SchemaNode]:
        """Build a schema node from a raw schema object (inline body or $ref)"""
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise StructuralError(f"schema must be a mapping, got {type(raw).__name__}")

        if "$ref" in raw:
            return self._ref_schema(raw["$ref"])

        node = SchemaNode()
        self._fill_node(node, raw)
        return node

    def _fill_node(self, node: SchemaNode, raw: Dict[str, Any]) -> None:
        declared = raw.get("type")
        if isinstance(declared, list):
            declared = declared[0] if declared else ""
        node.type = declared or ""
        node.format = raw.get("format")
        node.description = raw.get("description", "") or ""
        node.enum = list(raw.get("enum") or [])
        node.required = list(raw.get("required") or [])
        node.minimum = raw.get("minimum")
        node.maximum = raw.get("maximum")

        if "default" in raw:
            node.default = raw["default"]
        if "example" in raw:
            node.example = raw["example"]
        if isinstance(raw.get("examples"), list):
            node.examples = list(raw["examples"])

        properties = raw.get("properties") or {}
        if not isinstance(properties, dict):
            raise StructuralError(f"properties of {node!r} must be a mapping")
        node.properties = [
            (prop_name, self._build_schema(prop_raw))
            for prop_name, prop_raw in properties.items()
        ]

        items = raw.get("items")
        if isinstance(items, dict):
            node.items = self._build_schema(items)

        node.all_of = [m for m in (self._build_schema(r) for r in raw.get("allOf") or []) if m is not None]
        node.one_of = [v for v in (self._build_schema(r) for r in raw.get("oneOf") or []) if v is not None]

        discriminator = raw.get("discriminator")
        if isinstance(discriminator, dict):
            node.discriminator = discriminator.get("propertyName") or None

        node.kind = self._infer_kind(raw, node)

    @staticmethod
    def _infer_kind(raw: Dict[str, Any], node: SchemaNode) -> SchemaKind:
        if raw.get("oneOf"):
            return SchemaKind.UNION
        if raw.get("allOf"):
            return SchemaKind.COMPOSITE
        if node.type == "array":
            return SchemaKind.ARRAY
        if node.type == "object" or raw.get("properties"):
            return SchemaKind.OBJECT
        return SchemaKind.SCALAR

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _resolve_component(
        self, obj: Dict[str, Any], section: str, seen: Optional[Set[str]] = None
    ) -> Dict[str, Any]:
        """Resolve a $ref into components.<section>, e.g. requestBodies"""
        if "$ref" not in obj:
            return obj

        ref = obj["$ref"]
        seen = seen or set()
        if ref in seen:
            raise StructuralError(f"circular {section} reference: {ref}")
        seen.add(ref)
        prefix = f"#/components/{section}/"
        if not ref.startswith(prefix):
            raise StructuralError(f"invalid {section} reference format: {ref}")

        target = ((self._spec.get("components") or {}).get(section) or {}).get(ref[len(prefix):])
        if not isinstance(target, dict):
            raise StructuralError(f"unresolved {section} reference: {ref}")
        return self._resolve_component(target, section, seen)

    def _process_path(self, path: str, path_item: Dict[str, Any]) -> None:
        """Process a single path and its methods"""
        shared_params = path_item.get("parameters") or []

        for method in OPERATION_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            endpoint = Endpoint(
                method=method.upper(),
                path=path,
                summary=operation.get("summary", "") or "",
                description=operation.get("description", "") or "",
                tags=list(operation.get("tags") or []),
            )
            endpoint.parameters = self._build_parameters(shared_params, operation.get("parameters") or [])

            if "requestBody" in operation:
                raw_body = self._resolve_component(operation["requestBody"], "requestBodies")
                endpoint.request_body = RequestBody(
                    description=raw_body.get("description", "") or "",
                    required=bool(raw_body.get("required", False)),
                    content=self._build_content(raw_body.get("content")),
                )

            for code, raw_response in (operation.get("responses") or {}).items():
                raw_response = self._resolve_component(raw_response or {}, "responses")
                endpoint.responses.append(Response(
                    code=str(code),
                    description=raw_response.get("description", "") or "",
                    content=self._build_content(raw_response.get("content")),
                ))

            logger.debug(f"Extracted endpoint {endpoint.key}")
            self.api_document.endpoints.append(endpoint)

    def _build_parameters(self, shared: List[Any], own: List[Any]) -> List[Parameter]:
        """Merge path-level and operation-level parameters; operation wins on (name, in)"""
        merged: Dict[tuple, Parameter] = {}
        for raw in list(shared) + list(own):
            raw = self._resolve_component(raw, "parameters")
            param = Parameter(
                name=raw.get("name", ""),
                location=raw.get("in", ""),
                required=bool(raw.get("required", False)),
                description=raw.get("description", "") or "",
                schema=self._build_schema(raw.get("schema")),
            )
            merged[(param.name, param.location)] = param
        return list(merged.values())

    def _build_content(self, content: Optional[Dict[str, Any]]) -> Dict[str, MediaType]:
        result: Dict[str, MediaType] = {}
        for media_type, raw in (content or {}).items():
            raw = raw or {}
            media = MediaType(schema=self._build_schema(raw.get("schema")))
            if "example" in raw:
                media.example = raw["example"]
            raw_examples = raw.get("examples")
            if isinstance(raw_examples, dict):
                media.examples = [
                    example.get("value", NO_EXAMPLE) if isinstance(example, dict) else NO_EXAMPLE
                    for example in raw_examples.values()
                ]
            result[media_type] = media
        return result


def analyze_document(openapi: Union[str, bytes, Dict[str, Any]]) -> ApiDocument:
    """Parse (if needed) and analyze an OpenAPI document in one call"""
    spec = openapi if isinstance(openapi, dict) else parse_openapi_text(openapi)
    return SchemaAnalyzer().analyze_openapi_spec(spec)
