"""Markdown document assembly and export."""
import logging
from pathlib import Path
from typing import Dict, List, Optional

from oasdoc.builder.example_resolver import ExampleResolver
from oasdoc.introspection.usage_analyzer import identify_shared_response_schemas
from oasdoc.schema.models import ApiDocument, Endpoint, Parameter
from .markdown_renderer import MarkdownRenderer, format_enum_values, make_anchor

logger = logging.getLogger(__name__)

DEFAULT_TAG = "Default APIs"


def group_by_tags(endpoints: List[Endpoint]) -> Dict[str, List[Endpoint]]:
    """Group endpoints by tag; untagged ones go to DEFAULT_TAG, multi-tagged ones to each tag"""
    groups: Dict[str, List[Endpoint]] = {}
    for endpoint in endpoints:
        for tag in endpoint.tags or [DEFAULT_TAG]:
            groups.setdefault(tag, []).append(endpoint)
    return groups


def ordered_tags(groups: Dict[str, List[Endpoint]]) -> List[str]:
    """Tag names sorted, with DEFAULT_TAG moved to the end"""
    tags = sorted(groups)
    if DEFAULT_TAG in tags:
        tags.remove(DEFAULT_TAG)
        tags.append(DEFAULT_TAG)
    return tags


def _json_fence(example: str) -> str:
    return f"```json\n{example}\n```\n\n"


class MarkdownExporter:
    """Assembles the complete Markdown document for an ApiDocument"""

    def __init__(
        self,
        document: ApiDocument,
        renderer: MarkdownRenderer,
        resolver: ExampleResolver,
        title: str,
        description: str = "",
    ):
        self.document = document
        self.renderer = renderer
        self.resolver = resolver
        self.title = title
        self.description = description
        self._warnings: List[str] = []

    @property
    def warnings(self) -> List[str]:
        return self._warnings + self.renderer.warnings

    def export(self, output_file: Path) -> str:
        """Generate the document and write it to output_file"""
        markdown = self.generate()
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, "w", encoding="utf-8") as f:
            f.write(markdown)

        logger.info(f"Wrote {len(markdown)} characters of Markdown to {output_file}")
        return markdown

    def generate(self) -> str:
        out = [f"# {self.title}\n\n"]
        if self.description:
            out.append(f"{self.description}\n\n")

        endpoints = self.document.endpoints
        if not endpoints:
            return "".join(out)

        out.append(self.render_table_of_contents(endpoints))

        groups = group_by_tags(endpoints)
        tags = ordered_tags(groups)
        if len(tags) > 1:
            for tag in tags:
                out.append(f"## {tag}\n\n")
                for endpoint in groups[tag]:
                    out.append(self.render_endpoint(endpoint, "###"))
        else:
            for endpoint in endpoints:
                out.append(self.render_endpoint(endpoint, "##"))

        out.append(self.renderer.render_shared_definitions(self.document.components))
        return "".join(out)

    def render_table_of_contents(self, endpoints: List[Endpoint]) -> str:
        out = [
            "## Table of Contents\n\n",
            "HTTP Request | Description\n",
            "-------------|------------\n",
        ]
        for endpoint in endpoints:
            anchor = make_anchor(endpoint.method, endpoint.path)
            out.append(f"{endpoint.method} [{endpoint.path}](#{anchor}) | {endpoint.summary}\n")
        out.append("\n")
        return "".join(out)

    def render_endpoint(self, endpoint: Endpoint, heading: str) -> str:
        out = [f"{heading} {endpoint.method} {endpoint.path}\n\n"]

        if endpoint.description:
            out.append(f"{endpoint.description}\n\n")
        elif endpoint.summary:
            out.append(f"{endpoint.summary}\n\n")
        else:
            message = f"No description or summary for {endpoint.key}"
            logger.warning(message)
            self._warnings.append(message)

        out.append(self.render_parameters(endpoint))
        out.append(self.render_request_body(endpoint))
        out.append(self.render_responses(endpoint))
        return "".join(out)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def render_parameters(self, endpoint: Endpoint) -> str:
        by_location: Dict[str, List[Parameter]] = {"path": [], "query": [], "header": []}
        for param in endpoint.parameters:
            if param.location in by_location:
                by_location[param.location].append(param)

        return (
            self._render_parameter_list("Path Parameters", by_location["path"])
            + self._render_parameter_list("Query Parameters", by_location["query"])
            + self._render_headers(by_location["header"])
        )

    @staticmethod
    def _render_parameter_list(heading: str, params: List[Parameter]) -> str:
        if not params:
            return ""

        out = [f"#### {heading}\n\n"]
        for param in params:
            if param.schema is not None:
                line = f"- `{param.name}` *({param.schema.type}"
                if param.required:
                    line += ", required"
                line += ")*"
                if param.description:
                    line += f" {param.description}"
                if param.schema.enum:
                    line += f" Enums: {format_enum_values(param.schema.enum)}"
                out.append(line + "\n")
            out.append("\n")
        return "".join(out)

    @staticmethod
    def _render_headers(params: List[Parameter]) -> str:
        if not params:
            return ""

        out = [
            "#### Headers\n\n",
            "Name | Description | Required | Type\n",
            "-----|-------------|----------|-----\n",
        ]
        for param in params:
            required = "true" if param.required else "false"
            type_name = param.schema.type if param.schema is not None else ""
            out.append(f"{param.name} | {param.description} | {required} | {type_name}\n")
        out.append("\n")
        return "".join(out)

    # ------------------------------------------------------------------
    # Bodies
    # ------------------------------------------------------------------

    def render_request_body(self, endpoint: Endpoint) -> str:
        body = endpoint.request_body
        if body is None:
            return ""

        media = body.json_media()
        example = self.resolver.resolve_json(media, media.schema) if media is not None else ""
        has_schema = media is not None and media.schema is not None

        if not example and not has_schema:
            return ""

        out = ["### Request\n\n"]
        if example:
            out.append(_json_fence(example))
        if has_schema:
            out.append(self.renderer.render_field_definitions(media.schema))
        return "".join(out)

    def render_responses(self, endpoint: Endpoint) -> str:
        if not endpoint.responses:
            return ""

        out = ["### Responses\n\n"]
        shared_in_endpoint = identify_shared_response_schemas(endpoint)
        rendered: set = set()

        for response in sorted(endpoint.responses, key=lambda r: r.code):
            out.append(f"#### {response.code} Response\n\n")
            if response.description:
                out.append(f"{response.description}\n\n")

            media = response.json_media()
            example = self.resolver.resolve_json(media, media.schema) if media is not None else ""
            if example:
                out.append(_json_fence(example))

            if not response.is_success or media is None:
                continue
            schema = media.schema
            if schema is None or not schema.is_named:
                continue

            codes: Optional[List[str]] = shared_in_endpoint.get(schema.name)
            if codes is not None:
                if schema.name in rendered:
                    continue
                out.append(f"#### Field Definitions (applies to {', '.join(codes)} responses)\n\n")
                rendered.add(schema.name)
            else:
                out.append("#### Field Definitions\n\n")
            out.append(self.renderer.render_field_definitions_content(schema))

        return "".join(out)
