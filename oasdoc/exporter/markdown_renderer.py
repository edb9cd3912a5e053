"""
Markdown Renderer - Turns extracted field models into Markdown blocks.

Output conventions:
- top-level bullets:  - `name` *(type, required)* Description Enums: `a`, `b`
- nested sections:    **Name** followed by bullets using ": " before the
                      description and ". Enums: " after it
- shared schemas:     "See [Name](#anchor)" at every use site, also appended to
                      bullets whose field points at a shared schema; one full
                      section per schema in the shared definitions block
"""

import json
import logging
import re
from typing import Any, Iterable, List, Mapping, Optional

from oasdoc.introspection.field_extractor import (
    DEFAULT_MAX_DEPTH,
    FieldDescriptor,
    FieldExtractor,
    SchemaDefinition,
    VisitState,
)
from oasdoc.introspection.usage_analyzer import SchemaUsage, sorted_usage
from oasdoc.schema.models import SchemaKind, SchemaNode

logger = logging.getLogger(__name__)

SHARED_DEFINITIONS_HEADING = "## Shared Schema Definitions"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def make_anchor(method: str, path: str) -> str:
    """Anchor for an endpoint heading: "GET /pets/{id}" -> "getpetsid" """
    return _NON_ALNUM.sub("", f"{method} {path}".lower())


def make_schema_anchor(schema_name: str) -> str:
    """Anchor for a shared schema heading: "Pet_Owner" -> "pet-owner" """
    return _NON_ALNUM.sub("-", schema_name.lower()).strip("-")


def format_literal(value: Any) -> str:
    """Render an enum literal the way it appears in the source document"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def format_enum_values(values: Iterable[Any]) -> str:
    return ", ".join(f"`{format_literal(value)}`" for value in values)


def format_type_label(field: FieldDescriptor) -> str:
    """
    Type label shown inside the bullet parenthetical

    - array of scalar        -> "<type> array"
    - array of named object  -> "array of <Name>" ("array of objects" if inline)
    - named object           -> "<Name>" ("object" if inline)
    - anything else          -> the declared type
    """
    if field.is_array and not field.is_object:
        return f"{field.type} array"
    if field.is_array and field.is_object:
        return f"array of {field.ref_name}" if field.ref_name else "array of objects"
    if field.is_object:
        return field.ref_name or "object"
    return field.type


def _type_parenthetical(field: FieldDescriptor) -> str:
    if not field.type and not field.ref_name:
        return ""
    required = ", required" if field.required else ""
    return f" *({format_type_label(field)}{required})*"


def discriminator_sentence(property_name: str) -> str:
    return (
        "Request body is one of the following variants, selected by the "
        f"`{property_name}` field:\n\n"
    )


class MarkdownRenderer:
    """
    Renders field definitions for request/response bodies and the shared
    schema definitions block

    Usage:
    ```python
    renderer = MarkdownRenderer(shared_schemas, max_depth=10)
    text = renderer.render_field_definitions(media.schema)
    ```
    """

    def __init__(
        self,
        shared_schemas: Optional[Mapping[str, SchemaUsage]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """
        Args:
            shared_schemas: schema name -> usage, read-only during rendering
            max_depth: Depth ceiling handed to the field extractor
        """
        self.shared_schemas = shared_schemas or {}
        self.extractor = FieldExtractor(max_depth=max_depth, shared_schemas=self.shared_schemas.keys())
        self.warnings: List[str] = []

    # ------------------------------------------------------------------
    # Body field definitions
    # ------------------------------------------------------------------

    def render_field_definitions(self, schema: Optional[SchemaNode]) -> str:
        """
        "#### Field Definitions" section for a named request body schema;
        empty for inline bodies and schemas without properties
        """
        if schema is None or not schema.is_named:
            return ""

        if schema.kind != SchemaKind.UNION:
            properties, _ = schema.merged_properties()
            if not properties:
                return ""

        return "#### Field Definitions\n\n" + self.render_field_definitions_content(schema)

    def render_field_definitions_content(self, schema: Optional[SchemaNode], visits: Optional[VisitState] = None) -> str:
        """
        Field bullets and nested sections for one schema, without a heading

        A shared schema is never expanded here; only a link to its section
        in the shared definitions block is emitted.
        """
        if schema is None:
            return ""

        if schema.is_named and schema.name in self.shared_schemas:
            return f"See [{schema.name}](#{make_schema_anchor(schema.name)})\n\n"

        if schema.kind == SchemaKind.UNION:
            return self._render_union(schema)

        properties, _ = schema.merged_properties()
        if not properties:
            return ""

        fields, nested = self.extractor.extract(schema, visits or VisitState())
        return self.render_fields_list(fields, nested)

    def _render_union(self, schema: SchemaNode) -> str:
        out: List[str] = []
        if schema.discriminator:
            out.append(discriminator_sentence(schema.discriminator))

        for variant in schema.one_of:
            if variant.is_named:
                out.append(f"**{variant.name}**\n")
            out.append(self.render_field_definitions_content(variant))

        return "".join(out)

    # ------------------------------------------------------------------
    # Bullet lists
    # ------------------------------------------------------------------

    def render_fields_list(
        self,
        fields: List[FieldDescriptor],
        nested: List[SchemaDefinition],
        schema_name: str = "",
    ) -> str:
        """Top-level bullets, a blank line, then one section per nested definition"""
        out: List[str] = []
        for field in fields:
            line = f"- `{field.name}`" + _type_parenthetical(field)

            if field.description:
                line += f" {field.description}"
            elif not field.is_object:
                self._warn_missing_description(field.name, schema_name)

            if field.enum:
                line += f" Enums: {format_enum_values(field.enum)}"

            out.append(line + self._shared_link(field, schema_name) + "\n")

        out.append("\n")

        for definition in nested:
            out.append(self.render_schema_definition(definition))

        return "".join(out)

    def render_schema_definition(self, definition: SchemaDefinition) -> str:
        """One nested definition section"""
        out = [f"**{definition.name}**\n"]
        for field in definition.fields:
            line = f"- `{field.name}`" + _type_parenthetical(field)

            if field.description:
                line += f": {field.description}"
                if field.enum:
                    line += f". Enums: {format_enum_values(field.enum)}"

            out.append(line + self._shared_link(field) + "\n")

        out.append("\n")
        return "".join(out)

    def _shared_link(self, field: FieldDescriptor, schema_name: str = "") -> str:
        """Link to the shared section of the schema a field points at, if any"""
        if not field.ref_name or field.ref_name == schema_name or field.ref_name not in self.shared_schemas:
            return ""
        return f" See [{field.ref_name}](#{make_schema_anchor(field.ref_name)})"

    def _warn_missing_description(self, field_name: str, schema_name: str) -> None:
        if schema_name:
            message = f"Field '{field_name}' in schema '{schema_name}' is missing a description"
        else:
            message = f"Field '{field_name}' is missing a description"
        logger.warning(message)
        self.warnings.append(message)

    # ------------------------------------------------------------------
    # Shared definitions block
    # ------------------------------------------------------------------

    def render_shared_definitions(self, components: Mapping[str, SchemaNode]) -> str:
        """
        One section per shared schema, sorted by name, each rendered exactly
        once with the endpoints that use it
        """
        if not self.shared_schemas:
            return ""

        out = [f"{SHARED_DEFINITIONS_HEADING}\n\n"]
        for schema_name, usage in sorted_usage(self.shared_schemas):
            out.append(f"### {schema_name}\n\n")

            if usage.endpoints:
                out.append(f"Used in: {', '.join(usage.endpoints)}\n\n")

            schema = components.get(schema_name)
            if schema is not None:
                out.append(self.render_shared_schema_fields(schema, schema_name))

        return "".join(out)

    def render_shared_schema_fields(self, schema: SchemaNode, schema_name: str) -> str:
        if schema.kind == SchemaKind.UNION:
            out: List[str] = []
            if schema.discriminator:
                out.append(discriminator_sentence(schema.discriminator))

            for variant in schema.one_of:
                if variant.is_named:
                    out.append(f"**{variant.name}**\n")
                if variant.is_named and variant.name != schema_name and variant.name in self.shared_schemas:
                    out.append(f"See [{variant.name}](#{make_schema_anchor(variant.name)})\n\n")
                    continue

                visits = VisitState({schema_name: 1})
                fields, nested = self.extractor.extract(variant, visits)
                out.append(self.render_fields_list(fields, nested, schema_name))

            return "".join(out)

        properties, _ = schema.merged_properties()
        if not properties:
            return ""

        fields, nested = self.extractor.extract(schema, VisitState())
        return self.render_fields_list(fields, nested, schema_name)
