"""
Payload Builder - Generates representative example payloads for named schemas

Integrates:
- Explicit examples: schema-level first, then per property
- Nested object/array construction following the schema graph
- Cycle and depth limits so self-referencing schemas terminate
- Seeded values so output is stable between runs
"""

import logging
import random
from typing import Any, Dict, Mapping, Optional, Set

from oasdoc.schema.errors import ConversionError
from oasdoc.schema.models import NO_EXAMPLE, SchemaKind, SchemaNode
from .example_resolver import decode_example, explicit_example

logger = logging.getLogger(__name__)

DEFAULT_EXAMPLE_DEPTH = 5
DEFAULT_SEED = 42

# Placeholders for well-known string formats
FORMAT_PLACEHOLDERS = {
    "date": "2024-01-15",
    "date-time": "2024-01-15T10:30:00Z",
    "time": "10:30:00",
    "email": "user@example.com",
    "uuid": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
    "uri": "https://example.com",
    "url": "https://example.com",
    "hostname": "example.com",
    "ipv4": "192.168.0.1",
    "ipv6": "2001:db8::1",
    "byte": "U3dhZ2dlciByb2Nrcw==",
    "password": "********",
}


class ExamplePayloadBuilder:
    """
    Builds example payloads for the component schemas of one document

    Usage:
    ```python
    builder = ExamplePayloadBuilder(document.components, max_depth=5, seed=42)
    payloads = builder.build_all()
    # payloads["User"] -> {"id": "string", "name": "string"}
    ```
    """

    def __init__(
        self,
        components: Mapping[str, SchemaNode],
        max_depth: int = DEFAULT_EXAMPLE_DEPTH,
        seed: int = DEFAULT_SEED,
    ):
        """
        Args:
            components: Named schemas of the document
            max_depth: Maximum nesting depth of generated values
            seed: Seed for generated numbers
        """
        self.components = components
        self.max_depth = max_depth
        self.seed = seed
        self._random = random.Random(seed)

    def build(self, name: str) -> Any:
        """
        Build the example payload for one named schema

        Raises:
            KeyError: If the schema name is unknown
        """
        schema = self.components[name]
        # Reseed per schema so one payload does not depend on which came before it
        self._random = random.Random(f"{self.seed}:{name}")
        return self._build_value(schema, depth=0, path=set())

    def build_all(self) -> Dict[str, Any]:
        """
        Build payloads for every named schema

        Schemas that fail are logged and left out.

        Returns:
            schema name -> payload; treat as read-only once built
        """
        payloads: Dict[str, Any] = {}
        for name in self.components:
            try:
                payloads[name] = self.build(name)
            except (ConversionError, RecursionError, ValueError) as e:
                logger.warning(f"Could not generate example for schema {name}: {e}")
                continue

        logger.info(f"Generated {len(payloads)} example payloads from {len(self.components)} schemas")
        return payloads

    def _build_value(self, schema: Optional[SchemaNode], depth: int, path: Set[str]) -> Any:
        if schema is None:
            return None

        declared = explicit_example(schema)
        if declared is not NO_EXAMPLE:
            return decode_example(declared)

        if schema.is_named:
            if schema.name in path:
                return self._terminal(schema)
            path = path | {schema.name}

        if depth >= self.max_depth and schema.kind != SchemaKind.SCALAR:
            return self._terminal(schema)

        if schema.kind == SchemaKind.UNION:
            return self._build_value(schema.one_of[0], depth, path) if schema.one_of else None

        if schema.kind in (SchemaKind.OBJECT, SchemaKind.COMPOSITE):
            return self._build_object(schema, depth, path)

        if schema.kind == SchemaKind.ARRAY:
            if schema.items is None:
                return []
            item = self._build_value(schema.items, depth + 1, path)
            return [] if item is None else [item]

        return self._build_scalar(schema)

    def _build_object(self, schema: SchemaNode, depth: int, path: Set[str]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        properties, _ = schema.merged_properties()
        for prop_name, prop in properties:
            if prop is None:
                continue
            payload[prop_name] = self._build_value(prop, depth + 1, path)
        return payload

    def _build_scalar(self, schema: SchemaNode) -> Any:
        if schema.enum:
            return schema.enum[0]
        if schema.default is not NO_EXAMPLE:
            return schema.default

        if schema.type == "string":
            return FORMAT_PLACEHOLDERS.get(schema.format or "", "string")
        if schema.type == "integer":
            low = int(schema.minimum) if schema.minimum is not None else 1
            high = int(schema.maximum) if schema.maximum is not None else max(low, 100)
            return self._random.randint(low, max(low, high))
        if schema.type == "number":
            low = float(schema.minimum) if schema.minimum is not None else 0.0
            high = float(schema.maximum) if schema.maximum is not None else max(low, 100.0)
            return round(self._random.uniform(low, max(low, high)), 2)
        if schema.type == "boolean":
            return True
        if schema.type == "null":
            return None
        return None

    @staticmethod
    def _terminal(schema: SchemaNode) -> Any:
        """Value used where a cycle or the depth limit stops generation"""
        if schema.kind == SchemaKind.ARRAY:
            return []
        return None


def build_component_examples(
    components: Mapping[str, SchemaNode],
    max_depth: int = DEFAULT_EXAMPLE_DEPTH,
    seed: int = DEFAULT_SEED,
) -> Dict[str, Any]:
    """Build the name -> payload lookup for all component schemas"""
    builder = ExamplePayloadBuilder(components, max_depth=max_depth, seed=seed)
    return builder.build_all()
