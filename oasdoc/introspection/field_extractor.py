"""
Field Extractor - Walks one schema into documentation field descriptors.

Each top-level call produces:
- the ordered field list of the schema itself
- the nested definition sections for named object schemas reached from it,
  in depth-first discovery order

Recursion is bounded two ways, both silent truncation rather than errors:
- a named schema already expanded once on the current path is not expanded again
- nothing is expanded once the current path holds ``max_depth`` named schemas
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Collection, Dict, List, Optional, Tuple

from oasdoc.schema.models import SchemaNode

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


@dataclass
class FieldDescriptor:
    """Documentation metadata for one property"""
    name: str
    type: str = ""
    required: bool = False
    description: str = ""
    enum: List[Any] = field(default_factory=list)
    is_array: bool = False
    is_object: bool = False
    ref_name: str = ""  # empty for inline objects

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "description": self.description,
            "enum": list(self.enum),
            "is_array": self.is_array,
            "is_object": self.is_object,
            "ref_name": self.ref_name,
        }


@dataclass
class SchemaDefinition:
    """A named object schema documented in its own section"""
    name: str
    fields: List[FieldDescriptor] = field(default_factory=list)


class VisitState:
    """
    Per-call recursion bookkeeping: schema name -> times on the current path.

    Never share one instance between separate top-level extractions.
    """

    def __init__(self, counts: Optional[Dict[str, int]] = None):
        self._counts: Dict[str, int] = dict(counts or {})

    def count(self, name: str) -> int:
        return self._counts.get(name, 0)

    def enter(self, name: str) -> None:
        self._counts[name] = self._counts.get(name, 0) + 1

    def leave(self, name: str) -> None:
        remaining = self._counts.get(name, 0) - 1
        if remaining > 0:
            self._counts[name] = remaining
        else:
            self._counts.pop(name, None)

    @property
    def depth(self) -> int:
        """Number of named schemas currently being expanded"""
        return sum(self._counts.values())

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counts)


ExtractionResult = Tuple[List[FieldDescriptor], List[SchemaDefinition]]


class FieldExtractor:
    """
    Extracts FieldDescriptors and nested SchemaDefinitions from a schema

    Usage:
    ```python
    extractor = FieldExtractor(max_depth=10, shared_schemas={"User"})
    fields, nested = extractor.extract(document.get_schema("Order"))
    ```

    Named schemas listed in ``shared_schemas`` are documented in the shared
    definitions block, so they are never expanded as nested sections.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, shared_schemas: Optional[Collection[str]] = None):
        self.max_depth = max_depth
        self.shared_schemas = frozenset(shared_schemas or ())

    def extract(self, schema: Optional[SchemaNode], visits: Optional[VisitState] = None) -> ExtractionResult:
        """
        Extract the fields of ``schema`` and the nested definitions below it

        Args:
            schema: Named or inline schema node
            visits: Recursion state; a fresh one is created for a top-level call

        Returns:
            (fields, nested definitions); both empty when nothing is expandable
        """
        if schema is None:
            return [], []
        if visits is None:
            visits = VisitState()

        if schema.is_named:
            if visits.count(schema.name) > 1:
                logger.debug(f"Not expanding recursive schema {schema.name}")
                return [], []
            if visits.depth >= self.max_depth:
                logger.debug(f"Depth limit {self.max_depth} reached at {schema.name}")
                return [], []

            visits.enter(schema.name)
            try:
                return self._extract_properties(schema, visits)
            finally:
                visits.leave(schema.name)

        if visits.depth >= self.max_depth:
            return [], []
        return self._extract_properties(schema, visits)

    def _extract_properties(self, schema: SchemaNode, visits: VisitState) -> ExtractionResult:
        properties, required_names = schema.merged_properties()
        if not properties:
            return [], []

        required = set(required_names)
        fields: List[FieldDescriptor] = []
        nested: List[SchemaDefinition] = []

        for prop_name, prop in properties:
            if prop is None:
                logger.debug(f"Skipping property '{prop_name}' without a resolvable schema")
                continue

            descriptor = FieldDescriptor(
                name=prop_name,
                type=prop.type,
                required=prop_name in required,
                description=prop.description,
                enum=list(prop.enum),
            )

            if prop.type == "array" and prop.items is not None:
                items = prop.items
                descriptor.is_array = True
                descriptor.type = items.type
                if items.is_named:
                    descriptor.is_object = True
                    descriptor.ref_name = items.name
                    nested.extend(self._expand_nested(items, visits))
                elif items.type == "object":
                    descriptor.is_object = True

            elif prop.type == "object":
                descriptor.is_object = True
                if prop.is_named:
                    descriptor.ref_name = prop.name
                    nested.extend(self._expand_nested(prop, visits))

            fields.append(descriptor)

        return fields, nested

    def _expand_nested(self, schema: SchemaNode, visits: VisitState) -> List[SchemaDefinition]:
        """Expand a referenced named schema into its own section plus everything below it"""
        if schema.name in self.shared_schemas:
            return []

        nested_fields, nested_below = self.extract(schema, visits)
        if not nested_fields:
            return []
        return [SchemaDefinition(name=schema.name, fields=nested_fields)] + nested_below

    def measure_depth(self, schema: Optional[SchemaNode]) -> int:
        """Length of the deepest chain of nested definition sections below ``schema``"""
        return self._measure(schema, VisitState())

    def _measure(self, schema: Optional[SchemaNode], visits: VisitState) -> int:
        if schema is None or not schema.is_named:
            return 0
        if visits.count(schema.name) > 1 or visits.depth >= self.max_depth:
            return 0

        deepest = 0
        visits.enter(schema.name)
        try:
            properties, _ = schema.merged_properties()
            for _name, prop in properties:
                if prop is None:
                    continue
                target = prop.items if prop.type == "array" else prop
                if target is None or not target.is_named or target.name in self.shared_schemas:
                    continue
                if prop.type != "array" and prop.type != "object":
                    continue
                fields, _ = self.extract(target, visits)
                if fields:
                    deepest = max(deepest, 1 + self._measure(target, visits))
        finally:
            visits.leave(schema.name)
        return deepest
