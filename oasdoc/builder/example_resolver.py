"""
Example Resolver - Picks the example payload shown for a request or response body.

Priority, highest first:
1. explicit singular ``example`` on the holder
2. first entry of the holder's ``examples`` list (only when 1 is absent)
3. generated payload for the schema, looked up by schema name

Inline schemas cannot reach tier 3 because generated payloads are indexed
by name only; that is an UnsupportedSchemaError.
"""

import datetime
import json
import logging
from typing import Any, Callable, Mapping, Optional, Union

from oasdoc.schema.errors import MalformedExampleError, UnsupportedSchemaError
from oasdoc.schema.models import NO_EXAMPLE, MediaType, SchemaNode

logger = logging.getLogger(__name__)

JSON_INDENT = 3

ExampleHolder = Union[MediaType, SchemaNode]
PayloadLookup = Union[Mapping[str, Any], Callable[[str], Any]]


def decode_example(value: Any) -> Any:
    """
    Rebuild an example value as plain JSON-compatible data

    Mappings keep their declared key order, sequences stay sequences, scalars
    and explicit null pass through, dates become ISO strings.

    Raises:
        MalformedExampleError: For any other node shape
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, Mapping):
        decoded = {}
        for key, item in value.items():
            if isinstance(key, (str, int, float, bool)) or key is None:
                decoded[key if isinstance(key, str) else json.dumps(key)] = decode_example(item)
            else:
                raise MalformedExampleError(f"unsupported example mapping key: {key!r}")
        return decoded
    if isinstance(value, (list, tuple)):
        return [decode_example(item) for item in value]

    raise MalformedExampleError(f"unsupported example node of type {type(value).__name__}: {value!r}")


def explicit_example(holder: Optional[ExampleHolder]) -> Any:
    """
    Explicit example declared on a holder, or NO_EXAMPLE

    The singular example wins; the list is consulted only when it is absent,
    and only its first entry counts.
    """
    if holder is None:
        return NO_EXAMPLE
    if holder.example is not NO_EXAMPLE:
        return holder.example
    if holder.examples:
        return holder.examples[0]
    return NO_EXAMPLE


def format_json(value: Any) -> str:
    """Pretty-print an example the way documentation blocks show it"""
    return json.dumps(value, indent=JSON_INDENT, ensure_ascii=False)


class ExampleResolver:
    """
    Resolves example payloads against a precomputed payload lookup

    Args:
        payloads: schema name -> generated payload, or a callable taking the
            schema name and returning the payload (None when unavailable)
    """

    def __init__(self, payloads: PayloadLookup):
        self.payloads = payloads

    def resolve(self, holder: Optional[ExampleHolder], schema: Optional[SchemaNode] = None) -> Any:
        """
        Resolve the example for a body (holder = media type) or a schema

        Returns:
            Decoded example value, or NO_EXAMPLE when nothing is available

        Raises:
            UnsupportedSchemaError: If generation is needed for an inline schema
            MalformedExampleError: If the chosen example cannot be decoded
        """
        candidate = explicit_example(holder)
        if candidate is not NO_EXAMPLE:
            return decode_example(candidate)

        if schema is None and isinstance(holder, SchemaNode):
            schema = holder
        if schema is None:
            return NO_EXAMPLE

        return self._generated(schema)

    def resolve_json(self, holder: Optional[ExampleHolder], schema: Optional[SchemaNode] = None) -> str:
        """
        Resolve and format an example; malformed examples degrade to ""

        Raises:
            UnsupportedSchemaError: If generation is needed for an inline schema
        """
        try:
            value = self.resolve(holder, schema)
        except MalformedExampleError as e:
            logger.warning(f"Ignoring malformed example: {e}")
            return ""

        if value is NO_EXAMPLE:
            return ""
        return format_json(value)

    def _generated(self, schema: SchemaNode) -> Any:
        if not schema.is_named:
            raise UnsupportedSchemaError("inline schema not supported in request or response bodies, use $ref")

        if callable(self.payloads):
            value = self.payloads(schema.name)
            found = value is not None
        else:
            found = schema.name in self.payloads
            value = self.payloads.get(schema.name)

        if not found:
            logger.debug(f"No generated example for schema {schema.name}")
            return NO_EXAMPLE
        return decode_example(value)
