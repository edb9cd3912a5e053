"""
Example Payload Module

Produces the JSON examples shown in request and response sections:
- ExamplePayloadBuilder: generated payloads for named schemas
- ExampleResolver: explicit example > first listed example > generated payload
- decode_example: faithful decoding of declared example values
"""

from .payload_builder import ExamplePayloadBuilder, build_component_examples
from .example_resolver import ExampleResolver, decode_example, explicit_example, format_json

__all__ = [
    "ExamplePayloadBuilder",
    "ExampleResolver",
    "build_component_examples",
    "decode_example",
    "explicit_example",
    "format_json",
]
