"""
Schema graph models and the error taxonomy shared by every stage.
"""

from .models import (
    NO_EXAMPLE,
    JSON_MEDIA_TYPE,
    ApiDocument,
    Endpoint,
    MediaType,
    Parameter,
    RequestBody,
    Response,
    SchemaKind,
    SchemaNode,
)
from .errors import (
    ConversionError,
    DocumentError,
    MalformedExampleError,
    StructuralError,
    UnsupportedSchemaError,
)

__all__ = [
    "NO_EXAMPLE",
    "JSON_MEDIA_TYPE",
    "ApiDocument",
    "Endpoint",
    "MediaType",
    "Parameter",
    "RequestBody",
    "Response",
    "SchemaKind",
    "SchemaNode",
    "ConversionError",
    "DocumentError",
    "MalformedExampleError",
    "StructuralError",
    "UnsupportedSchemaError",
]
