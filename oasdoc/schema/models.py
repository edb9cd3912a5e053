"""Schema graph models built from an OpenAPI 3.x document."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class _NoExample:
    """Marker for an example slot that was not declared at all."""

    def __repr__(self):
        return "NO_EXAMPLE"

    def __bool__(self):
        return False


# Distinct from None: `example: null` is a declared example.
NO_EXAMPLE = _NoExample()

JSON_MEDIA_TYPE = "application/json"


class SchemaKind(str, Enum):
    """Structural kind of a schema node"""
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"
    UNION = "union"
    COMPOSITE = "composite"


@dataclass(eq=False)
class SchemaNode:
    """
    One schema in the graph.

    Named nodes (``name`` non-empty) come from ``components.schemas`` and are
    shared by every ``$ref`` pointing at them, so the graph may contain
    cycles. Inline bodies get an empty name.

    ``properties`` keeps declaration order as ``(name, schema)`` pairs; a
    ``None`` schema marks a property whose reference could not be resolved.
    """
    name: str = ""
    kind: SchemaKind = SchemaKind.SCALAR
    type: str = ""
    format: Optional[str] = None
    description: str = ""
    properties: List[Tuple[str, Optional["SchemaNode"]]] = field(default_factory=list)
    required: List[str] = field(default_factory=list)
    enum: List[Any] = field(default_factory=list)
    items: Optional["SchemaNode"] = None
    all_of: List["SchemaNode"] = field(default_factory=list)
    one_of: List["SchemaNode"] = field(default_factory=list)
    discriminator: Optional[str] = None
    default: Any = NO_EXAMPLE
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    example: Any = NO_EXAMPLE
    examples: List[Any] = field(default_factory=list)

    @property
    def is_named(self) -> bool:
        return bool(self.name)

    def merged_properties(self) -> Tuple[List[Tuple[str, Optional["SchemaNode"]]], List[str]]:
        """
        Merge allOf member properties with the node's own properties.

        Own declarations win on a name collision (keeping the member's
        position, like an ordered map update). Required names are unioned.
        """
        if not self.all_of:
            return list(self.properties), list(self.required)

        merged: Dict[str, Optional[SchemaNode]] = {}
        required: List[str] = []

        for member in self.all_of:
            if member is None:
                continue
            for prop_name, prop_schema in member.properties:
                merged[prop_name] = prop_schema
            required.extend(member.required)

        for prop_name, prop_schema in self.properties:
            merged[prop_name] = prop_schema
        required.extend(self.required)

        return list(merged.items()), required

    def __repr__(self):
        label = self.name or "<inline>"
        return f"SchemaNode({label}, kind={self.kind.value}, type={self.type!r})"


@dataclass
class MediaType:
    """A single content entry of a request or response body"""
    schema: Optional[SchemaNode] = None
    example: Any = NO_EXAMPLE
    examples: List[Any] = field(default_factory=list)


@dataclass
class Parameter:
    """An operation parameter (path, query, header or cookie)"""
    name: str
    location: str
    required: bool = False
    description: str = ""
    schema: Optional[SchemaNode] = None


@dataclass
class RequestBody:
    """Request body with content keyed by media type"""
    description: str = ""
    required: bool = False
    content: Dict[str, MediaType] = field(default_factory=dict)

    def json_media(self) -> Optional[MediaType]:
        return self.content.get(JSON_MEDIA_TYPE)


@dataclass
class Response:
    """Response for one status code"""
    code: str
    description: str = ""
    content: Dict[str, MediaType] = field(default_factory=dict)

    def json_media(self) -> Optional[MediaType]:
        return self.content.get(JSON_MEDIA_TYPE)

    @property
    def is_success(self) -> bool:
        return self.code.startswith("2")


@dataclass
class Endpoint:
    """One operation, identified by HTTP method and path"""
    method: str
    path: str
    summary: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: List[Response] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Endpoint key, e.g. ``POST /users``"""
        return f"{self.method} {self.path}"

    def get_response(self, code: str) -> Optional[Response]:
        for response in self.responses:
            if response.code == code:
                return response
        return None


@dataclass
class ApiDocument:
    """Complete schema graph extracted from an OpenAPI document"""
    openapi_version: str = ""
    title: str = ""
    version: str = ""
    description: str = ""
    path_count: int = 0
    endpoints: List[Endpoint] = field(default_factory=list)
    components: Dict[str, SchemaNode] = field(default_factory=dict)

    def get_endpoint(self, path: str, method: str = "GET") -> Optional[Endpoint]:
        """Get endpoint by path and method"""
        key = f"{method.upper()} {path}"
        for endpoint in self.endpoints:
            if endpoint.key == key:
                return endpoint
        return None

    def get_schema(self, name: str) -> Optional[SchemaNode]:
        return self.components.get(name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "openapi": self.openapi_version,
            "title": self.title,
            "version": self.version,
            "paths": self.path_count,
            "endpoints": [endpoint.key for endpoint in self.endpoints],
            "components": list(self.components.keys()),
        }
