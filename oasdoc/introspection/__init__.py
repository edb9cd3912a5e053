"""
API Introspection Module

Turns an OpenAPI 3.x document into the data the Markdown renderer consumes:
- Document loading from files or URLs (with schema caching, 1 hour TTL)
- Schema graph construction with $ref resolution
- Shared schema detection across endpoints
- Field extraction with recursion and depth limits
"""

from .api_schema_introspector import ApiSchemaIntrospector
from .schema_analyzer import SchemaAnalyzer, analyze_document, extract_schema_name, parse_openapi_text
from .usage_analyzer import SchemaUsage, SchemaUsageAnalyzer, identify_shared_response_schemas
from .field_extractor import FieldDescriptor, FieldExtractor, SchemaDefinition, VisitState

__all__ = [
    "ApiSchemaIntrospector",
    "SchemaAnalyzer",
    "analyze_document",
    "extract_schema_name",
    "parse_openapi_text",
    "SchemaUsage",
    "SchemaUsageAnalyzer",
    "identify_shared_response_schemas",
    "FieldDescriptor",
    "FieldExtractor",
    "SchemaDefinition",
    "VisitState",
]
