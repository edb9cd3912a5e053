"""
oasdoc - OpenAPI 3.x to Markdown API documentation.

Supports:
- Field definitions with nested schema sections
- Shared schema detection and a single shared definitions block
- Example payloads from explicit examples or generated from schemas
"""

from .converter import ConvertOptions, ConvertResult, DebugInfo, convert

__version__ = "0.1.0"

__all__ = [
    "ConvertOptions",
    "ConvertResult",
    "DebugInfo",
    "convert",
]
