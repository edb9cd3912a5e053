"""Errors raised while converting an OpenAPI document to Markdown."""


class ConversionError(Exception):
    """Base class for conversion failures"""


class DocumentError(ConversionError):
    """Input document or options are unusable (empty, unparseable, wrong version)"""


class StructuralError(ConversionError):
    """The schema graph cannot be traversed; aborts the whole conversion"""


class UnsupportedSchemaError(ConversionError):
    """An inline schema was given where a named schema is required for example lookup"""


class MalformedExampleError(ConversionError):
    """An example value has a shape that cannot be decoded"""
