"""
Unit tests for the schema analyzer

Tests:
- Document parsing: JSON and YAML text, version checks
- Component graph: $ref resolution, aliases, recursion, allOf/oneOf
- Endpoints: operation order, parameters, bodies and examples
"""

import json

import pytest

from oasdoc.introspection.schema_analyzer import (
    SchemaAnalyzer,
    analyze_document,
    extract_schema_name,
    parse_openapi_text,
)
from oasdoc.schema.errors import DocumentError, StructuralError
from oasdoc.schema.models import NO_EXAMPLE, SchemaKind


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def pet_spec():
    """Small OpenAPI 3.0 document with refs, recursion and a union"""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Pet Store", "version": "1.2.0", "description": "Pets"},
        "components": {
            "schemas": {
                "Pet": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "id": {"type": "integer", "format": "int64"},
                        "name": {"type": "string", "description": "Pet name"},
                        "owner": {"$ref": "#/components/schemas/Owner"},
                        "status": {"type": "string", "enum": ["available", "sold"]},
                    },
                },
                "Owner": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "pets": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
                    },
                },
                "Animal": {"$ref": "#/components/schemas/Pet"},
                "Cat": {"type": "object", "properties": {"kind": {"type": "string"}}},
                "Dog": {"type": "object", "properties": {"kind": {"type": "string"}}},
                "AnyPet": {
                    "oneOf": [
                        {"$ref": "#/components/schemas/Cat"},
                        {"$ref": "#/components/schemas/Dog"},
                    ],
                    "discriminator": {"propertyName": "kind"},
                },
            }
        },
        "paths": {
            "/pets/{petId}": {
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}},
                ],
                "post": {
                    "summary": "Update pet",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Pet"},
                                "examples": {
                                    "first": {"value": {"name": "Rex"}},
                                    "second": {"value": {"name": "Tom"}},
                                },
                            }
                        }
                    },
                    "responses": {"200": {"description": "OK"}},
                },
                "get": {
                    "summary": "Get pet",
                    "tags": ["pets"],
                    "parameters": [
                        {"name": "verbose", "in": "query", "schema": {"type": "boolean"}},
                    ],
                    "responses": {
                        "200": {
                            "description": "A pet",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/Pet"},
                                    "example": {"name": "Rex"},
                                }
                            },
                        },
                        "404": {"description": "Not found"},
                    },
                },
            }
        },
    }


# ============================================================================
# TEST: Parsing
# ============================================================================


class TestParseOpenapiText:
    """Tests for parse_openapi_text"""

    def test_parse_json(self, pet_spec):
        spec = parse_openapi_text(json.dumps(pet_spec))
        assert spec["info"]["title"] == "Pet Store"

    def test_parse_yaml(self):
        text = "openapi: 3.1.0\ninfo:\n  title: YAML API\n  version: '1'\npaths: {}\n"
        spec = parse_openapi_text(text)
        assert spec["openapi"] == "3.1.0"
        assert spec["info"]["title"] == "YAML API"

    def test_parse_bytes(self):
        spec = parse_openapi_text(b'{"openapi": "3.0.0"}')
        assert spec == {"openapi": "3.0.0"}

    def test_empty_input(self):
        with pytest.raises(DocumentError, match="openapi input cannot be empty"):
            parse_openapi_text("   ")

    def test_non_mapping_top_level(self):
        with pytest.raises(DocumentError):
            parse_openapi_text("- just\n- a list\n")

    def test_unparseable(self):
        with pytest.raises(DocumentError, match="failed to parse"):
            parse_openapi_text("openapi: [unclosed")

    def test_invalid_utf8_bytes(self):
        with pytest.raises(DocumentError, match="failed to parse openapi document"):
            parse_openapi_text(b"\xff\xfe openapi: 3.0.0")


class TestExtractSchemaName:
    """Tests for extract_schema_name"""

    def test_valid_reference(self):
        assert extract_schema_name("#/components/schemas/Pet") == "Pet"

    def test_invalid_prefix(self):
        with pytest.raises(StructuralError, match="invalid schema reference format"):
            extract_schema_name("#/definitions/Pet")

    def test_empty_name(self):
        with pytest.raises(StructuralError, match="empty schema name"):
            extract_schema_name("#/components/schemas/")


# ============================================================================
# TEST: SchemaAnalyzer
# ============================================================================


class TestSchemaAnalyzer:
    """Tests for SchemaAnalyzer class"""

    def test_analyze_basic(self, pet_spec):
        """Test document metadata and counts"""
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)

        assert document.title == "Pet Store"
        assert document.version == "1.2.0"
        assert document.openapi_version == "3.0.3"
        assert document.path_count == 1
        assert len(document.endpoints) == 2

    def test_swagger_2_rejected(self):
        with pytest.raises(DocumentError, match="only openapi 3.x is supported, got version: 2.0"):
            SchemaAnalyzer().analyze_openapi_spec({"swagger": "2.0", "paths": {}})

    def test_missing_version(self):
        with pytest.raises(DocumentError, match="failed to determine openapi version"):
            SchemaAnalyzer().analyze_openapi_spec({"info": {"title": "x"}})

    def test_openapi_4_rejected(self):
        with pytest.raises(DocumentError, match="got version: 4.0.0"):
            SchemaAnalyzer().analyze_openapi_spec({"openapi": "4.0.0"})

    def test_operation_order_within_path(self, pet_spec):
        """GET is emitted before POST regardless of declaration order"""
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)
        assert [e.key for e in document.endpoints] == ["GET /pets/{petId}", "POST /pets/{petId}"]

    def test_ref_resolution_shares_nodes(self, pet_spec):
        """Every $ref to a schema points at the same node, so cycles are preserved"""
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)
        pet = document.get_schema("Pet")
        owner = dict(pet.properties)["owner"]

        assert owner is document.get_schema("Owner")
        assert dict(owner.properties)["pets"].items is pet

    def test_alias_resolves_to_target(self, pet_spec):
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)
        assert document.get_schema("Animal") is document.get_schema("Pet")

    def test_circular_alias(self):
        spec = {
            "openapi": "3.0.0",
            "components": {
                "schemas": {
                    "A": {"$ref": "#/components/schemas/B"},
                    "B": {"$ref": "#/components/schemas/A"},
                }
            },
        }
        with pytest.raises(StructuralError, match="circular schema alias"):
            SchemaAnalyzer().analyze_openapi_spec(spec)

    def test_unresolved_ref_becomes_none(self):
        spec = {
            "openapi": "3.0.0",
            "components": {
                "schemas": {
                    "Order": {
                        "type": "object",
                        "properties": {
                            "ghost": {"$ref": "#/components/schemas/Missing"},
                            "id": {"type": "string"},
                        },
                    }
                }
            },
        }
        document = SchemaAnalyzer().analyze_openapi_spec(spec)
        props = dict(document.get_schema("Order").properties)

        assert props["ghost"] is None
        assert props["id"].type == "string"

    def test_schema_kinds(self, pet_spec):
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)

        assert document.get_schema("Pet").kind == SchemaKind.OBJECT
        assert document.get_schema("AnyPet").kind == SchemaKind.UNION
        assert document.get_schema("AnyPet").discriminator == "kind"
        assert [v.name for v in document.get_schema("AnyPet").one_of] == ["Cat", "Dog"]

    def test_property_metadata(self, pet_spec):
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)
        pet = document.get_schema("Pet")
        props = dict(pet.properties)

        assert [name for name, _ in pet.properties] == ["id", "name", "owner", "status"]
        assert pet.required == ["name"]
        assert props["id"].format == "int64"
        assert props["name"].description == "Pet name"
        assert props["status"].enum == ["available", "sold"]

    def test_path_level_parameters_merged(self, pet_spec):
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)
        get = document.get_endpoint("/pets/{petId}", "GET")
        post = document.get_endpoint("/pets/{petId}", "POST")

        assert [(p.name, p.location) for p in get.parameters] == [("petId", "path"), ("verbose", "query")]
        assert [(p.name, p.location) for p in post.parameters] == [("petId", "path")]
        assert get.parameters[0].required is True

    def test_media_examples(self, pet_spec):
        document = SchemaAnalyzer().analyze_openapi_spec(pet_spec)
        post = document.get_endpoint("/pets/{petId}", "POST")
        get = document.get_endpoint("/pets/{petId}", "GET")

        body_media = post.request_body.json_media()
        assert body_media.example is NO_EXAMPLE
        assert body_media.examples == [{"name": "Rex"}, {"name": "Tom"}]

        response_media = get.get_response("200").json_media()
        assert response_media.example == {"name": "Rex"}
        assert get.get_response("404").content == {}

    def test_explicit_null_example_is_kept(self):
        spec = {
            "openapi": "3.0.0",
            "paths": {
                "/x": {
                    "get": {
                        "responses": {
                            "200": {
                                "description": "ok",
                                "content": {"application/json": {"example": None}},
                            }
                        }
                    }
                }
            },
        }
        document = SchemaAnalyzer().analyze_openapi_spec(spec)
        media = document.endpoints[0].get_response("200").json_media()
        assert media.example is None

    def test_request_body_component_ref(self):
        spec = {
            "openapi": "3.0.0",
            "components": {
                "schemas": {"Item": {"type": "object", "properties": {"id": {"type": "string"}}}},
                "requestBodies": {
                    "ItemBody": {
                        "required": True,
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Item"}}},
                    }
                },
            },
            "paths": {
                "/items": {
                    "post": {
                        "requestBody": {"$ref": "#/components/requestBodies/ItemBody"},
                        "responses": {"204": {"description": "Created"}},
                    }
                }
            },
        }
        document = SchemaAnalyzer().analyze_openapi_spec(spec)
        body = document.endpoints[0].request_body

        assert body.required is True
        assert body.json_media().schema is document.get_schema("Item")

    def test_circular_component_refs(self):
        spec = {
            "openapi": "3.0.0",
            "components": {
                "requestBodies": {
                    "A": {"$ref": "#/components/requestBodies/B"},
                    "B": {"$ref": "#/components/requestBodies/A"},
                },
                "parameters": {
                    "Loop": {"$ref": "#/components/parameters/Loop"},
                },
            },
            "paths": {
                "/items": {
                    "post": {
                        "requestBody": {"$ref": "#/components/requestBodies/A"},
                        "responses": {"204": {"description": "Created"}},
                    }
                }
            },
        }
        with pytest.raises(StructuralError, match="circular requestBodies reference"):
            SchemaAnalyzer().analyze_openapi_spec(spec)

        del spec["paths"]["/items"]["post"]["requestBody"]
        spec["paths"]["/items"]["post"]["parameters"] = [{"$ref": "#/components/parameters/Loop"}]
        with pytest.raises(StructuralError, match="circular parameters reference"):
            SchemaAnalyzer().analyze_openapi_spec(spec)

    def test_to_dict(self, pet_spec):
        data = analyze_document(pet_spec).to_dict()
        assert data["title"] == "Pet Store"
        assert data["endpoints"] == ["GET /pets/{petId}", "POST /pets/{petId}"]
        assert "Pet" in data["components"]


class TestAllOfMerge:
    """Tests for allOf property merging"""

    def test_member_properties_first_own_override(self):
        spec = {
            "openapi": "3.0.0",
            "components": {
                "schemas": {
                    "Base": {
                        "type": "object",
                        "required": ["id"],
                        "properties": {
                            "id": {"type": "string"},
                            "note": {"type": "string", "description": "base note"},
                        },
                    },
                    "Extended": {
                        "allOf": [{"$ref": "#/components/schemas/Base"}],
                        "required": ["extra"],
                        "properties": {
                            "note": {"type": "string", "description": "own note"},
                            "extra": {"type": "integer"},
                        },
                    },
                }
            },
        }
        document = SchemaAnalyzer().analyze_openapi_spec(spec)
        extended = document.get_schema("Extended")
        properties, required = extended.merged_properties()

        assert extended.kind == SchemaKind.COMPOSITE
        assert [name for name, _ in properties] == ["id", "note", "extra"]
        assert dict(properties)["note"].description == "own note"
        assert set(required) == {"id", "extra"}
