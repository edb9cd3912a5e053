"""
Unit tests for the schema usage analyzer
"""

import pytest

from oasdoc.introspection.usage_analyzer import (
    SchemaUsage,
    SchemaUsageAnalyzer,
    identify_shared_response_schemas,
    sorted_usage,
)
from oasdoc.schema.models import Endpoint, MediaType, RequestBody, Response, SchemaKind, SchemaNode


def json_content(schema):
    return {"application/json": MediaType(schema=schema)}


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def user_schema():
    return SchemaNode(name="User", kind=SchemaKind.OBJECT, type="object")


@pytest.fixture
def user_endpoints(user_schema):
    """POST /users uses User for request and response, GET /users/{id} for its response"""
    create = Endpoint(
        method="POST",
        path="/users",
        request_body=RequestBody(content=json_content(user_schema)),
        responses=[Response(code="201", content=json_content(user_schema))],
    )
    fetch = Endpoint(
        method="GET",
        path="/users/{id}",
        responses=[Response(code="200", content=json_content(user_schema))],
    )
    return [create, fetch]


# ============================================================================
# TEST: SchemaUsageAnalyzer
# ============================================================================


class TestSchemaUsageAnalyzer:
    """Tests for SchemaUsageAnalyzer"""

    def test_shared_across_endpoints(self, user_endpoints):
        shared = SchemaUsageAnalyzer().identify_shared_schemas(user_endpoints)

        assert list(shared) == ["User"]
        assert shared["User"].endpoints == ["GET /users/{id}", "POST /users"]

    def test_request_and_response_of_one_endpoint_count_once(self, user_endpoints):
        usage = SchemaUsageAnalyzer().collect_usage(user_endpoints[:1])
        assert usage == {"User": {"POST /users"}}

        shared = SchemaUsageAnalyzer().identify_shared_schemas(user_endpoints[:1])
        assert shared == {}

    def test_inline_schemas_never_recorded(self):
        inline = SchemaNode(kind=SchemaKind.OBJECT, type="object")
        endpoints = [
            Endpoint(method="GET", path="/a", responses=[Response(code="200", content=json_content(inline))]),
            Endpoint(method="GET", path="/b", responses=[Response(code="200", content=json_content(inline))]),
        ]

        assert SchemaUsageAnalyzer().collect_usage(endpoints) == {}

    def test_non_json_content_ignored(self, user_schema):
        endpoints = [
            Endpoint(
                method="GET",
                path=f"/export{i}",
                responses=[Response(code="200", content={"application/xml": MediaType(schema=user_schema)})],
            )
            for i in range(2)
        ]

        assert SchemaUsageAnalyzer().identify_shared_schemas(endpoints) == {}

    def test_to_dict(self):
        usage = SchemaUsage(schema_name="User", endpoints=["GET /users"])
        assert usage.to_dict() == {"schema": "User", "endpoints": ["GET /users"]}

    def test_sorted_usage(self):
        shared = {
            "Zebra": SchemaUsage("Zebra", ["GET /z"]),
            "Apple": SchemaUsage("Apple", ["GET /a"]),
        }
        assert [name for name, _ in sorted_usage(shared)] == ["Apple", "Zebra"]


class TestSharedResponseSchemas:
    """Tests for identify_shared_response_schemas"""

    def test_schema_reused_by_success_codes(self, user_schema):
        endpoint = Endpoint(
            method="PUT",
            path="/users/{id}",
            responses=[
                Response(code="200", content=json_content(user_schema)),
                Response(code="201", content=json_content(user_schema)),
                Response(code="400", content=json_content(user_schema)),
            ],
        )

        assert identify_shared_response_schemas(endpoint) == {"User": ["200", "201"]}

    def test_single_use_not_reported(self, user_schema):
        endpoint = Endpoint(
            method="GET",
            path="/users/{id}",
            responses=[Response(code="200", content=json_content(user_schema))],
        )

        assert identify_shared_response_schemas(endpoint) == {}
