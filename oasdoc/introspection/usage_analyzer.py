"""
Schema Usage Analyzer - Finds named schemas reused across endpoints.

A schema is "shared" when it is reached through a named reference from the
JSON request or response bodies of at least two distinct endpoints. Using
the same schema for the request and a response of one endpoint counts once.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Set, Tuple

from oasdoc.schema.models import JSON_MEDIA_TYPE, Endpoint

logger = logging.getLogger(__name__)


@dataclass
class SchemaUsage:
    """Where one shared schema is used"""
    schema_name: str
    endpoints: List[str] = field(default_factory=list)  # sorted, e.g. ["GET /users/{id}", "POST /users"]

    def to_dict(self) -> Dict[str, object]:
        return {"schema": self.schema_name, "endpoints": list(self.endpoints)}


def _named_body_schemas(endpoint: Endpoint) -> Iterator[str]:
    """Yield schema names referenced by the endpoint's JSON request/response bodies"""
    if endpoint.request_body is not None:
        media = endpoint.request_body.content.get(JSON_MEDIA_TYPE)
        if media is not None and media.schema is not None and media.schema.is_named:
            yield media.schema.name

    for response in endpoint.responses:
        media = response.content.get(JSON_MEDIA_TYPE)
        if media is not None and media.schema is not None and media.schema.is_named:
            yield media.schema.name


class SchemaUsageAnalyzer:
    """Builds the schema name -> endpoint keys map in one pass over all endpoints"""

    MIN_SHARED_ENDPOINTS = 2

    def collect_usage(self, endpoints: Iterable[Endpoint]) -> Dict[str, Set[str]]:
        """
        Record every (schema name, endpoint key) pair

        Returns:
            Mapping of schema name to the set of distinct endpoint keys
        """
        usage: Dict[str, Set[str]] = {}
        for endpoint in endpoints:
            for schema_name in _named_body_schemas(endpoint):
                usage.setdefault(schema_name, set()).add(endpoint.key)
        return usage

    def identify_shared_schemas(self, endpoints: Iterable[Endpoint]) -> Dict[str, SchemaUsage]:
        """
        Find schemas used by two or more distinct endpoints

        Returns:
            Mapping of schema name to SchemaUsage (endpoint list sorted)
        """
        shared: Dict[str, SchemaUsage] = {}
        for schema_name, endpoint_keys in self.collect_usage(endpoints).items():
            if len(endpoint_keys) >= self.MIN_SHARED_ENDPOINTS:
                shared[schema_name] = SchemaUsage(
                    schema_name=schema_name,
                    endpoints=sorted(endpoint_keys),
                )

        logger.debug(f"Identified {len(shared)} shared schemas: {sorted(shared)}")
        return shared


def identify_shared_response_schemas(endpoint: Endpoint) -> Dict[str, List[str]]:
    """
    Find schemas reused by several 2xx responses of a single endpoint

    Returns:
        Mapping of schema name to the sorted response codes using it
    """
    schema_to_codes: Dict[str, List[str]] = {}
    for response in endpoint.responses:
        if not response.is_success:
            continue
        media = response.content.get(JSON_MEDIA_TYPE)
        if media is None or media.schema is None or not media.schema.is_named:
            continue
        schema_to_codes.setdefault(media.schema.name, []).append(response.code)

    return {name: sorted(codes) for name, codes in schema_to_codes.items() if len(codes) >= 2}


def sorted_usage(shared: Dict[str, SchemaUsage]) -> List[Tuple[str, SchemaUsage]]:
    """Shared schemas ordered by name, the order the definitions block uses"""
    return sorted(shared.items(), key=lambda item: item[0])
