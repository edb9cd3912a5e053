"""
API Schema Introspector - Loads OpenAPI documents from files or remote APIs.

Features:
- Local JSON/YAML files
- Remote documents, trying well-known documentation paths for bare base URLs
- Schema caching with 1-hour TTL (in memory and on disk)
- Optional HTTP Basic authentication
"""

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.auth import HTTPBasicAuth

from oasdoc.schema.errors import DocumentError
from oasdoc.schema.models import ApiDocument
from .schema_analyzer import SchemaAnalyzer, parse_openapi_text

logger = logging.getLogger(__name__)


class ApiSchemaIntrospector:
    """
    Loads an OpenAPI document and analyzes it into an ApiDocument

    Usage:
    ```python
    introspector = ApiSchemaIntrospector("https://petstore3.swagger.io/api/v3")
    document = introspector.get_document()
    print(f"Found {len(document.endpoints)} endpoints")
    ```
    """

    # Common openapi/swagger document locations, tried for bare base URLs
    SPEC_ENDPOINTS = [
        "/openapi.json",
        "/openapi.yaml",
        "/v3/api-docs",
        "/swagger.json",
        "/api-docs",
        "/docs/openapi.json",
    ]

    DOCUMENT_SUFFIXES = (".json", ".yaml", ".yml")

    # Cache TTL in seconds (1 hour)
    CACHE_TTL = 3600

    def __init__(
        self,
        source: str,
        credentials: Optional[Tuple[str, str]] = None,
        timeout: int = 30,
        cache_dir: Optional[Path] = None,
    ):
        """
        Initialize API Schema Introspector

        Args:
            source: Local file path, document URL or API base URL
            credentials: Tuple of (username, password) for Basic Auth
            timeout: HTTP request timeout in seconds
            cache_dir: Directory for caching fetched documents
        """
        self.source = source
        self.credentials = credentials
        self.timeout = timeout
        self.cache_dir = Path(cache_dir) if cache_dir else Path(".cache/openapi")

        self.session = requests.Session()
        if credentials:
            username, password = credentials
            self.session.auth = HTTPBasicAuth(username, password)

        self._spec: Optional[Dict[str, Any]] = None
        self._spec_timestamp: Optional[float] = None

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    def get_spec(self, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Get the raw OpenAPI document, using cache if available

        Raises:
            RuntimeError: If a remote document cannot be fetched from any candidate URL
            DocumentError: If a local file is missing or cannot be parsed
        """
        if not force_refresh and self._spec is not None and self._is_cache_valid():
            logger.info("Using cached openapi document")
            return self._spec

        if self.is_remote:
            spec = self._fetch_openapi_spec(force_refresh)
            if spec is None:
                raise RuntimeError(
                    f"Could not fetch OpenAPI document from {self.source}. "
                    f"Tried: {self._candidate_urls()}"
                )
        else:
            spec = self._load_file()

        self._spec = spec
        self._spec_timestamp = time.time()
        return spec

    def get_document(self, force_refresh: bool = False) -> ApiDocument:
        """Load and analyze the document"""
        document = SchemaAnalyzer().analyze_openapi_spec(self.get_spec(force_refresh))
        logger.info(f"Successfully introspected {len(document.endpoints)} API endpoints")
        return document

    def _load_file(self) -> Dict[str, Any]:
        path = Path(self.source)
        if not path.is_file():
            raise DocumentError(f"openapi document not found: {path}")

        logger.debug(f"Reading openapi document from {path}")
        return parse_openapi_text(path.read_bytes())

    def _candidate_urls(self) -> List[str]:
        url = self.source.rstrip("/")
        if url.lower().endswith(self.DOCUMENT_SUFFIXES):
            return [url]
        return [url] + [f"{url}{endpoint}" for endpoint in self.SPEC_ENDPOINTS]

    def _fetch_openapi_spec(self, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
        """Fetch the document, preferring the file cache unless force_refresh"""
        if not force_refresh:
            cached_spec = self._try_load_file_cache()
            if cached_spec is not None:
                logger.info("Loaded openapi document from file cache")
                return cached_spec

        spec = self._fetch_from_api()
        if spec:
            self._save_file_cache(spec)
            return spec

        return None

    def _fetch_from_api(self) -> Optional[Dict[str, Any]]:
        """Try fetching from every candidate URL"""
        for url in self._candidate_urls():
            try:
                logger.debug(f"Trying openapi document URL: {url}")

                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()

                spec = parse_openapi_text(response.text)
                if "openapi" not in spec and "swagger" not in spec:
                    logger.debug(f"Response from {url} is not an openapi document")
                    continue

                logger.info(f"Successfully fetched openapi document from {url}")
                return spec

            except requests.exceptions.RequestException as e:
                logger.debug(f"Failed to fetch from {url}: {e}")
                continue
            except DocumentError as e:
                logger.warning(f"Invalid document from {url}: {e}")
                continue

        logger.error(f"Could not fetch openapi document from any candidate of {self.source}")
        return None

    def _try_load_file_cache(self) -> Optional[Dict[str, Any]]:
        """Try to load cached document from file"""
        cache_file = self._get_cache_file_path()
        if not cache_file.exists():
            return None

        if time.time() - cache_file.stat().st_mtime > self.CACHE_TTL:
            logger.debug(f"Cache file expired: {cache_file}")
            return None

        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                spec = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error loading cache file: {e}")
            return None

        logger.debug(f"Loaded document from cache file: {cache_file}")
        return spec

    def _save_file_cache(self, spec: Dict[str, Any]) -> None:
        """Save document to file cache"""
        cache_file = self._get_cache_file_path()
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(cache_file, "w", encoding="utf-8") as f:
                json.dump(spec, f, indent=2, default=str)
            logger.debug(f"Saved document to cache file: {cache_file}")
        except OSError as e:
            logger.warning(f"Error saving cache file: {e}")

    def _get_cache_file_path(self) -> Path:
        """Get cache file path based on the source URL"""
        url_hash = hashlib.md5(self.source.encode()).hexdigest()[:8]
        return self.cache_dir / f"openapi_{url_hash}.json"

    def _is_cache_valid(self) -> bool:
        """Check if in-memory cache is still valid"""
        if self._spec_timestamp is None:
            return False

        age = time.time() - self._spec_timestamp
        return age < self.CACHE_TTL
