"""Document loading utilities.

Reads an OpenAPI 3.x document from a local path or an http(s) URL, parses
it as YAML or JSON and validates it into the :class:`OpenAPI` model. This
is the only place where GopherAPI performs I/O; the resolution core always
works on a fully materialised document.
"""

import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import yaml
from pydantic import ValidationError

from gopherapi.exceptions import SchemaLoadError, SchemaValidationError
from gopherapi.openapi.models import OpenAPI

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Loads OpenAPI documents from URLs or file paths.

    Example:
        >>> loader = DocumentLoader()
        >>> document = loader.load('https://api.example.com/openapi.json')
        >>> # or
        >>> document = loader.load('/path/to/openapi.yaml')
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_path: str | Path | None = None,
    ):
        """Initialize the document loader.

        Args:
            http_client: Optional HTTP client to use for URL requests.
                        If not provided, a default client will be created.
            base_path: Base path for resolving relative file paths.
                      Defaults to current working directory.
        """
        self._http_client = http_client
        self._base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, source: str) -> OpenAPI:
        """Load and validate an OpenAPI document from a URL or file path.

        Args:
            source: URL or file path to the OpenAPI document.

        Returns:
            Validated OpenAPI object.

        Raises:
            SchemaLoadError: If the document cannot be loaded from the source.
            SchemaValidationError: If the document is not valid OpenAPI 3.x.
        """
        if self._is_url(source):
            content = self._load_from_url(source)
        else:
            content = self._load_from_file(source)

        return parse_document(content, source)

    def _is_url(self, text: str) -> bool:
        """Check if a string is a URL."""
        try:
            result = urlparse(text)
            return result.scheme in ('http', 'https')
        except ValueError:
            return False

    def _load_from_url(self, url: str) -> Any:
        """Load document content from a URL."""
        logger.debug(f'Fetching document from {url}')
        try:
            if self._http_client:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=30.0)

            response.raise_for_status()
            content_type = response.headers.get('content-type', '')
            content = response.text

            if 'yaml' in content_type or url.endswith(('.yaml', '.yml')):
                return yaml.safe_load(content)
            return json.loads(content)

        except httpx.HTTPError as e:
            raise SchemaLoadError(url, cause=e) from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(url, cause=e) from e

    def _load_from_file(self, file_path: str) -> Any:
        """Load document content from a file."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self._base_path / path

        if not path.exists():
            raise SchemaLoadError(
                str(file_path), cause=FileNotFoundError(f'File not found: {path}')
            )

        logger.debug(f'Reading document from {path}')
        try:
            content = path.read_text(encoding='utf-8')
            if path.suffix.lower() in ('.yaml', '.yml'):
                return yaml.safe_load(content)
            return json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(str(file_path), cause=e) from e
        except OSError as e:
            raise SchemaLoadError(str(file_path), cause=e) from e


def parse_document(content: Any, source: str = '<memory>') -> OpenAPI:
    """Validate already parsed document content into the OpenAPI model.

    Args:
        content: The decoded YAML or JSON document.
        source: A label for the document used in error messages.

    Raises:
        SchemaValidationError: If the content is not an OpenAPI 3.x document.
    """
    if not isinstance(content, dict):
        raise SchemaValidationError(source, ['document root must be a mapping'])

    if 'swagger' in content:
        raise SchemaValidationError(
            source, [f"Swagger {content['swagger']} documents are not supported"]
        )

    version = str(content.get('openapi', ''))
    if not version.startswith('3.'):
        raise SchemaValidationError(
            source, [f"unsupported OpenAPI version '{version}'"]
        )

    try:
        return OpenAPI.model_validate(content)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise SchemaValidationError(source, errors) from e


def load_document(source: str, http_client: httpx.Client | None = None) -> OpenAPI:
    """Load an OpenAPI document from a path or URL.

    Args:
        source: URL or file path to the OpenAPI document.
        http_client: Optional HTTP client used for URL sources.

    Returns:
        The validated document.
    """
    return DocumentLoader(http_client=http_client).load(source)
