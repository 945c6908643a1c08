"""Tests for document loading."""

import json
import tempfile
from pathlib import Path

import httpx
import pytest

from gopherapi.exceptions import SchemaLoadError, SchemaValidationError
from gopherapi.openapi import DocumentLoader, load_document, parse_document

from .fixtures import PETSTORE_SPEC, get_spec_as_json, get_spec_as_yaml


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestParseDocument:
    """Tests for validating decoded documents."""

    def test_valid_document(self):
        document = parse_document(PETSTORE_SPEC)

        assert document.openapi == '3.0.0'
        assert list(document.components.schemas) == ['Pet', 'NewPet', 'Error']
        assert list(document.paths) == ['/pets', '/pets/{petId}']

    def test_root_must_be_a_mapping(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            parse_document(['not', 'a', 'document'], 'list.yaml')

        assert exc_info.value.source == 'list.yaml'

    def test_swagger_is_rejected(self):
        with pytest.raises(SchemaValidationError, match='Swagger 2.0'):
            parse_document({'swagger': '2.0', 'info': {}, 'paths': {}})

    @pytest.mark.parametrize('version', ['', '2.0', '4.0.0'])
    def test_unsupported_version(self, version):
        with pytest.raises(SchemaValidationError, match='unsupported OpenAPI version'):
            parse_document({'openapi': version, 'info': {}, 'paths': {}})

    def test_extensions_are_kept(self):
        spec = {
            **PETSTORE_SPEC,
            'components': {
                'schemas': {'Pet': {'type': 'object', 'x-go-type-name': 'Animal'}}
            },
        }

        document = parse_document(spec)

        assert document.components.schemas['Pet'].extensions == {'x-go-type-name': 'Animal'}


class TestLoadFromFile:
    """Tests for loading documents from files."""

    @pytest.mark.parametrize(
        'suffix,dump', [('.yaml', get_spec_as_yaml), ('.json', get_spec_as_json)]
    )
    def test_load_file(self, suffix, dump):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir, f'openapi{suffix}')
            path.write_text(dump(PETSTORE_SPEC))

            document = load_document(str(path))

        assert document.info.title == 'Petstore API'

    def test_relative_path_uses_base_path(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            Path(tmp_dir, 'openapi.yaml').write_text(get_spec_as_yaml(PETSTORE_SPEC))

            document = DocumentLoader(base_path=tmp_dir).load('openapi.yaml')

        assert 'Pet' in document.components.schemas

    def test_missing_file(self):
        with pytest.raises(SchemaLoadError) as exc_info:
            load_document('/nonexistent/openapi.yaml')

        assert exc_info.value.source == '/nonexistent/openapi.yaml'
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_malformed_json(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir, 'openapi.json')
            path.write_text('{"openapi": ')

            with pytest.raises(SchemaLoadError):
                load_document(str(path))


class TestLoadFromURL:
    """Tests for loading documents over HTTP."""

    def test_load_json_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == '/openapi.json'
            return httpx.Response(200, json=PETSTORE_SPEC)

        document = load_document(
            'https://api.example.com/openapi.json', http_client=mock_client(handler)
        )

        assert document.info.title == 'Petstore API'

    def test_load_yaml_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                text=get_spec_as_yaml(PETSTORE_SPEC),
                headers={'content-type': 'application/yaml'},
            )

        document = load_document(
            'https://api.example.com/spec', http_client=mock_client(handler)
        )

        assert len(document.paths) == 2

    def test_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text='not found')

        with pytest.raises(SchemaLoadError) as exc_info:
            load_document(
                'https://api.example.com/openapi.json', http_client=mock_client(handler)
            )

        assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)

    def test_invalid_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text='<html></html>')

        with pytest.raises(SchemaLoadError) as exc_info:
            load_document(
                'https://api.example.com/openapi.json', http_client=mock_client(handler)
            )

        assert isinstance(exc_info.value.cause, json.JSONDecodeError)
