"""Tests for identifier normalisation."""

import pytest

from gopherapi.codegen.naming import (
    create_operation_id,
    is_media_type_json,
    is_standard_component_reference,
    media_type_to_camel_case,
    normalize,
    ordered_params_from_uri,
    path_to_type_name,
    ref_path_to_go_type,
    ref_to_type_name,
    sanitize_go_identity,
    schema_name_to_type_name,
    string_to_go_comment,
    to_camel_case,
    type_name_prefix,
)
from gopherapi.exceptions import CodeGenerationError, MalformedReferenceError


class TestCamelCase:
    """Tests for CamelCase conversion."""

    @pytest.mark.parametrize(
        'value,expected',
        [
            (' foo_bar ', 'FooBar'),
            ('foo2bar', 'Foo2Bar'),
            ('already_Camel', 'AlreadyCamel'),
            ('with-dash.and dot', 'WithDashAndDot'),
        ],
    )
    def test_to_camel_case(self, value, expected):
        """Test separators are dropped and start a new word."""
        assert to_camel_case(value) == expected

    @pytest.mark.parametrize(
        'value,expected',
        [
            ('httpOperationId', 'HTTPOperationID'),
            ('pet_id', 'PetID'),
            ('user_url', 'UserURL'),
            ('json_api', 'JSONAPI'),
            ('name', 'Name'),
        ],
    )
    def test_initialisms_are_uppercased(self, value, expected):
        """Test known initialisms are written in upper case."""
        assert normalize(value) == expected

    @pytest.mark.parametrize(
        'value',
        ['pet_id', 'httpOperationId', 'foo-bar baz', 'XMLHttpRequest', 'a1b2c3', 'ID'],
    )
    def test_normalize_is_idempotent(self, value):
        """Test normalising twice gives the same result."""
        once = normalize(value)
        assert normalize(once) == once


class TestTypeNames:
    """Tests for type name derivation."""

    @pytest.mark.parametrize(
        'name,expected',
        [
            ('$', 'DollarSign'),
            ('', 'Empty'),
            ('-foo', 'Minus'),
            ('1foo', 'N'),
            ('+-bar', 'PlusMinus'),
            ('foo', ''),
        ],
    )
    def test_type_name_prefix(self, name, expected):
        """Test leading symbols and digits get a word prefix."""
        assert type_name_prefix(name) == expected

    def test_schema_name_to_type_name(self):
        """Test component names become exported Go names."""
        assert schema_name_to_type_name('pet') == 'Pet'
        assert schema_name_to_type_name('-foo') == 'MinusFoo'
        assert schema_name_to_type_name('1foo') == 'N1Foo'

    def test_path_to_type_name(self):
        """Test structural paths are joined with underscores."""
        assert path_to_type_name(['Pet', 'owner', 'address']) == 'Pet_Owner_Address'
        assert path_to_type_name(('Pet',)) == 'Pet'

    def test_ref_path_to_go_type(self):
        """Test component references resolve to the component name."""
        assert ref_path_to_go_type('#/components/schemas/pet_owner') == 'PetOwner'

    @pytest.mark.parametrize(
        'ref', ['#/components/schemas', '#/components/schemas/Pet/properties/id']
    )
    def test_ref_path_to_go_type_rejects_other_depths(self, ref):
        """Test references that are not four parts deep are malformed."""
        with pytest.raises(MalformedReferenceError) as exc_info:
            ref_path_to_go_type(ref)
        assert exc_info.value.reference == ref
        assert exc_info.value.depth == len(ref.split('/'))

    def test_ref_to_type_name_unescapes_pointer(self):
        """Test deep references are named after their unescaped path."""
        ref = '#/paths/~1pets/get/responses/200'
        assert ref_to_type_name(ref) == 'Paths_Pets_Get_Responses_200'

    def test_is_standard_component_reference(self):
        """Test only direct component references are standard."""
        assert is_standard_component_reference('#/components/schemas/Pet')
        assert is_standard_component_reference('#/components/responses/Error')
        assert not is_standard_component_reference('#/components/schemas/Pet/properties/id')
        assert not is_standard_component_reference('#/paths/~1pets/get')


class TestMediaTypes:
    """Tests for media type helpers."""

    @pytest.mark.parametrize(
        'media_type,expected',
        [
            ('application/json', True),
            ('application/json; charset=utf-8', True),
            ('application/vnd.api+json', True),
            ('text/plain', False),
            ('json', False),
            (None, False),
        ],
    )
    def test_is_media_type_json(self, media_type, expected):
        assert is_media_type_json(media_type) is expected

    def test_media_type_to_camel_case(self):
        assert media_type_to_camel_case('application/json') == 'ApplicationJSON'
        assert media_type_to_camel_case('text/*') == 'TextWildcard'


class TestIdentifiers:
    """Tests for Go identifier helpers."""

    def test_sanitize_go_identity(self):
        """Test illegal characters and reserved names are escaped."""
        assert sanitize_go_identity('type') == '_type'
        assert sanitize_go_identity('string') == '_string'
        assert sanitize_go_identity('1abc') == '_abc'
        assert sanitize_go_identity('foo-bar') == 'foo_bar'

    def test_string_to_go_comment(self):
        """Test multi-line strings become comment blocks."""
        assert string_to_go_comment('line1\nline2', 'Name') == '// Name line1\n// line2'
        assert string_to_go_comment('   ') == ''
        assert string_to_go_comment(None) == ''

    def test_ordered_params_from_uri(self):
        assert ordered_params_from_uri('/pets/{petId}/toys/{toyId}') == ['petId', 'toyId']
        assert ordered_params_from_uri('/pets') == []


class TestOperationId:
    """Tests for operation identifiers."""

    def test_explicit_operation_id_wins(self):
        assert create_operation_id('get', '/pets', 'listPets') == 'ListPets'
        assert create_operation_id('get', '/pets/{id}', 'showPetById') == 'ShowPetByID'

    def test_derived_from_method_and_path(self):
        """Test the method and path segments are joined when no operationId exists."""
        assert create_operation_id('GET', '/pets/{petId}') == 'GetPetsPetID'

    def test_empty_method_or_path(self):
        with pytest.raises(CodeGenerationError):
            create_operation_id('', '/pets')
        with pytest.raises(CodeGenerationError):
            create_operation_id('get', '')
