"""Tests for whole-document collection."""

import pytest

from gopherapi.codegen.collector import (
    Collector,
    EnumDefinition,
    collect_enums,
    flatten_type_definitions,
)
from gopherapi.codegen.types import GoSchema, SpecLocation, TypeDefinition
from gopherapi.config import GenerateOptions
from gopherapi.exceptions import (
    DuplicateTypeError,
    TypeGenerationError,
    UnhandledTypeError,
)
from gopherapi.openapi import parse_document

from .fixtures import (
    MINIMAL_OPENAPI_SPEC,
    PETSTORE_SPEC,
    RECURSIVE_SPEC,
    with_schemas,
)


def enum_type(name: str, values: dict[str, str], go_type: str = 'string') -> TypeDefinition:
    return TypeDefinition(name=name, schema=GoSchema(go_type=go_type, enum_values=values))


def struct_type(name: str, additional_types=None) -> TypeDefinition:
    return TypeDefinition(
        name=name,
        schema=GoSchema(go_type='struct {\n}', additional_types=additional_types or []),
    )


class TestCollect:
    """Tests for the result of a collection run."""

    def test_empty_document(self):
        result = Collector(parse_document(MINIMAL_OPENAPI_SPEC)).collect()

        assert result.operations == []
        assert result.all_types() == []
        assert result.enums == []
        assert result.response_errors == []

    def test_types_are_grouped_by_location(self):
        result = Collector(parse_document(PETSTORE_SPEC)).collect()

        schemas = [t.name for t in result.type_definitions[SpecLocation.SCHEMA]]
        assert schemas == ['Pet', 'NewPet', 'Error']
        assert [t.name for t in result.type_definitions[SpecLocation.QUERY]] == [
            'ListPetsQuery'
        ]
        assert [t.name for t in result.type_definitions[SpecLocation.PATH]] == [
            'ShowPetByIDPath',
            'DeletePetPath',
        ]
        assert [t.name for t in result.type_definitions[SpecLocation.BODY]] == [
            'CreatePetBody'
        ]
        assert SpecLocation.UNION not in result.type_definitions
        assert result.union_types == []

    def test_type_schemas(self):
        result = Collector(parse_document(PETSTORE_SPEC)).collect()

        assert result.type_schemas['NewPet'].go_type.startswith('struct {')
        assert result.type_schemas['ListPetsResponse'].go_type == '[]Pet'

    def test_collection_is_deterministic(self):
        """Test two runs over the same document produce the same types."""
        document = parse_document(PETSTORE_SPEC)

        first = Collector(document).collect()
        second = Collector(document).collect()

        assert [t.name for t in first.all_types()] == [t.name for t in second.all_types()]
        assert [t.schema.go_type for t in first.all_types()] == [
            t.schema.go_type for t in second.all_types()
        ]
        assert first.response_errors == second.response_errors

    def test_every_type_is_registered(self):
        result = Collector(parse_document(PETSTORE_SPEC)).collect()

        for type_def in result.all_types():
            assert result.type_tracker.exists(type_def.name)

    def test_recursive_schema(self):
        result = Collector(parse_document(RECURSIVE_SPEC)).collect()
        node = result.type_schemas['Node']

        fields = {p.go_name: p for p in node.properties}
        assert fields['Next'].go_type_def() == '*Node'
        assert fields['Children'].go_type_def() == '[]Node'

    def test_error_mapping_marks_types(self):
        options = GenerateOptions(error_mapping={'Pet': 'name'})

        result = Collector(parse_document(PETSTORE_SPEC), options).collect()

        assert result.response_errors == ['Error', 'Pet']

    def test_component_failure_names_the_component(self):
        spec = with_schemas({'Upload': {'type': 'file'}})

        with pytest.raises(TypeGenerationError) as exc_info:
            Collector(parse_document(spec)).collect()

        assert exc_info.value.type_name == 'Upload'
        assert exc_info.value.schema_path == '#/components/schemas/Upload'
        assert isinstance(exc_info.value.__cause__, UnhandledTypeError)
        assert 'Upload' in str(exc_info.value)


class TestEnums:
    """Tests for enum collection."""

    def test_enum_components(self):
        spec = with_schemas(
            {
                'Status': {'type': 'string', 'enum': ['active', 'inactive']},
                'Level': {'type': 'integer', 'enum': [1, 2]},
            }
        )

        result = Collector(parse_document(spec)).collect()
        enums = {e.type_name: e for e in result.enums}

        assert enums['Status'].values == {
            'StatusActive': 'active',
            'StatusInactive': 'inactive',
        }
        assert enums['Status'].value_wrapper == '"'
        assert enums['Level'].values == {'LevelN1': '1', 'LevelN2': '2'}
        assert enums['Level'].value_wrapper == ''

    def test_unprefixed_enum_values(self):
        spec = with_schemas({'Status': {'type': 'string', 'enum': ['active', 'inactive']}})
        options = GenerateOptions(always_prefix_enum_values=False)

        result = Collector(parse_document(spec), options).collect()

        assert result.enums[0].values == {'Active': 'active', 'Inactive': 'inactive'}
        assert result.enums[0].prefix_type_name is False

    def test_colliding_constants_are_prefixed(self):
        enums = collect_enums(
            [
                enum_type('Status', {'Active': 'active'}),
                enum_type('State', {'Active': 'active', 'Gone': 'gone'}),
                enum_type('Color', {'Red': 'red'}),
            ]
        )

        prefixed = {e.type_name: e.prefix_type_name for e in enums}
        assert prefixed == {'Status': True, 'State': True, 'Color': False}

    def test_constant_named_like_a_type_is_prefixed(self):
        enums = collect_enums(
            [struct_type('Pet'), enum_type('Kind', {'Pet': 'pet', 'Toy': 'toy'})]
        )

        assert enums == [
            EnumDefinition(
                type_name='Kind',
                schema=enums[0].schema,
                value_wrapper='"',
                prefix_type_name=True,
            )
        ]

    def test_constant_named_like_its_enum_is_prefixed(self):
        enums = collect_enums([enum_type('Active', {'Active': 'active'})])
        assert enums[0].prefix_type_name is True


class TestFlattenTypeDefinitions:
    """Tests for flattening auxiliary types."""

    def test_additional_types_follow_their_parent(self):
        child = struct_type('Child')
        parent = struct_type('Parent', [child])

        flat = flatten_type_definitions([parent, struct_type('Other')])

        assert [t.name for t in flat] == ['Parent', 'Child', 'Other']

    def test_identical_duplicates_are_kept_once(self):
        flat = flatten_type_definitions([struct_type('Pet'), struct_type('Pet')])
        assert [t.name for t in flat] == ['Pet']

    def test_conflicting_duplicates(self):
        other = TypeDefinition(name='Pet', schema=GoSchema(go_type='string'))

        with pytest.raises(DuplicateTypeError) as exc_info:
            flatten_type_definitions([struct_type('Pet'), other])

        assert exc_info.value.name == 'Pet'
