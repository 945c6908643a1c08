"""Tests for allOf merging."""

import pytest

from gopherapi.codegen.collector import Collector
from gopherapi.codegen.merge import (
    is_discriminated_union_with_child,
    is_metadata_only_schema,
    merge_openapi_schemas,
)
from gopherapi.codegen.resolver import ReferenceResolver
from gopherapi.exceptions import SchemaMergeError, TypeGenerationError
from gopherapi.openapi import parse_document
from gopherapi.openapi.models import Schema

from .fixtures import (
    MINIMAL_OPENAPI_SPEC,
    PETS_UNION_SPEC,
    RECURSIVE_SPEC,
    with_schemas,
)


@pytest.fixture
def resolver():
    """A resolver over an empty document."""
    return ReferenceResolver(parse_document(MINIMAL_OPENAPI_SPEC))


def find_type(result, name):
    return next(t for t in result.all_types() if t.name == name)


class TestMergeOpenAPISchemas:
    """Tests for facet by facet merging of raw schemas."""

    def test_first_schema_missing(self, resolver):
        s2 = Schema(type='string')
        assert merge_openapi_schemas(None, s2, resolver) is s2

    def test_untyped_schemas_are_ignored(self, resolver):
        s1 = Schema(type='object', properties={'id': Schema(type='string')})
        description_only = Schema(description='Just a note')

        assert merge_openapi_schemas(s1, description_only, resolver) is s1
        assert merge_openapi_schemas(description_only, s1, resolver) is s1

    def test_properties_and_required_are_combined(self, resolver):
        s1 = Schema(
            type='object', required=['id'], properties={'id': Schema(type='integer')}
        )
        s2 = Schema(
            type='object', required=['name'], properties={'name': Schema(type='string')}
        )

        merged = merge_openapi_schemas(s1, s2, resolver)

        assert list(merged.properties) == ['id', 'name']
        assert merged.required == ['id', 'name']
        assert merged.types == ['object']

    def test_nullable_merges_permissively(self, resolver):
        merged = merge_openapi_schemas(
            Schema(type='string', nullable=True), Schema(type='string'), resolver
        )
        assert merged.nullable is True

    def test_enums_are_combined(self, resolver):
        merged = merge_openapi_schemas(
            Schema(type='string', enum=['a']), Schema(type='string', enum=['b']), resolver
        )
        assert merged.enum == ['a', 'b']

    def test_extensions_are_carried(self, resolver):
        s1 = Schema(type='object', **{'x-go-type-name': 'Renamed'})
        s2 = Schema(type='object', **{'x-omitempty': True})

        merged = merge_openapi_schemas(s1, s2, resolver)

        assert merged.extensions == {'x-go-type-name': 'Renamed', 'x-omitempty': True}

    def test_additional_properties_false_wins(self, resolver):
        merged = merge_openapi_schemas(
            Schema(type='object', additionalProperties=True),
            Schema(type='object', additionalProperties=False),
            resolver,
        )
        assert merged.additionalProperties is False

    @pytest.mark.parametrize(
        'facet,s1,s2',
        [
            ('type', Schema(type='string'), Schema(type='integer')),
            (
                'format',
                Schema(type='string', format='date'),
                Schema(type='string', format='date-time'),
            ),
            ('default', Schema(type='string', default='a'), Schema(type='string', default='b')),
            (
                'uniqueItems',
                Schema(type='array', uniqueItems=True),
                Schema(type='array'),
            ),
            ('readOnly', Schema(type='string', readOnly=True), Schema(type='string')),
            (
                'exclusiveMinimum',
                Schema(type='integer', exclusiveMinimum=1),
                Schema(type='integer', exclusiveMinimum=2),
            ),
            (
                'additionalProperties',
                Schema(type='object', additionalProperties=Schema(type='string')),
                Schema(type='object', additionalProperties=Schema(type='integer')),
            ),
        ],
    )
    def test_conflicting_facets(self, resolver, facet, s1, s2):
        with pytest.raises(SchemaMergeError) as exc_info:
            merge_openapi_schemas(s1, s2, resolver)
        assert exc_info.value.facet == facet


class TestSchemaPredicates:
    """Tests for the helpers deciding how allOf branches are treated."""

    def test_metadata_only_schema(self):
        assert is_metadata_only_schema(None)
        assert is_metadata_only_schema(Schema(description='note', title='Note'))
        assert not is_metadata_only_schema(Schema(type='string'))
        assert not is_metadata_only_schema(Schema(properties={'a': Schema(type='string')}))

    def test_discriminated_union_with_child(self):
        document = parse_document(PETS_UNION_SPEC)
        pet = document.components.schemas['Pet']

        assert is_discriminated_union_with_child(pet, '#/components/schemas/Cat')
        assert not is_discriminated_union_with_child(pet, '#/components/schemas/Bird')
        assert not is_discriminated_union_with_child(
            document.components.schemas['Cat'], '#/components/schemas/Pet'
        )


class TestAllOfResolution:
    """Tests for allOf resolution in a full run."""

    def test_reference_and_inline_object_are_merged(self):
        result = Collector(parse_document(RECURSIVE_SPEC)).collect()
        named = find_type(result, 'Named')

        fields = {p.go_name: p for p in named.schema.properties}
        assert list(fields) == ['ID', 'Name']
        assert fields['ID'].schema.go_type == 'int64'
        assert fields['ID'].constraints.required is True
        assert fields['Name'].constraints.required is True
        assert not named.is_alias

    def test_reference_with_description_is_an_alias(self):
        spec = with_schemas(
            {
                'Base': RECURSIVE_SPEC['components']['schemas']['Base'],
                'Described': {
                    'allOf': [
                        {'$ref': '#/components/schemas/Base'},
                        {'description': 'Base, with a description'},
                    ]
                },
            }
        )

        result = Collector(parse_document(spec)).collect()
        described = find_type(result, 'Described')

        assert described.is_alias
        assert described.schema.go_type == 'Base'

    def test_conflicting_branches_name_the_component(self):
        spec = with_schemas(
            {
                'Base': RECURSIVE_SPEC['components']['schemas']['Base'],
                'Broken': {
                    'allOf': [
                        {'$ref': '#/components/schemas/Base'},
                        {'type': 'string'},
                    ]
                },
            }
        )

        with pytest.raises(TypeGenerationError) as exc_info:
            Collector(parse_document(spec)).collect()

        assert exc_info.value.type_name == 'Broken'
        assert isinstance(exc_info.value.__cause__, SchemaMergeError)
        assert exc_info.value.__cause__.facet == 'type'

    def test_child_does_not_embed_its_discriminated_parent(self):
        """Test a branch listing its own union in allOf drops the union."""
        schemas = dict(PETS_UNION_SPEC['components']['schemas'])
        schemas['Cat'] = {
            'allOf': [
                {'$ref': '#/components/schemas/Pet'},
                schemas['Cat'],
            ]
        }

        result = Collector(parse_document(with_schemas(schemas))).collect()
        cat = find_type(result, 'Cat')

        assert [p.go_name for p in cat.schema.properties] == ['Kind', 'Indoor']
