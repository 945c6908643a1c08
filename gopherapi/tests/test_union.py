"""Tests for anyOf/oneOf union resolution."""

import pytest

from gopherapi.codegen.collector import Collector
from gopherapi.codegen.constraints import new_constraints
from gopherapi.codegen.types import GoSchema, UnionElement
from gopherapi.codegen.union import deduplicate_union_elements, generate_union
from gopherapi.exceptions import (
    AmbiguousDiscriminatorError,
    DiscriminatorNotAllMappedError,
    TypeGenerationError,
)
from gopherapi.openapi import parse_document
from gopherapi.openapi.models import Schema

from .fixtures import PETS_UNION_SPEC, make_options, with_schemas


def branches(*schemas: dict) -> list:
    return [Schema.model_validate(schema) for schema in schemas]


def union_of(elements, discriminator=None, spec=None):
    _, options = make_options(spec or PETS_UNION_SPEC, path=('Pet', 'oneOf'))
    return generate_union(elements, discriminator, options), options


def refs(*names: str) -> list:
    from gopherapi.openapi.models import Reference

    return [Reference.model_validate({'$ref': f'#/components/schemas/{n}'}) for n in names]


class TestBranchCount:
    """Tests for the representation chosen by the number of branches."""

    def test_single_branch_is_not_a_union(self):
        out, _ = union_of(branches({'type': 'string'}))

        assert out.go_type == 'string'
        assert out.union_elements == []

    def test_null_branch_makes_single_branch_nullable(self):
        out, _ = union_of(branches({'type': 'integer'}, {'type': 'null'}))

        assert out.go_type == 'int'
        assert out.union_elements == []
        assert out.constraints.nullable is True

    def test_two_branches_use_either(self):
        out, _ = union_of(refs('Cat', 'Dog'))

        assert [e.type_name for e in out.union_elements] == ['Cat', 'Dog']
        assert 'runtime.Either[Cat, Dog]' in out.create_go_struct([])

    def test_three_branches_use_raw_message(self):
        out, _ = union_of(refs('Cat', 'Dog', 'Bird'))

        assert len(out.union_elements) == 3
        assert 'union json.RawMessage' in out.create_go_struct([])

    def test_five_primitive_branches(self):
        out, _ = union_of(
            branches(
                {'type': 'string'},
                {'type': 'integer'},
                {'type': 'boolean'},
                {'type': 'number'},
                {'type': 'string', 'format': 'date-time'},
            )
        )

        assert [e.type_name for e in out.union_elements] == [
            'string',
            'int',
            'bool',
            'float32',
            'time.Time',
        ]
        assert out.additional_types == []
        assert 'union json.RawMessage' in out.create_go_struct([])

    def test_inline_object_branches_are_hoisted(self):
        out, options = union_of(
            branches(
                {'type': 'object', 'properties': {'a': {'type': 'string'}}},
                {'type': 'object', 'properties': {'b': {'type': 'string'}}},
            )
        )

        assert [e.type_name for e in out.union_elements] == ['Pet_OneOf_0', 'Pet_OneOf_1']
        assert [t.name for t in out.additional_types] == ['Pet_OneOf_0', 'Pet_OneOf_1']
        assert options.tracker.exists('Pet_OneOf_0')


class TestDeduplication:
    """Tests for union element deduplication."""

    def test_stricter_element_is_kept(self):
        out, _ = union_of(
            branches(
                {'type': 'string', 'minLength': 3},
                {'type': 'string', 'minLength': 3, 'maxLength': 10},
            )
        )

        assert len(out.union_elements) == 1
        assert out.union_elements[0].schema.constraints.max_length == 10

    def test_first_element_wins_on_equal_count(self):
        first = UnionElement(
            'string', GoSchema(constraints=new_constraints(Schema(type='string', minLength=3)))
        )
        second = UnionElement(
            'string', GoSchema(constraints=new_constraints(Schema(type='string', minLength=5)))
        )

        assert deduplicate_union_elements([first, second]) == [first]

    def test_order_is_preserved(self):
        a = UnionElement('A', GoSchema())
        b = UnionElement('B', GoSchema())

        assert deduplicate_union_elements([a, b, a]) == [a, b]


class TestDiscriminator:
    """Tests for discriminator mapping."""

    def test_explicit_mapping(self):
        document, options = make_options(PETS_UNION_SPEC, path=('Pet', 'oneOf'))
        pet = document.components.schemas['Pet']

        out = generate_union(pet.oneOf, pet.discriminator, options)

        assert out.discriminator.property == 'kind'
        assert out.discriminator.mapping == {'cat': 'Cat', 'dog': 'Dog'}
        assert out.discriminator.property_name == 'Kind'

    def test_unmapped_inline_branch_is_ambiguous(self):
        document, options = make_options(PETS_UNION_SPEC, path=('Pet', 'oneOf'))
        pet = document.components.schemas['Pet']
        elements = [
            *pet.oneOf,
            Schema.model_validate(
                {'type': 'object', 'properties': {'wings': {'type': 'integer'}}}
            ),
        ]

        with pytest.raises(AmbiguousDiscriminatorError):
            generate_union(elements, pet.discriminator, options)

    def test_referenced_branch_mapped_by_its_enum(self):
        document, options = make_options(PETS_UNION_SPEC, path=('Pet', 'oneOf'))
        pet = document.components.schemas['Pet']

        out = generate_union([*pet.oneOf, *refs('Bird')], pet.discriminator, options)

        assert out.discriminator.mapping == {'cat': 'Cat', 'dog': 'Dog', 'bird': 'Bird'}
        assert len(out.union_elements) == 3

    def test_referenced_branch_falls_back_to_component_name(self):
        spec = with_schemas(
            {
                'Circle': {'type': 'object', 'properties': {'radius': {'type': 'number'}}},
                'Square': {'type': 'object', 'properties': {'side': {'type': 'number'}}},
            }
        )
        document, options = make_options(spec, path=('Shape', 'oneOf'))
        discriminator = Schema.model_validate(
            {'discriminator': {'propertyName': 'shape'}}
        ).discriminator

        out = generate_union(refs('Circle', 'Square'), discriminator, options)

        assert out.discriminator.mapping == {'Circle': 'Circle', 'Square': 'Square'}

    def test_unmapped_inline_branch_without_mapping_fails_completeness(self):
        _, options = make_options(PETS_UNION_SPEC, path=('Pet', 'oneOf'))
        discriminator = Schema.model_validate(
            {'discriminator': {'propertyName': 'kind'}}
        ).discriminator
        elements = [
            *refs('Cat'),
            Schema.model_validate({'type': 'object', 'properties': {'x': {'type': 'string'}}}),
        ]

        with pytest.raises(DiscriminatorNotAllMappedError) as exc_info:
            generate_union(elements, discriminator, options)
        assert exc_info.value.mapped == 1
        assert exc_info.value.expected == 2


class TestUnionTypes:
    """Tests for the named types created for unions in a full run."""

    def test_one_of_component_creates_union_type(self):
        result = Collector(parse_document(PETS_UNION_SPEC)).collect()
        union = next(t for t in result.union_types if t.name == 'Pet_OneOf')

        assert union.schema.is_union_wrapper
        assert 'runtime.Either[Cat, Dog]' in union.schema.go_type
        assert union.schema.discriminator.mapping == {'cat': 'Cat', 'dog': 'Dog'}

        pet = next(t for t in result.all_types() if t.name == 'Pet')
        assert [p.go_name for p in pet.schema.properties] == ['Pet_OneOf']

    def test_discriminator_error_names_the_component(self):
        spec = with_schemas(
            {
                **PETS_UNION_SPEC['components']['schemas'],
                'Broken': {
                    'oneOf': [
                        {'$ref': '#/components/schemas/Cat'},
                        {'type': 'object', 'properties': {'x': {'type': 'string'}}},
                    ],
                    'discriminator': {
                        'propertyName': 'kind',
                        'mapping': {'cat': '#/components/schemas/Cat'},
                    },
                },
            }
        )

        with pytest.raises(TypeGenerationError) as exc_info:
            Collector(parse_document(spec)).collect()

        assert exc_info.value.type_name == 'Broken'
        assert exc_info.value.schema_path == '#/components/schemas/Broken'
        assert isinstance(exc_info.value.__cause__, AmbiguousDiscriminatorError)
