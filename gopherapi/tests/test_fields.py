"""Tests for struct field rendering."""

import pytest

from gopherapi.codegen.constraints import Constraints
from gopherapi.codegen.fields import (
    create_property_go_field_name,
    deduplicate_properties,
    gen_fields_from_properties,
)
from gopherapi.codegen.types import GoSchema, Property
from gopherapi.config import GenerateOptions

STRING = GoSchema(go_type='string')
REQUIRED = Constraints(required=True, validation_tags=('required',))
NULLABLE = Constraints(nullable=True)


def name_field(**kwargs) -> Property:
    return Property(**{'go_name': 'Name', 'json_field_name': 'name', 'schema': STRING, **kwargs})


def render(*props: Property, **options) -> list[str]:
    return gen_fields_from_properties(list(props), GenerateOptions(**options))


class TestCreatePropertyGoFieldName:
    """Tests for Go field names."""

    def test_json_name_is_exported(self):
        assert create_property_go_field_name('name', {}) == 'Name'

    def test_go_name_extension(self):
        assert create_property_go_field_name('name', {'x-go-name': 'FullName'}) == 'FullName'

    def test_only_honour_go_name(self):
        extensions = {'x-go-name': 'full_name', 'x-oapi-codegen-only-honour-go-name': True}

        assert create_property_go_field_name('name', extensions) == 'full_name'

    @pytest.mark.parametrize(
        'json_name,expected',
        [('error', 'ErrorData'), ('Error', 'ErrorData'), ('validate', 'ValidateData')],
    )
    def test_method_names_are_avoided(self, json_name, expected):
        assert create_property_go_field_name(json_name, {}) == expected


class TestDeduplicateProperties:
    """Tests for dropping properties with the same Go name."""

    def test_last_occurrence_wins(self):
        first = name_field(json_field_name='name')
        second = Property(go_name='Age', json_field_name='age', schema=GoSchema(go_type='int'))
        third = name_field(json_field_name='NAME')

        assert deduplicate_properties([first, second, third]) == [second, third]


class TestGenFieldsFromProperties:
    """Tests for rendered field lines."""

    def test_required_field(self):
        assert render(name_field(constraints=REQUIRED)) == [
            '    Name string `json:"name" validate:"required"`'
        ]

    def test_nullable_field_is_pointer_with_omitempty(self):
        assert render(name_field(constraints=NULLABLE)) == [
            '    Name *string `json:"name,omitempty"`'
        ]

    def test_description_comment(self):
        fields = render(
            name_field(description='The pet name'),
            Property(
                go_name='Tag',
                json_field_name='tag',
                schema=STRING,
                description='A tag',
            ),
        )

        assert fields == [
            '// Name The pet name\n    Name string `json:"name"`',
            '\n// Tag A tag\n    Tag string `json:"tag"`',
        ]

    def test_omit_description(self):
        fields = render(name_field(description='The pet name'), omit_description=True)

        assert fields == ['    Name string `json:"name"`']

    def test_skip_validation(self):
        fields = render(name_field(constraints=REQUIRED), skip_validation=True)

        assert fields == ['    Name string `json:"name"`']

    def test_deprecated_with_reason(self):
        prop = name_field(deprecated=True, extensions={'x-deprecated-reason': 'use title'})

        assert render(prop) == ['// Deprecated: use title\n    Name string `json:"name"`']

    def test_deprecated_without_reason(self):
        assert render(name_field(deprecated=True)) == [
            '// Deprecated:\n    Name string `json:"name"`'
        ]

    def test_json_ignore(self):
        prop = name_field(constraints=NULLABLE, extensions={'x-go-json-ignore': True})

        assert render(prop) == ['    Name *string `json:"-"`']

    def test_omitempty_override(self):
        prop = name_field(constraints=NULLABLE, extensions={'x-omitempty': False})

        assert render(prop) == ['    Name *string `json:"name"`']

    def test_skip_optional_pointer(self):
        prop = name_field(
            constraints=NULLABLE, extensions={'x-go-type-skip-optional-pointer': True}
        )

        assert render(prop) == ['    Name string `json:"name"`']

    def test_tags_are_sorted(self):
        prop = name_field(
            constraints=REQUIRED,
            extensions={'x-oapi-codegen-extra-tags': {'xml': 'n', 'db': 'pet_name'}},
        )

        assert render(prop) == [
            '    Name string `db:"pet_name" json:"name" validate:"required" xml:"n"`'
        ]

    def test_sensitive_and_jsonschema_tags(self):
        prop = name_field(extensions={'x-sensitive-data': True, 'x-jsonschema': 'title=Name'})

        assert render(prop) == [
            '    Name string `json:"name" jsonschema:"title=Name" sensitive:""`'
        ]

    def test_auto_extra_tags(self):
        prop = name_field(description='The pet name', extensions={'x-order': 2})

        fields = render(
            prop,
            omit_description=True,
            auto_extra_tags={'doc': 'description', 'order': 'x-order', 'json': 'description'},
        )

        assert fields == ['    Name string `doc:"The pet name" json:"name" order:"2"`']

    def test_embedded_field(self):
        prop = Property(go_name='Base', schema=GoSchema(ref_type='Base'))

        assert render(prop) == ['    Base Base `json:"-"`']

    def test_duplicates_are_rendered_once(self):
        fields = render(name_field(), name_field(json_field_name='label'))

        assert fields == ['    Name string `json:"label"`']
