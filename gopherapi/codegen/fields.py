"""Struct field rendering.

Turns the properties of an object descriptor into Go struct field lines,
including the comment block and the sorted struct tag list::

    // Name The pet name
    Name string `json:"name" validate:"required,min=1"`
"""

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from gopherapi.codegen.extensions import (
    ExtensionKey,
    decode_extension_lenient,
)
from gopherapi.codegen.naming import (
    deprecation_comment,
    schema_name_to_type_name,
    string_to_go_comment,
)
from gopherapi.codegen.types import Property
from gopherapi.config import GenerateOptions

__all__ = [
    'create_property_go_field_name',
    'deduplicate_properties',
    'gen_fields_from_properties',
]

logger = logging.getLogger(__name__)


def create_property_go_field_name(json_name: str, extensions: Mapping[str, Any]) -> str:
    """Derive the Go field name of a property.

    ``x-go-name`` replaces the JSON name; with
    ``x-oapi-codegen-only-honour-go-name`` it is used verbatim. Names that
    would clash with generated methods are renamed: ``error``/``Error``
    become ``ErrorData`` and ``Validate`` becomes ``ValidateData``.
    """
    name = json_name
    override = decode_extension_lenient(extensions, ExtensionKey.GO_NAME)
    if override is not None:
        name = override

    if decode_extension_lenient(extensions, ExtensionKey.ONLY_HONOUR_GO_NAME):
        return name

    if name in ('error', 'Error'):
        name = 'ErrorData'

    type_name = schema_name_to_type_name(name)
    if type_name == 'Validate':
        return 'ValidateData'
    return type_name


def deduplicate_properties(props: list[Property]) -> list[Property]:
    """Drop properties sharing a Go name, keeping the last occurrence of each."""
    last = {prop.go_name: i for i, prop in enumerate(props)}
    return [prop for i, prop in enumerate(props) if last[prop.go_name] == i]


def _property_field_value(prop: Property, source: str) -> str:
    if source == 'description':
        return prop.description
    if source.startswith('x-') and source in prop.extensions:
        value = prop.extensions[source]
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    return ''


def _field_tags(prop: Property, options: GenerateOptions) -> dict[str, str]:
    extensions = prop.extensions
    constraints = prop.constraints

    omit_empty = bool(constraints.nullable) and not prop.schema.skip_optional_pointer
    omit_override = decode_extension_lenient(extensions, ExtensionKey.OMIT_EMPTY)
    if omit_override is not None:
        omit_empty = omit_override

    tags = {}
    if not options.skip_validation and constraints.validation_tags:
        tags['validate'] = ','.join(constraints.validation_tags)

    json_name = prop.json_field_name or '-'
    tags['json'] = json_name
    if omit_empty and json_name != '-':
        tags['json'] += ',omitempty'

    if decode_extension_lenient(extensions, ExtensionKey.GO_JSON_IGNORE):
        tags['json'] = '-'

    extra = decode_extension_lenient(extensions, ExtensionKey.EXTRA_TAGS)
    if extra:
        for key in sorted(extra):
            tags[key] = extra[key]

    if ExtensionKey.SENSITIVE_DATA.value in extensions:
        tags['sensitive'] = ''

    json_schema = decode_extension_lenient(extensions, ExtensionKey.JSON_SCHEMA)
    if json_schema is not None:
        tags['jsonschema'] = json_schema

    for tag, source in options.auto_extra_tags.items():
        value = _property_field_value(prop, source)
        if value and tag not in tags:
            tags[tag] = value

    return tags


def gen_fields_from_properties(
    props: list[Property], options: GenerateOptions
) -> list[str]:
    """Render one struct field line (with its comments) per property.

    Args:
        props: The properties in declaration order.
        options: Generation options (descriptions, validation tags, auto tags).

    Returns:
        The field lines, ready to be placed between ``struct {`` and ``}``.
    """
    fields = []
    for i, prop in enumerate(deduplicate_properties(props)):
        field = ''

        if not options.omit_description and prop.description:
            if i != 0:
                field += '\n'
            field += string_to_go_comment(prop.description, prop.go_name) + '\n'

        if prop.deprecated:
            reason = decode_extension_lenient(
                prop.extensions, ExtensionKey.DEPRECATED_REASON
            )
            field += deprecation_comment(reason) + '\n'

        skip_pointer = decode_extension_lenient(
            prop.extensions, ExtensionKey.GO_TYPE_SKIP_OPTIONAL_POINTER
        )
        if skip_pointer is not None:
            prop = dataclasses.replace(
                prop,
                schema=dataclasses.replace(prop.schema, skip_optional_pointer=skip_pointer),
            )

        tags = _field_tags(prop, options)
        rendered_tags = ' '.join(f'{key}:"{tags[key]}"' for key in sorted(tags))
        field += f'    {prop.go_name} {prop.go_type_def()} `{rendered_tags}`'
        fields.append(field)

    return fields
