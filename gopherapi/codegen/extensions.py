"""Typed access to the vendor extensions understood by the resolver.

Every recognised ``x-*`` key is a member of :class:`ExtensionKey` and has
exactly one decoder. Decoders return the typed value, ``None`` when the key
is absent, and raise :class:`ExtensionValueError` when the value has the
wrong shape.

Example:
    >>> extensions = {'x-go-name': 'ID', 'x-omitempty': 'false'}
    >>> decode_extension(extensions, ExtensionKey.GO_NAME)
    'ID'
    >>> decode_extension(extensions, ExtensionKey.OMIT_EMPTY)
    False
"""

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gopherapi.exceptions import ExtensionValueError

__all__ = [
    'ExtensionKey',
    'SensitiveDataConfig',
    'decode_extension',
    'decode_extension_lenient',
    'parse_boolean_value',
]

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset(['1', 't', 'T', 'TRUE', 'true', 'True'])
_FALSE_STRINGS = frozenset(['0', 'f', 'F', 'FALSE', 'false', 'False'])


class ExtensionKey(str, Enum):
    """Vendor extension keys consumed while resolving schemas."""

    GO_TYPE = 'x-go-type'
    GO_TYPE_SKIP_OPTIONAL_POINTER = 'x-go-type-skip-optional-pointer'
    GO_TYPE_IMPORT = 'x-go-type-import'
    GO_NAME = 'x-go-name'
    GO_TYPE_NAME = 'x-go-type-name'
    GO_JSON_IGNORE = 'x-go-json-ignore'
    OMIT_EMPTY = 'x-omitempty'
    EXTRA_TAGS = 'x-oapi-codegen-extra-tags'
    JSON_SCHEMA = 'x-jsonschema'
    ENUM_NAMES = 'x-enum-names'
    DEPRECATED_REASON = 'x-deprecated-reason'
    ONLY_HONOUR_GO_NAME = 'x-oapi-codegen-only-honour-go-name'
    SENSITIVE_DATA = 'x-sensitive-data'


class SensitiveDataConfig(BaseModel):
    """Masking strategy for a field marked with ``x-sensitive-data``.

    Attributes:
        mask: One of ``full``, ``regex``, ``hash`` or ``partial``.
        pattern: Regular expression for the ``regex`` mask.
        algorithm: Hash algorithm for the ``hash`` mask, e.g. ``sha256``.
        keep_prefix: Characters kept at the start for the ``partial`` mask.
        keep_suffix: Characters kept at the end for the ``partial`` mask.
        replacement: Replacement text for the ``full`` and ``partial`` masks.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    mask: Literal['full', 'regex', 'hash', 'partial'] = 'full'
    pattern: str = ''
    algorithm: str = ''
    keep_prefix: int = Field(0, alias='keepPrefix')
    keep_suffix: int = Field(0, alias='keepSuffix')
    replacement: str = '********'


def parse_boolean_value(value: Any, key: str = '') -> bool:
    """Accept a real boolean or any string Go's ``strconv.ParseBool`` accepts.

    Raises:
        ExtensionValueError: If the value is neither.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE_STRINGS:
            return True
        if value in _FALSE_STRINGS:
            return False
    raise ExtensionValueError(key, value)


def _parse_string(value: Any, key: str) -> str:
    if isinstance(value, bool):
        raise ExtensionValueError(key, value)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise ExtensionValueError(key, value)


def _parse_extra_tags(value: Any, key: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ExtensionValueError(key, value)
    tags = {}
    for tag, tag_value in value.items():
        if not isinstance(tag_value, str):
            raise ExtensionValueError(key, tag_value)
        tags[str(tag)] = tag_value
    return tags


def _parse_enum_names(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise ExtensionValueError(key, value)
    names = []
    for item in value:
        if not isinstance(item, str):
            raise ExtensionValueError(key, item)
        names.append(item)
    return names


def _parse_sensitive_data(value: Any, key: str) -> SensitiveDataConfig | None:
    try:
        if isinstance(value, bool):
            return SensitiveDataConfig() if value else None
        if isinstance(value, str):
            return SensitiveDataConfig(mask=value)
        if isinstance(value, Mapping):
            return SensitiveDataConfig.model_validate(dict(value))
    except ValidationError as e:
        raise ExtensionValueError(key, value) from e
    raise ExtensionValueError(key, value)


_DECODERS: dict[ExtensionKey, Callable[[Any, str], Any]] = {
    ExtensionKey.GO_TYPE: _parse_string,
    ExtensionKey.GO_TYPE_SKIP_OPTIONAL_POINTER: parse_boolean_value,
    ExtensionKey.GO_TYPE_IMPORT: lambda value, key: value,
    ExtensionKey.GO_NAME: _parse_string,
    ExtensionKey.GO_TYPE_NAME: _parse_string,
    ExtensionKey.GO_JSON_IGNORE: parse_boolean_value,
    ExtensionKey.OMIT_EMPTY: parse_boolean_value,
    ExtensionKey.EXTRA_TAGS: _parse_extra_tags,
    ExtensionKey.JSON_SCHEMA: _parse_string,
    ExtensionKey.ENUM_NAMES: _parse_enum_names,
    ExtensionKey.DEPRECATED_REASON: _parse_string,
    ExtensionKey.ONLY_HONOUR_GO_NAME: parse_boolean_value,
    ExtensionKey.SENSITIVE_DATA: _parse_sensitive_data,
}


def decode_extension(
    extensions: Mapping[str, Any] | None, key: ExtensionKey
) -> Any | None:
    """Decode one extension from a mapping of vendor extensions.

    Args:
        extensions: The ``x-*`` mapping of a schema, property or operation.
        key: The extension to decode.

    Returns:
        The decoded value, or ``None`` if the key is absent.

    Raises:
        ExtensionValueError: If the value has the wrong shape.
    """
    if not extensions or key.value not in extensions:
        return None
    return _DECODERS[key](extensions[key.value], key.value)


def decode_extension_lenient(
    extensions: Mapping[str, Any] | None, key: ExtensionKey
) -> Any | None:
    """Like :func:`decode_extension` but a malformed value counts as absent."""
    try:
        return decode_extension(extensions, key)
    except ExtensionValueError as e:
        logger.warning(f'Ignoring extension: {e}')
        return None
