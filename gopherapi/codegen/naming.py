"""Identifier normalisation for generated Go code.

Everything here is a pure string function. Names are derived either from a
declared identifier (component names, property names) or from a structural
path through the document (``['Pet', 'owner', 'address']``).
"""

import re

from gopherapi.exceptions import CodeGenerationError, MalformedReferenceError

__all__ = [
    'INITIALISMS',
    'deprecation_comment',
    'create_operation_id',
    'is_go_keyword',
    'is_media_type_json',
    'is_predeclared_go_identifier',
    'is_standard_component_reference',
    'media_type_to_camel_case',
    'normalize',
    'ordered_params_from_uri',
    'path_to_type_name',
    'ref_path_to_go_type',
    'ref_path_to_obj_name',
    'ref_to_type_name',
    'sanitize_go_identity',
    'schema_name_to_type_name',
    'string_to_go_comment',
    'to_camel_case',
    'to_camel_case_with_initialisms',
    'type_name_prefix',
    'uppercase_first_character',
]

INITIALISMS = [
    'ACH', 'ACL', 'API', 'ASCII', 'CPU', 'CSS', 'DNS', 'EOF', 'GUID', 'HTML',
    'HTTP', 'HTTPS', 'ID', 'IP', 'JSON', 'QPS', 'RAM', 'RPC', 'SLA', 'SMTP',
    'SQL', 'SSH', 'TCP', 'TLS', 'TTL', 'UDP', 'UI', 'GID', 'UID', 'UUID',
    'URI', 'URL', 'UTF8', 'VM', 'XML', 'XMPP', 'XSRF', 'XSS', 'SIP', 'RTP',
    'AMQP', 'DB', 'TS', 'PSP',
]  # fmt: skip

_INITIALISM_MAP = {word.lower(): word for word in INITIALISMS}

SEPARATORS = frozenset('-#@!$&=.+:;_~ (){}[]')

GO_KEYWORDS = frozenset(
    [
        'break', 'case', 'chan', 'const', 'continue', 'default', 'defer',
        'else', 'fallthrough', 'for', 'func', 'go', 'goto', 'if', 'import',
        'interface', 'map', 'package', 'range', 'return', 'select', 'struct',
        'switch', 'type', 'var',
    ]
)  # fmt: skip

PREDECLARED_IDENTIFIERS = frozenset(
    [
        # Types
        'bool', 'byte', 'complex64', 'complex128', 'error', 'float32',
        'float64', 'int', 'int8', 'int16', 'int32', 'int64', 'rune', 'string',
        'uint', 'uint8', 'uint16', 'uint32', 'uint64', 'uintptr',
        # Constants
        'true', 'false', 'iota',
        # Zero value
        'nil',
        # Functions
        'append', 'cap', 'close', 'complex', 'copy', 'delete', 'imag', 'len',
        'make', 'new', 'panic', 'print', 'println', 'real', 'recover',
    ]
)  # fmt: skip

_PREFIX_SYMBOLS = {
    '-': 'Minus',
    '+': 'Plus',
    '&': 'And',
    '|': 'Or',
    '~': 'Tilde',
    '=': 'Equal',
    '>': 'GreaterThan',
    '<': 'LessThan',
    '#': 'Hash',
    '.': 'Dot',
    '*': 'Asterisk',
    '^': 'Caret',
    '%': 'Percent',
    '_': 'Underscore',
}

_PATH_PARAM_RE = re.compile(r'{[.;?]?([^{}*]+)\*?}')


def uppercase_first_character(value: str) -> str:
    if not value:
        return ''
    return value[0].upper() + value[1:]


def to_camel_case(value: str) -> str:
    """Convert query-arg style strings to CamelCase.

    Upper-case letters are kept, digits are kept and start a new word,
    lower-case letters are capitalised at word starts and every other
    character is dropped while starting a new word.

    Example:
        >>> to_camel_case(' foo_bar ')
        'FooBar'
        >>> to_camel_case('foo2bar')
        'Foo2Bar'
    """
    result = []
    cap_next = True
    for char in value:
        if char.isupper():
            result.append(char)
            cap_next = False
        elif char.isdigit():
            result.append(char)
            cap_next = True
        elif char.islower():
            result.append(char.upper() if cap_next else char)
            cap_next = False
        else:
            cap_next = True
    return ''.join(result)


def _camel_case_words(value: str) -> list[str]:
    """Split a CamelCase string into words.

    A word is a run of upper-case letters or digits followed by a run of
    lower-case letters or digits, or by the end of the string.
    """
    words = []
    i = 0
    n = len(value)
    while i < n:
        if not (value[i].isupper() or value[i].isdigit()):
            i += 1
            continue
        start = i
        while i < n and (value[i].isupper() or value[i].isdigit()):
            i += 1
        end = i
        while end < n and (value[end].islower() or value[end].isdigit()):
            end += 1
        if end > i or i == n:
            words.append(value[start:end])
        i = end
    return words


def to_camel_case_with_initialisms(value: str) -> str:
    """Convert to CamelCase, upper-casing known initialisms.

    Example:
        >>> to_camel_case_with_initialisms('httpOperationId')
        'HTTPOperationID'
    """
    words = _camel_case_words(to_camel_case(value))
    return ''.join(_INITIALISM_MAP.get(word.lower(), word) for word in words)


normalize = to_camel_case_with_initialisms


def type_name_prefix(name: str) -> str:
    """Compute a word prefix for names starting with symbols or digits.

    Only the leading symbol characters are inspected; a name starting with
    a letter gets no prefix.
    """
    if not name:
        return 'Empty'

    prefix = ''
    for char in name:
        if char == '$':
            if len(name) == 1:
                return 'DollarSign'
            continue
        if char in _PREFIX_SYMBOLS:
            prefix += _PREFIX_SYMBOLS[char]
            continue
        if prefix == '' and char.isdigit():
            return 'N'
        return prefix
    return prefix


def schema_name_to_type_name(name: str) -> str:
    """Convert a schema name to a valid Go type name."""
    return type_name_prefix(name) + normalize(name)


def path_to_type_name(path: list[str] | tuple[str, ...]) -> str:
    """Convert a structural path like ``['Object', 'field1', 'nested']`` into a type name."""
    return '_'.join(normalize(part) for part in path)


def is_standard_component_reference(ref: str) -> bool:
    """A reference pointing directly at a named component, e.g. ``#/components/schemas/Foo``."""
    parts = ref.split('/')
    return len(parts) == 4 and parts[1] == 'components'


def ref_path_to_go_type(ref: str) -> str:
    """Convert a component reference to a Go type name.

    Raises:
        MalformedReferenceError: If the reference does not have exactly four parts.
    """
    parts = ref.split('/')
    if len(parts) != 4:
        raise MalformedReferenceError(ref, len(parts))
    return schema_name_to_type_name(parts[-1])


def ref_path_to_obj_name(ref: str) -> str:
    """Return the last segment of a reference without changes."""
    return ref.split('/')[-1]


def ref_to_type_name(ref: str) -> str:
    """Derive a type name from a reference of any depth.

    Used for references that point inside another definition, such as
    ``#/paths/~1pets/get/responses/200/content/application~1json/schema``.
    """
    pointer = ref.split('#', 1)[-1]
    parts = [
        part.replace('~1', '/').replace('~0', '~')
        for part in pointer.split('/')
        if part
    ]
    return path_to_type_name(parts)


def media_type_to_camel_case(media_type: str) -> str:
    """Convert a media type to a PascalCase word, e.g. ``application/vnd.api+json``."""
    value = media_type.replace('/', '_', 1)
    value = value.replace('*', 'Wildcard_', 1)
    value = value.replace('+', 'Plus_', 1)
    return to_camel_case_with_initialisms(value)


def is_media_type_json(media_type: str | None) -> bool:
    if not media_type:
        return False
    parsed = media_type.split(';', 1)[0].strip().lower()
    if '/' not in parsed:
        return False
    return parsed == 'application/json' or parsed.endswith('+json')


def ordered_params_from_uri(uri: str) -> list[str]:
    """Return the parameter names of a URI template in order of appearance."""
    return [m.group(1) for m in _PATH_PARAM_RE.finditer(uri)]


def is_go_keyword(value: str) -> bool:
    return value in GO_KEYWORDS


def is_predeclared_go_identifier(value: str) -> bool:
    return value in PREDECLARED_IDENTIFIERS


def sanitize_go_identity(value: str) -> str:
    """Replace characters that are illegal in Go identifiers and escape reserved names."""
    chars = []
    for i, char in enumerate(value):
        if i == 0 and char.isdigit():
            chars.append('_')
        elif char.isalpha() or char.isdigit() or char == '_':
            chars.append(char)
        else:
            chars.append('_')
    sanitized = ''.join(chars)

    if is_go_keyword(sanitized) or is_predeclared_go_identifier(sanitized):
        sanitized = '_' + sanitized
    return sanitized


def string_to_go_comment(value: str | None, prefix: str = '') -> str:
    """Render a possibly multi-line string as a Go comment block.

    When ``prefix`` is given (usually the name of the commented item) it is
    placed after the comment marker on the first line.
    """
    if not value or not value.strip():
        return ''

    value = value.replace('\r\n', '\n').replace('\r', '\n')

    lines = []
    for i, line in enumerate(value.split('\n')):
        marker = '//'
        if i == 0 and prefix:
            marker += ' ' + prefix
        lines.append(f'{marker} {line}')

    rendered = '\n'.join(lines)
    if rendered.endswith('\n// '):
        rendered = rendered[: -len('\n// ')]
    return rendered


def deprecation_comment(reason: str | None = None) -> str:
    content = 'Deprecated:'
    if reason:
        content += f' {reason}'
    return string_to_go_comment(content)


def create_operation_id(method: str, path: str, initial: str | None = None) -> str:
    """Build the operation identifier used as the base of per-operation type names.

    An explicit ``operationId`` wins; otherwise the lower-cased method and
    the non-empty path segments are joined and normalised.

    Raises:
        CodeGenerationError: If the method or the path is empty.
    """
    if initial:
        return type_name_prefix(initial) + normalize(initial)

    if not method:
        raise CodeGenerationError('operation name cannot be an empty string')
    if not path:
        raise CodeGenerationError('request path cannot be an empty string')

    result = method.lower()
    for part in path.split('/'):
        if part:
            result += '-' + part
    return normalize(result)
