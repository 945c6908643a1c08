import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from gopherapi.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['gopher.yaml', 'gopher.yml']


class GenerateOptions(BaseModel):
    """Options that steer how schemas are resolved into Go types."""

    default_int_type: str = Field(
        'int', description='Go type used for integers without an explicit format.'
    )

    omit_description: bool = Field(
        False, description='Do not carry schema descriptions into field comments.'
    )

    always_prefix_enum_values: bool = Field(
        True, description='Always prefix enum constant names with their type name.'
    )

    skip_validation: bool = Field(
        False, description='Do not emit validate tags on struct fields.'
    )

    auto_extra_tags: dict[str, str] = Field(
        default_factory=dict,
        description='Struct tag name mapped to the schema field (description or x-*) it is copied from.',
    )

    error_mapping: dict[str, str] = Field(
        default_factory=dict,
        description='Response type name mapped to the dotted JSON path holding its error message.',
    )


class DocumentConfig(BaseModel):
    """Represents a single document to be processed."""

    source: str = Field(..., description='Path or URL to the OpenAPI document.')

    output: str | None = Field(
        None, description='Optional output directory for the rendered code.'
    )


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='GOPHERAPI_')

    documents: list[DocumentConfig] = Field(
        default_factory=list, description='List of OpenAPI documents to process.'
    )

    generate: GenerateOptions = Field(
        default_factory=GenerateOptions,
        description='Options applied while resolving every document.',
    )


def load_yaml(path: str | Path) -> dict:
    import yaml

    return yaml.load(Path(path).read_text(), Loader=yaml.FullLoader)


def _validate(data: dict | None, source: str) -> CodegenConfig:
    try:
        return CodegenConfig.model_validate(data or {})
    except ValidationError as e:
        first = e.errors()[0]
        field = '.'.join(str(p) for p in first['loc'])
        raise ConfigurationError(first['msg'], config_path=source, field=field) from e


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file.

    Looks at the explicit path first, then the default file names in the
    working directory, then the ``[tool.gopherapi]`` table of pyproject.toml.

    Raises:
        ConfigurationError: If no configuration is found or it is invalid.
    """
    if path:
        if not Path(path).exists():
            raise ConfigurationError('config file not found', config_path=path)
        return _validate(load_yaml(path), path)

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        candidate = Path(cwd) / filename
        if candidate.exists():
            return _validate(load_yaml(candidate), str(candidate))

    candidate = Path(cwd) / 'pyproject.toml'

    if candidate.exists():
        import tomllib

        pyproject = tomllib.loads(candidate.read_text())
        tools = pyproject.get('tool', {})

        if 'gopherapi' in tools:
            return _validate(tools['gopherapi'], str(candidate))

    raise ConfigurationError('config not found')
