from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from gopherapi.codegen.collector import Collector, ParseResult
from gopherapi.config import GenerateOptions, get_config
from gopherapi.exceptions import GopherAPIError
from gopherapi.openapi import load_document

console = Console()
app = typer.Typer(
    name='gopherapi',
    help='Resolve OpenAPI documents into Go type definitions',
    no_args_is_help=True,
)


def _print_result(source: str, result: ParseResult) -> None:
    table = Table(title=source)
    table.add_column('Name', style='cyan', no_wrap=True)
    table.add_column('Location')
    table.add_column('Alias')
    table.add_column('Type')

    for type_def in result.all_types():
        location = type_def.spec_location.value if type_def.spec_location else '-'
        table.add_row(
            type_def.name,
            location,
            'yes' if type_def.is_alias else 'no',
            Text(type_def.schema.type_decl().split('\n', 1)[0]),
        )

    console.print(table)
    console.print(
        f'[dim]{len(result.all_types())} types, '
        f'{len(result.operations)} operations, '
        f'{len(result.enums)} enums[/dim]'
    )


@app.command()
def resolve(
    source: Annotated[
        str | None,
        typer.Argument(help='Path or URL of the OpenAPI document'),
    ] = None,
    config: Annotated[
        str | None,
        typer.Option(
            '--config', '-c', help='Path to configuration file (YAML)'
        ),
    ] = None,
) -> None:
    """Resolve a document and list the Go types it produces.

    Without a source, every document listed in the configuration file is
    resolved.

    Examples:
        gopherapi resolve ./openapi.yaml
        gopherapi resolve ./openapi.yaml --config gopher.yaml
        gopherapi resolve -c gopher.yaml
    """
    try:
        options = GenerateOptions()
        sources = [source] if source else []

        if config or not source:
            settings = get_config(config)
            options = settings.generate
            if not sources:
                sources = [document.source for document in settings.documents]

        for document_source in sources:
            document = load_document(document_source)
            result = Collector(document, options).collect()
            _print_result(document_source, result)

    except GopherAPIError as e:
        console.print(f'[red]Error:[/red] {str(e)}')
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the version of gopherapi."""
    try:
        from gopherapi._version import version

        console.print(f'gopherapi version: {version}')
    except ImportError:
        console.print('gopherapi version: unknown')


if __name__ == '__main__':
    app()
