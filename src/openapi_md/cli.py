"""CLI entry point for openapi-md."""

from pathlib import Path

import click

from openapi_md.parser.base import ApiDocument
from openapi_md.parser.detect import is_swagger2, read_document
from openapi_md.parser.openapi import create_api_document
from openapi_md.parser.source import FETCH_TIMEOUT, get_data
from openapi_md.parser.upgrade import upgrade_document
from openapi_md.render.markdown import render_markdown


def _load_document(source: str, timeout: float) -> ApiDocument:
    """Fetch, parse and (for Swagger 2.0) upgrade the source document."""
    text = get_data(source, timeout=timeout)
    if text is None:
        raise click.ClickException(f"'{source}' not found")

    document = read_document(text)
    if document is None:
        raise click.ClickException(f"'{source}' is not 'yaml' or 'json'")

    if is_swagger2(document):
        document = upgrade_document(document)
    return create_api_document(document)


@click.command()
@click.version_option(package_name="openapi-md")
@click.argument("source")
@click.argument("destination", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option("-s", "--sort", is_flag=True, default=False, help="Sort paths and references.")
@click.option(
    "--timeout",
    default=FETCH_TIMEOUT,
    type=float,
    envvar="OPENAPI_MD_TIMEOUT",
    show_default=True,
    help="Timeout in seconds when SOURCE is a URL.",
)
def main(source: str, destination: Path | None, sort: bool, timeout: float):
    """Convert an OpenAPI (v2 or v3) document into Markdown.

    SOURCE is a file path or an http(s) URL. Output goes to DESTINATION,
    or to stdout when it is omitted.
    """
    api_document = _load_document(source, timeout)
    output = render_markdown(api_document, sort=sort)

    if destination is None:
        click.echo(output)
        return

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(output, encoding="utf-8")
    click.echo(f"Markdown saved to {destination}", err=True)
