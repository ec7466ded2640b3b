"""CLI entry point for api-spec-meta."""

import importlib
import logging
from pathlib import Path

import click

from api_spec_meta.config import get_settings
from api_spec_meta.diff.engine import DiffOption, SpecDiff
from api_spec_meta.diff.sync import SwaggerSyncVerifier, SyncOption
from api_spec_meta.errors import ApiSpecMetaError
from api_spec_meta.meta.base import EndpointDescriptor
from api_spec_meta.spec.generator import SpecGenerator


def _load_descriptors(target: str) -> list[EndpointDescriptor]:
    """Resolve ``package.module:ATTR`` to endpoint descriptors."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter("expected MODULE:ATTR", param_hint="TARGET")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name}: {e}", param_hint="TARGET") from e
    value = getattr(module, attr, None)
    if value is None:
        raise click.BadParameter(f"{module_name} has no attribute {attr}", param_hint="TARGET")
    if callable(value):
        value = value()
    return [d if isinstance(d, EndpointDescriptor) else EndpointDescriptor.model_validate(d) for d in value]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
def main(verbose: bool):
    """api-spec-meta: generate Swagger from declared types and diff spec documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("target")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output path of swagger.json.")
@click.option("--title", default=None, help="Title of the API document.")
@click.option("--base-path", default=None, help="basePath of the API document.")
def generate(target: str, output: Path, title: str | None, base_path: str | None):
    """Generate swagger.json from the endpoint descriptors at MODULE:ATTR."""
    descriptors = _load_descriptors(target)
    click.echo(f"Found {len(descriptors)} endpoints in {target}.")

    settings = get_settings()
    if title is not None:
        settings.title = title
    if base_path is not None:
        settings.base_path = base_path

    try:
        document = SpecGenerator(settings).generate(descriptors)
    except ApiSpecMetaError as e:
        raise click.ClickException(str(e)) from e
    document.write(output)
    click.echo(f"Swagger saved to {output} ({len(document.paths)} paths, {len(document.definitions)} definitions)")


@main.command()
@click.argument("left")
@click.argument("right")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output path of the markdown report.")
@click.option("--ignore-trailing-slash", is_flag=True, help="Treat /pets/ and /pets as the same path.")
@click.option("--except-prefix", multiple=True, help="Skip paths starting with this prefix (repeatable).")
@click.option("--except-content-type", multiple=True, help="Skip paths responding with this content type (repeatable).")
def diff(
    left: str,
    right: str,
    output: Path | None,
    ignore_trailing_slash: bool,
    except_prefix: tuple[str, ...],
    except_content_type: tuple[str, ...],
):
    """Diff two spec documents (paths or URLs); LEFT is the old side."""
    option = DiffOption()
    if ignore_trailing_slash:
        option.delete_path_trailing_slash()
    for prefix in except_prefix:
        option.except_path_by_prefix(prefix)
    for content_type in except_content_type:
        option.except_path_by_response_content_type(content_type)

    try:
        report = SpecDiff(option).diff_from_locations(left, right)
    except ApiSpecMetaError as e:
        raise click.ClickException(str(e)) from e

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(report, encoding="utf-8")
        click.echo(f"Diff report saved to {output}")
    elif report:
        click.echo(report)
    if not report:
        click.echo("No differences.")


@main.command()
@click.argument("generated")
@click.argument("master")
@click.option("--ignore-trailing-slash", is_flag=True, help="Treat /pets/ and /pets as the same path.")
@click.option("--new-only-as-log", is_flag=True, help="Only log when the master merely adds endpoints.")
def verify(generated: str, master: str, ignore_trailing_slash: bool, new_only_as_log: bool):
    """Verify that GENERATED is in sync with the MASTER document."""
    option = SyncOption()
    if ignore_trailing_slash:
        option.ignore_path_trailing_slash()
    if new_only_as_log:
        option.as_logging_if_new_only()
    try:
        SwaggerSyncVerifier().verify(generated, master, option)
    except ApiSpecMetaError as e:
        raise click.ClickException(str(e)) from e
    click.echo("In sync.")
