"""Strata CLI - Main Entry Point.

Commands:
    openapi export - Write the generated document to a file or stdout
    openapi check  - Assemble the document and report declaration faults
    routes         - List resolved routes
    version        - Show version information
"""

import json
import logging
import sys
from typing import Optional

import click
import yaml

from .. import __version__
from ..config import ConfigLoader
from ..faults import Fault
from ..openapi.config import OpenAPIConfig
from ..openapi.visibility import effective_hidden
from . import __cli_name__
from .colors import _CHECK, _CROSS, error, info, success, table
from .targets import TargetError, load_generator


def _fail(message: str) -> None:
    error(f"  {_CROSS} {message}")
    sys.exit(1)


def _load(ctx: click.Context, target: str):
    config: Optional[OpenAPIConfig] = None
    if ctx.obj.get("config_path"):
        try:
            config = ConfigLoader.load(paths=[ctx.obj["config_path"]]).openapi_config()
        except Fault as e:
            _fail(f"{e.code}: {e.message}")
    try:
        return load_generator(target, config)
    except TargetError as e:
        _fail(str(e))


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file (YAML or JSON)')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, config_path: Optional[str], verbose: bool):
    """Convention-routed controllers with a generated OpenAPI document.

    \b
    TARGET is 'package.module:attribute' naming a generator, a route
    registry, a controller or a list of controllers.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['verbose'] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# OpenAPI
# ============================================================================

@cli.group()
def openapi():
    """Generate the OpenAPI document."""
    pass


@openapi.command('export')
@click.argument('target')
@click.option('--output', '-o', type=click.Path(dir_okay=False, writable=True),
              help='Write to file instead of stdout')
@click.option('--format', 'fmt', type=click.Choice(['json', 'yaml']), default='json',
              show_default=True, help='Output format')
@click.option('--indent', type=int, default=2, show_default=True, help='JSON indentation')
@click.pass_context
def openapi_export(ctx, target: str, output: Optional[str], fmt: str, indent: int):
    """
    Export the OpenAPI document.

    Examples:
      strata openapi export app.main:registry
      strata openapi export app.main:registry -o openapi.yaml --format yaml
    """
    generator = _load(ctx, target)
    try:
        spec = generator.document()
    except Fault as e:
        _fail(f"{e.code}: {e.message}")

    if fmt == 'yaml':
        text = yaml.safe_dump(spec, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(spec, indent=indent, default=str) + "\n"

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        success(f"  {_CHECK} Wrote {len(spec['paths'])} paths to {output}")
    else:
        click.echo(text, nl=False)


@openapi.command('check')
@click.argument('target')
@click.pass_context
def openapi_check(ctx, target: str):
    """Assemble the document and report declaration faults."""
    generator = _load(ctx, target)
    try:
        document = generator.assemble()
    except Fault as e:
        _fail(f"{e.code}: {e.message}")

    success(
        f"  {_CHECK} {len(document.paths)} paths, {document.operation_count} operations, "
        f"{len(document.schemas)} component schemas"
    )
    if document.hidden:
        info(f"  Hidden: {', '.join(document.hidden)}")


# ============================================================================
# Routes
# ============================================================================

@cli.command('routes')
@click.argument('target')
@click.pass_context
def routes(ctx, target: str):
    """List resolved routes in registration order."""
    generator = _load(ctx, target)

    rows = []
    try:
        for route in generator.registry.routes():
            resolution = route.resolve()
            hidden = effective_hidden(route.hide_from_docs, route.controller.hide_from_docs)
            rows.append([
                resolution.verb,
                resolution.full_path,
                str(resolution.success_status),
                route.qualified_name,
                "hidden" if hidden else "",
            ])
    except Fault as e:
        _fail(f"{e.code}: {e.message}")

    if not rows:
        info("  No routes registered")
        return
    table(["VERB", "PATH", "STATUS", "OPERATION", "DOCS"], rows)


@cli.command('version')
def version():
    """Show version information."""
    click.echo(f"{__cli_name__} {__version__}")


def main():
    """Entry point for `strata` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
