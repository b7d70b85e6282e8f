"""routespec CLI - Main Entry Point.

The `routespec` command generates OpenAPI documents from controllers.

Commands:
    generate - Build the document for one or more controllers
"""

import importlib
import inspect
import json
import logging
import sys
from typing import List, Optional, Tuple

import click
import yaml

from . import __version__
from .config import ConfigLoader
from .controller.base import Controller
from .faults import Fault
from .openapi import OpenAPIGenerator


def success(message: str) -> None:
    click.echo(click.style(message, fg="green"), err=True)


def warning(message: str) -> None:
    click.echo(click.style(message, fg="yellow"), err=True)


def error(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)


def load_controllers(target: str) -> List[type]:
    """
    Resolve ``module:Class`` to one controller, or ``module`` to every
    Controller subclass defined in that module (in definition order).
    """
    module_name, _, attr = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"cannot import '{module_name}': {exc}", param_hint="TARGET")

    if attr:
        controller = getattr(module, attr, None)
        if not inspect.isclass(controller):
            raise click.BadParameter(f"'{target}' is not a class", param_hint="TARGET")
        return [controller]

    controllers = [
        member for member in vars(module).values()
        if inspect.isclass(member)
        and issubclass(member, Controller)
        and member is not Controller
        and member.__module__ == module.__name__
    ]
    if not controllers:
        raise click.BadParameter(f"no controllers found in '{module_name}'", param_hint="TARGET")
    return controllers


@click.group()
@click.version_option(version=__version__, prog_name="routespec")
def cli():
    """Generate OpenAPI documents from declarative route metadata."""


@cli.command()
@click.argument("targets", nargs=-1, required=True)
@click.option("--config", "-c", "config_paths", multiple=True, help="Config file (YAML/JSON, glob allowed)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), help="Write to file instead of stdout")
@click.option("--format", "-f", "output_format", type=click.Choice(["json", "yaml"]), default="json", show_default=True)
@click.option("--strict", is_flag=True, help="Exit with status 1 when a route failed")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def generate(
    targets: Tuple[str, ...],
    config_paths: Tuple[str, ...],
    output: Optional[str],
    output_format: str,
    strict: bool,
    verbose: bool,
):
    """
    Generate the document for TARGET controllers.

    Examples:
      routespec generate myapp.controllers:UsersController
      routespec generate myapp.controllers --format yaml -o openapi.yaml
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    controllers: List[type] = []
    for target in targets:
        controllers.extend(load_controllers(target))

    try:
        config = ConfigLoader.load(paths=list(config_paths) or None).spec_config()
        generator = OpenAPIGenerator(config)
        document = generator.generate(controllers)
    except Fault as fault:
        raise click.ClickException(str(fault))

    data = document.to_dict()
    if output_format == "yaml":
        rendered = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    else:
        rendered = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(rendered)
        success(f"Wrote {len(document.paths)} path(s) to {output}")
    else:
        click.echo(rendered, nl=False)

    for diagnostic in generator.diagnostics.warnings:
        warning(diagnostic.format())
    for diagnostic in generator.diagnostics.failures:
        error(diagnostic.format())

    if strict and generator.diagnostics.failed:
        sys.exit(1)


def main():
    """Entry point for `routespec` command."""
    cli(obj={})


if __name__ == "__main__":
    main()
