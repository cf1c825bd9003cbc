"""CLI entry point for api-doc-builder."""

import importlib
import importlib.util
import logging
from pathlib import Path
from typing import Any

import click

from api_doc_builder.builder.assembler import build_swagger
from api_doc_builder.builder.paths import sanitize_path
from api_doc_builder.builder.validator import validate_document
from api_doc_builder.config import Config
from api_doc_builder.service.base import WebService
from api_doc_builder.spec.errors import DocBuildError


def _import_target(target: str) -> Any:
    """Resolve ``module:attr`` or ``path/to/file.py:attr`` (attr defaults to ``config``)."""
    location, sep, attr = target.rpartition(":")
    if not sep:
        location, attr = target, "config"

    if location.endswith(".py"):
        path = Path(location)
        if not path.exists():
            raise click.ClickException(f"No such file: {path}")
        spec = importlib.util.spec_from_file_location(f"_api_doc_target_{path.stem}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    else:
        try:
            module = importlib.import_module(location)
        except ImportError as e:
            raise click.ClickException(f"Cannot import {location}: {e}") from e

    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise click.ClickException(f"{location} has no attribute {attr!r}") from e


def _load_config(target: str) -> Config:
    """Load a Config, a WebService or a list of them; callables are called first."""
    obj = _import_target(target)
    if callable(obj) and not isinstance(obj, (Config, WebService)):
        obj = obj()
    if isinstance(obj, Config):
        return obj
    if isinstance(obj, WebService):
        return Config(web_services=[obj])
    if isinstance(obj, (list, tuple)) and all(isinstance(s, WebService) for s in obj):
        return Config(web_services=list(obj))
    raise click.ClickException(f"{target} is not a Config or a list of WebService")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log build details.")
def main(verbose: bool):
    """API Doc Builder — generate Swagger 2.0 documents from declared web services."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("target")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file path; stdout when omitted.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
@click.option("--check", is_flag=True, help="Fail when references or path parameters do not resolve.")
def build(target: str, output: Path | None, fmt: str, check: bool):
    """Build the Swagger document for TARGET (module:attr or file.py:attr)."""
    config = _load_config(target)
    try:
        document = build_swagger(config)
    except DocBuildError as e:
        raise click.ClickException(f"{e.kind.value}: {e.message}") from e

    if check:
        errors = validate_document(document)
        if errors:
            for pointer, message in errors.items():
                click.echo(f"{pointer}: {message}", err=True)
            raise click.ClickException(f"Document has {len(errors)} problem(s).")

    text = document.to_yaml() if fmt == "yaml" else document.to_json() + "\n"
    if output is None:
        click.echo(text, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Found {len(document.paths)} paths, {len(document.definitions)} definitions.", err=True)
    click.echo(f"Document saved to {output}", err=True)


@main.command()
@click.argument("target")
def paths(target: str):
    """List the sanitized paths of TARGET with their methods."""
    config = _load_config(target)
    rows = []
    for service in config.web_services:
        for route in service.routes():
            path, _ = sanitize_path(service.full_path(route))
            rows.append((path, route.method.upper()))
    for path, method in sorted(rows):
        click.echo(f"{method:7} {path}")
