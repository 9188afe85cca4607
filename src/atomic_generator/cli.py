"""CLI entry point for atomic-generator."""

import logging
from pathlib import Path

import click

from atomic_generator.errors import GenerationError
from atomic_generator.generator.batch import BatchOrchestrator, load_batch_config, load_query_param_config, write_outputs
from atomic_generator.generator.connectors import CONNECTORS
from atomic_generator.generator.options import GenerationOptions
from atomic_generator.generator.postprocess import load_acronyms
from atomic_generator.generator.workflow import generate_workflow
from atomic_generator.parser.swagger import parse_openapi


def _build_options(
    connector: str,
    query_params_config: Path | None,
    acronyms: Path | None,
    **kwargs,
) -> GenerationOptions:
    return GenerationOptions(
        connector=connector,
        query_params=load_query_param_config(query_params_config) if query_params_config else {},
        acronyms=load_acronyms(acronyms) if acronyms else [],
        **kwargs,
    )


def common_options(func):
    """Options shared by `generate` and `batch`."""
    decorators = [
        click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
        click.option("--connector", default="meraki", type=click.Choice(sorted(CONNECTORS), case_sensitive=False), help="Connector to target."),
        click.option("--support-idempotency", is_flag=True, help="Tolerate a known failure as success when asked to."),
        click.option("--idempotency-condition", default="", help="Error message regex (create) or status code (other methods) to tolerate."),
        click.option("--category-id", default="", help="Category id to put the workflow under."),
        click.option("--category-name", default="", help="Category name to put the workflow under."),
        click.option("--platform", default=None, help="Prefix for names and titles (defaults to the connector's platform)."),
        click.option("--query-params-config", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="YAML/JSON file mapping operationIds to allowed query parameters."),
        click.option("--stringify-body-inputs", is_flag=True, help="Present numeric and boolean body inputs as text."),
        click.option("--acronyms", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="CSV file listing acronyms to keep upper-case."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Atomic Generator: build automation workflows from OpenAPI operations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@common_options
@click.option("--operation-id", required=True, help="The operationId to generate a workflow for.")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write the workflow here instead of stdout.")
def generate(spec_path: Path, operation_id: str, output: Path | None, connector: str, query_params_config: Path | None, acronyms: Path | None, **kwargs):
    """Generate the workflow for a single operation."""
    try:
        spec = parse_openapi(spec_path)
        options = _build_options(connector, query_params_config, acronyms, **kwargs)
        content = generate_workflow(spec, operation_id, options)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(content)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content + "\n", encoding="utf-8")
    click.echo(f"Workflow saved to {output}", err=True)


@main.command()
@common_options
@click.option("-c", "--config", "config_path", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML/JSON file describing the workflows to generate.")
@click.option("-o", "--output-dir", default="outputs", type=click.Path(file_okay=False, path_type=Path), help="Directory to write generated workflows to.")
def batch(spec_path: Path, config_path: Path, output_dir: Path, connector: str, query_params_config: Path | None, acronyms: Path | None, **kwargs):
    """Generate every workflow described by a config file."""
    try:
        spec = parse_openapi(spec_path)
        config = load_batch_config(config_path)
        options = _build_options(connector, query_params_config, acronyms, **kwargs)
        click.echo(f"Generating {len(config.workflows)} workflow entries from {config_path}...")
        results = list(BatchOrchestrator(spec, options).run(config))
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    for file_path in write_outputs(results, output_dir):
        click.echo(f"  Created {file_path}")
    click.echo(f"Generated {len(results)} workflows in {output_dir}")
