import logging
import sys

import click

from .pipeline import (
    DiagnosticSink,
    GeneratorError,
    PipelineGenerator,
    StyleRegistry,
    load_config,
)

logger = logging.getLogger("openapi_to_dart")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_LINT_ERRORS = 2


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr, force=True)


@click.command()
@click.option("--input", "-i", "source", required=True, type=str, help="Path or URL of the Swagger/OpenAPI document")
@click.option("--output-dir", "-o", default=None, type=click.Path(file_okay=False), help="Directory for generated models")
@click.option("--style", "-s", default=None, type=str, help="Generation style: plain_dart, json_serializable or freezed")
@click.option("--project-dir", default=None, type=click.Path(file_okay=False), help="Project root (cache and config lookup)")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False), help="Configuration file")
@click.option("--changed-only/--all", "changed_only", default=None, help="Only regenerate schemas that changed")
@click.option("--use-json-key/--no-use-json-key", "use_json_key", default=None, help="Emit @JsonKey for renamed fields")
@click.option("--format/--no-format", "format_code", default=None, help="Run dart format on generated code")
@click.option("--strict-lint", is_flag=True, default=False, help="Exit with status 2 when lint reports errors")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.option("--quiet", "-q", is_flag=True, default=False)
def openapi_to_dart(
    source,
    output_dir,
    style,
    project_dir,
    config,
    changed_only,
    use_json_key,
    format_code,
    strict_lint,
    verbose,
    quiet,
):
    """Generate Dart models from a Swagger 2 / OpenAPI 3 document."""
    configure_logging(verbose, quiet)

    try:
        file_config = load_config(config, project_dir or ".")
        generator_config = file_config.merge(
            output_dir=output_dir,
            style=style,
            project_dir=project_dir,
            changed_only=changed_only,
            use_json_key=use_json_key,
        )
        if format_code is not None:
            generator_config.formatter.enabled = format_code

        generator = PipelineGenerator(generator_config, DiagnosticSink(), StyleRegistry())
        result = generator.run(source)
    except GeneratorError as e:
        logger.error("%s", e)
        sys.exit(EXIT_FAILURE)

    for name, error in result.failed.items():
        click.echo(f"Failed: {name}: {error}", err=True)

    if not quiet:
        click.echo(
            f"Generated {result.schemas_processed} model(s) in {result.output_dir} "
            f"({result.files_created} created, {result.files_updated} updated, "
            f"{len(result.skipped)} unchanged, {len(result.deleted_files)} deleted)"
        )

    if result.failed:
        sys.exit(EXIT_FAILURE)
    if strict_lint and result.lint_errors:
        logger.error("Lint reported %d error(s)", len(result.lint_errors))
        sys.exit(EXIT_LINT_ERRORS)
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    openapi_to_dart()
