"""CLI entrypoint for annotkit."""

import logging
import sys
from pathlib import Path

import click

from . import __version__


def _setup_logging(verbose: int) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="annotkit")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    envvar="ANNOTKIT_CONFIG",
    default=None,
    help="Annotation configuration (TOML). Defaults to $ANNOTKIT_CONFIG or ./annotations.toml",
)
@click.option("--verbose", "-V", count=True, help="Log engine activity (-V info, -VV debug)")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: int) -> None:
    """annotkit - compute dependent, cached annotations over tree models."""
    ctx.ensure_object(dict)
    _setup_logging(verbose)

    if config_path is None:
        config_path = Path.cwd() / "annotations.toml"
    if not config_path.is_file():
        raise click.BadParameter(f"File '{config_path}' does not exist.", param_hint="--config / -c")

    ctx.obj["config"] = config_path.resolve()


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def keys(ctx: click.Context, output_json: bool) -> None:
    """List configured annotation keys and what they require."""
    from .commands.annotate_cmd import run_keys

    sys.exit(run_keys(ctx.obj["config"], output_json))


@cli.command()
@click.option(
    "--key",
    "-k",
    "keys_",
    multiple=True,
    metavar="KEY",
    help="Only plan these keys (default: all)",
)
@click.pass_context
def check(ctx: click.Context, keys_: tuple[str, ...]) -> None:
    """Validate the configuration and print the computation rounds.

    Fails on cyclic or unresolvable requirements.
    """
    from .commands.annotate_cmd import run_check

    sys.exit(run_check(ctx.obj["config"], list(keys_) or None))


@cli.command()
@click.argument("model", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--key",
    "-k",
    "keys_",
    multiple=True,
    metavar="KEY",
    help="Annotation key to compute, with its requirements (repeatable; default: all)",
)
@click.option(
    "--remove",
    "remove_keys",
    multiple=True,
    metavar="KEY",
    help="Remove this key after annotating (repeatable)",
)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def annotate(
    ctx: click.Context,
    model: Path,
    keys_: tuple[str, ...],
    remove_keys: tuple[str, ...],
    output_json: bool,
) -> None:
    """Annotate a JSON model and print every node's annotations.

    Examples:

        annotkit -c annotations.toml annotate model.json

        annotkit annotate model.json -k derived-id --json
    """
    from .commands.annotate_cmd import run_annotate

    exit_code = run_annotate(
        ctx.obj["config"],
        model,
        list(keys_) or None,
        list(remove_keys) or None,
        output_json,
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
