"""Publisher command-line interface."""

import os
from pathlib import Path

import click
from rich.console import Console

from publisher import __version__
from publisher.constants import DEFAULT_CONFIG_PATH, LOG_FILE_ENV
from publisher.exceptions import PublisherError
from publisher.logging import get_logger, setup_logging
from publisher.publish import PublishOptions, Publisher

console = Console(stderr=True)
logger = get_logger("cli")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="publisher")
@click.argument("target_arg", metavar="[TARGET]", required=False)
@click.option("--target", "-t", "target_opt", help="Deployment target (alternative to the positional TARGET)")
@click.option(
    "--path",
    "-p",
    "config_path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="The path to the publisher config file",
)
@click.option("--skip-prerun", is_flag=True, help="Skip the preRun step")
@click.option("--tag", default="", help="Value substituted for ${TAG} in the config")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(
    ctx: click.Context,
    target_arg: str | None,
    target_opt: str | None,
    config_path: Path,
    skip_prerun: bool,
    tag: str,
    verbose: bool,
) -> None:
    """publisher is a small CLI for publishing static sites to GitHub Pages.

    Copies the files selected in the config into a cached clone of the
    TARGET's repository, commits and pushes them.

    Examples:

        publisher prod

        publisher prod --tag v1.2.0 --skip-prerun

        publisher --target staging --path deploy/publisher.yml -v
    """
    target = target_arg or target_opt
    if not target:
        console.print("[red]Error:[/red] No target specified\n")
        click.echo(ctx.get_help(), err=True)
        raise SystemExit(1)

    options = PublishOptions(
        target=target,
        config_path=config_path,
        skip_pre_run=skip_prerun,
        tag=tag,
        verbose=verbose,
    )
    setup_logging(verbose=options.verbose, log_file=os.environ.get(LOG_FILE_ENV) or None)

    try:
        result = Publisher.from_options(options).run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise SystemExit(130) from None
    except PublisherError as e:
        logger.debug("Publish failed", exc_info=True)
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        if options.verbose:
            console.print_exception()
        raise SystemExit(1) from e

    if result.commit_sha is None:
        console.print("[yellow]Nothing changed; no new commit was created[/yellow]")
    console.print("[green]✓[/green] Successfully published to GitHub Pages! Enjoy!")


if __name__ == "__main__":
    cli()
