"""Main CLI entry point for modelweave."""

import sys

import click

from modelweave import __version__
from modelweave.cli import commands
from modelweave.config import load_config_from_env
from modelweave.observability.logging import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="modelweave")
def cli() -> None:
    """modelweave - multi-provider LLM orchestration."""
    config = load_config_from_env()
    # Logs go to stderr so --json output on stdout stays parseable
    setup_logging(log_level=config.log_level, json_logs=config.json_logs, stream=sys.stderr)


cli.add_command(commands.list_models)
cli.add_command(commands.call_model)
cli.add_command(commands.call_many)
cli.add_command(commands.run_chain)
cli.add_command(commands.serve)


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
