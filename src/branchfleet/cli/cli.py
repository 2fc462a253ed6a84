import logging
import os

import click

from branchfleet.cli.commands.create import create_cmd
from branchfleet.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "BRANCHFLEET_DEBUG"


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="branchfleet")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Bulk-create git branches from a common base."""
    if verbose or os.environ.get(DEBUG_ENV_VAR):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(create_cmd)


def main() -> None:
    """CLI entry point used by the `branchfleet` console script."""
    cli()
