"""gitsemver CLI"""

import click

from gitsemver import __version__
from gitsemver.cli.cache import cache
from gitsemver.cli.show import show

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="gitsemver")
@click.pass_context
def cli(ctx):
    """
    Semantic versions from git history.
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(show))
cli.add_command(add_debug_option(cache))

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
