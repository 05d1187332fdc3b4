"""CLI command computing and printing version variables"""

import json
import logging
import sys
from typing import Optional

import click

from gitsemver.cli.utils.logging import logger
from gitsemver.model.variables import VersionVariables
from gitsemver.versioning.calculator import VersionOptions, compute_version
from gitsemver.versioning.exceptions import VersioningError

VARIABLE_NAMES = VersionVariables.variable_names()


def format_variables(variables: VersionVariables, output: str) -> str:
    """Render variables as JSON or as Key=Value lines."""
    data = variables.to_dict(include_file_name=True)
    if output == "json":
        return json.dumps(data, indent=2)
    return "\n".join(f"{name}={value}" for name, value in data.items())


@click.command(name="show")
@click.argument(
    "path",
    type=click.Path(file_okay=False, exists=True),
    default=".",
    required=False,
)
@click.option("--url", help="Version a remote repository through a local mirror.")
@click.option("--branch", "-b", help="Branch to version instead of the checked out one.")
@click.option("--commit", "-c", help="Commit to version instead of the branch head.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Configuration file to use instead of gitsemver.yml.",
)
@click.option("--no-cache", is_flag=True, help="Neither read nor write the version cache.")
@click.option(
    "--no-normalize",
    is_flag=True,
    help="Use the dynamic mirror's refs as fetched.",
)
@click.option(
    "--dynamic-repo-location",
    type=click.Path(file_okay=False),
    help="Directory holding dynamic repository mirrors.",
)
@click.option(
    "--fetch-timeout",
    type=float,
    help="Seconds allowed for cloning or fetching a dynamic repository.",
)
@click.option(
    "--show-variable",
    "-v",
    type=click.Choice(VARIABLE_NAMES + ["FileName"], case_sensitive=False),
    help="Print a single variable.",
)
@click.option(
    "--output",
    "-o",
    type=click.Choice(["json", "keyvalue"]),
    default="json",
    show_default=True,
    help="Output format.",
)
def show(
    path: str,
    url: Optional[str],
    branch: Optional[str],
    commit: Optional[str],
    config_file: Optional[str],
    no_cache: bool,
    no_normalize: bool,
    dynamic_repo_location: Optional[str],
    fetch_timeout: Optional[float],
    show_variable: Optional[str],
    output: str,
):
    """Compute the semantic version of the repository at PATH.

    Example:

      gitsemver show . --show-variable FullSemVer
    """
    options = VersionOptions(
        working_directory=path,
        target_url=url,
        target_branch=branch,
        commit_id=commit,
        config_file=config_file,
        no_cache=no_cache,
        no_normalize=no_normalize,
        dynamic_repository_location=dynamic_repo_location,
        fetch_timeout=fetch_timeout,
    )

    try:
        variables = compute_version(options)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(
            f"Failed to compute version: {e}",
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        sys.exit(1)

    if show_variable:
        if show_variable == "FileName":
            value = variables.file_name
        else:
            value = variables[show_variable]
        click.echo(value or "")
        return

    click.echo(format_variables(variables, output))
