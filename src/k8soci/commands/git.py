"""
Git authentication commands.
"""

import typer

from k8soci.exceptions import AuthExchangeError, ConfigError
from k8soci.utils.config_store import ConfigStore
from k8soci.utils.console import error, info, success


def git_auth(
    exchange: bool = typer.Option(
        False, "--exchange", help="Resolve the credential, exchanging GitHub App tokens"
    ),
) -> None:
    """Show which Git authentication strategy is in effect"""
    try:
        chain = ConfigStore().build_auth_chain()
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1)

    strategy = chain.selected()
    if strategy is None:
        info("No Git authentication configured, remotes are accessed anonymously")
        return

    info(f"Git authentication strategy: {strategy.kind}")
    if not exchange:
        return

    try:
        resolved = chain.resolve()
    except AuthExchangeError as e:
        error(str(e))
        raise typer.Exit(1)
    success(f"Resolved credentials for user '{resolved.username}'")
