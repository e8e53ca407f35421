"""
Configuration commands.
"""

import typer

from k8soci.utils.config_store import SECRET_NAMES, ConfigStore
from k8soci.utils.console import console, create_table, error, mask, success

app = typer.Typer(help="Manage k8soci configuration")


@app.command("set-secret")
def set_secret(
    name: str = typer.Argument(..., help=f"One of: {', '.join(SECRET_NAMES)}"),
    value: str = typer.Option(..., prompt=True, hide_input=True, help="Secret value"),
) -> None:
    """Store a Git secret in the system keyring"""
    if name not in SECRET_NAMES:
        error(f"Unknown secret '{name}', expected one of: {', '.join(SECRET_NAMES)}")
        raise typer.Exit(1)
    ConfigStore().store_git_secret(name, value)
    success(f"Stored Git {name} in keyring")


@app.command("set-proxy")
def set_proxy(
    source: str = typer.Argument(..., help="Registry host to redirect"),
    proxy: str = typer.Argument(..., help="Proxy registry host"),
) -> None:
    """Redirect pulls from a registry to a proxy registry"""
    store = ConfigStore()
    proxies = dict(store.get_settings().get("proxy_registries") or {})
    proxies[source] = proxy
    store.save_settings({"proxy_registries": proxies})
    success(f"Pulls from {source} now go through {proxy}")


@app.command("show")
def show() -> None:
    """Show the effective configuration with secrets masked"""
    store = ConfigStore()
    table = create_table(f"Settings ({store.settings_file})", ["Key", "Value"])
    for key, value in store.get_git_settings().items():
        is_secret = key in ("git_token", "git_password", "github_app_private_key")
        table.add_row(key, mask(value) if is_secret else value)
    for source, proxy in store.get_proxy_registry_map().items():
        table.add_row(f"proxy {source}", proxy)
    console.print(table)
