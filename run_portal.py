"""Mini README: Entry point CLI for the KPiR portal service.

Commands:
    * run - start the FastAPI application under uvicorn.
    * resolve - show where the recovery gate would send a given URL.

Host and port default to the ``KPIR_PORTAL_*`` settings when the options are
omitted.
"""

from __future__ import annotations

from typing import List

import typer
import uvicorn

from kpir_portal.configuration import get_settings
from kpir_portal.logging_utils import configure_root_logger
from kpir_portal.recovery import (
    NavigationIntent,
    RecoveryRouteGate,
    StaticLocationProvider,
    match_reset_token,
)

cli = typer.Typer(help="Run and inspect the KPiR portal recovery service.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger()

    # 0.0.0.0 is a bind address, not something a browser can open.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting KPiR portal on {effective_host}:{effective_port}.\n"
        f"Open your browser at http://{browser_host}:{effective_port}"
    )
    uvicorn.run(
        "kpir_portal.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def resolve(
    url: str = typer.Argument(..., help="URL or path to evaluate, fragment included."),
) -> None:
    """Print the token found in URL and the redirect the gate would issue."""

    settings = get_settings()
    provider = StaticLocationProvider.from_url(url)
    issued: List[NavigationIntent] = []

    def navigate(target: NavigationIntent, *, replace: bool) -> None:
        issued.append(target)

    found = match_reset_token(provider.current())
    RecoveryRouteGate(navigate, reset_path=settings.reset_path).observe(provider)

    typer.echo(f"token: {found.token} (from {found.source.value})" if found else "token: none")
    typer.echo(f"redirect: {issued[0].to_url()}" if issued else "redirect: none")


if __name__ == "__main__":
    cli()
