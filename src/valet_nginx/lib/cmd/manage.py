"""
Site listing command implementation for Valet Nginx
"""
import logging

import typer
from rich.markup import escape
from rich.table import Table

from .common import console, enable_debug, load_proxy

logger = logging.getLogger(__name__)

def sites_command(debug: bool = False) -> None:
    """
    List sites with an explicit Nginx configuration

    Reads the per-site configuration directory; secured sites are marked.
    """
    enable_debug(debug)
    try:
        proxy = load_proxy()
        sites = proxy.configured_sites()
        secured = set(proxy.site.secured())
        logger.info(f"Found {len(sites)} configured sites")

        if not sites:
            console.print("[yellow]No sites have an explicit Nginx configuration")
            raise typer.Exit(code=0)

        table = Table(title="Configured sites")
        table.add_column("Site", style="cyan")
        table.add_column("Secured", style="green")
        table.add_column("Server block", style="dim")

        for site in sites:
            table.add_row(
                site,
                "Yes" if site in secured else "No",
                str(proxy.env.nginx_path / site)
            )

        console.print(table)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)
