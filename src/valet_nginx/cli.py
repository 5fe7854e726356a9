"""
Command-line interface for Valet Nginx
"""
from typing import Optional

import typer

from .lib.cmd import (
    # Command implementations
    init_command,
    install_command,
    uninstall_command,
    restart_command,
    stop_command,
    lint_command,
    rewrite_command,
    sites_command,
    tld_command,
    loopback_command
)

app = typer.Typer(help="Valet Nginx - manage the Nginx server of your local Valet environment")

DEBUG_OPTION = typer.Option(False, '--debug', '-d', help='Enable debug logging')

@app.command()
def init():
    """Initialize Valet Nginx configuration"""
    return init_command()

@app.command()
def install(debug: bool = DEBUG_OPTION):
    """Install Nginx, its configuration and the per-site directory"""
    return install_command(debug=debug)

@app.command()
def uninstall(
    force: bool = typer.Option(False, '--force', '-f', help='Uninstall without confirmation'),
    debug: bool = DEBUG_OPTION
):
    """Stop and remove Nginx together with its configuration and logs"""
    return uninstall_command(force=force, debug=debug)

@app.command()
def restart(debug: bool = DEBUG_OPTION):
    """Check the configuration and restart Nginx"""
    return restart_command(debug=debug)

@app.command()
def stop(debug: bool = DEBUG_OPTION):
    """Stop Nginx"""
    return stop_command(debug=debug)

@app.command()
def lint(debug: bool = DEBUG_OPTION):
    """Check nginx.conf for errors"""
    return lint_command(debug=debug)

@app.command()
def rewrite(debug: bool = DEBUG_OPTION):
    """Regenerate the server blocks of all secured sites"""
    return rewrite_command(debug=debug)

@app.command()
def sites(debug: bool = DEBUG_OPTION):
    """List sites with an explicit Nginx configuration"""
    return sites_command(debug=debug)

@app.command()
def tld(
    name: Optional[str] = typer.Argument(None, help='New top-level domain (shows the current one if omitted)'),
    debug: bool = DEBUG_OPTION
):
    """Show or change the top-level domain of your sites"""
    return tld_command(tld=name, debug=debug)

@app.command()
def loopback(
    address: Optional[str] = typer.Argument(None, help='New loopback address (shows the current one if omitted)'),
    debug: bool = DEBUG_OPTION
):
    """Show or change the loopback address Nginx listens on"""
    return loopback_command(loopback=address, debug=debug)

def main():
    """Main entry point"""
    import logging

    # Set up basic logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Run the app
    app()

if __name__ == "__main__":
    main()
