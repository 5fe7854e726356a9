"""
Proxy command implementations for Valet Nginx
"""
import typer
from rich.markup import escape

from ..config import ConfigError
from ..proxy.base import ConfigurationInvalid
from .common import console, enable_debug, load_proxy

def restart_command(debug: bool = False):
    """Restart Nginx after checking its configuration"""
    enable_debug(debug)
    try:
        proxy = load_proxy()
        proxy.restart()
        console.print("[bold green]✓ Nginx restarted")

    except ConfigurationInvalid as e:
        console.print(f"[bold red]! {escape(str(e))}")
        console.print("Nginx was not restarted. Run 'valet-nginx lint' after fixing the configuration.")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Error while restarting Nginx: {escape(str(e))}")
        raise typer.Exit(code=1)

def stop_command(debug: bool = False):
    """Stop Nginx"""
    enable_debug(debug)
    try:
        proxy = load_proxy()
        console.print("Stopping Nginx...")
        proxy.stop()
        console.print("[bold green]✓ Nginx stopped")

    except Exception as e:
        console.print(f"[bold red]Error while stopping Nginx: {escape(str(e))}")
        raise typer.Exit(code=1)

def lint_command(debug: bool = False):
    """Check the Nginx configuration for errors"""
    enable_debug(debug)
    try:
        proxy = load_proxy()
        proxy.lint()
        console.print(f"[bold green]✓ {proxy.nginx_conf} is valid")

    except ConfigurationInvalid as e:
        console.print(f"[bold red]! Configuration test failed (exit code {e.exit_code})")
        console.print(e.output, markup=False)
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)

def rewrite_command(debug: bool = False):
    """Regenerate server blocks of secured sites"""
    enable_debug(debug)
    try:
        proxy = load_proxy()
        proxy.rewrite_secure_nginx_files()
        console.print("[bold green]✓ Secured sites regenerated")

    except ConfigError as e:
        console.print(f"[bold red]Configuration error: {escape(str(e))}")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)
