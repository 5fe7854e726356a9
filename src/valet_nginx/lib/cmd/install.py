"""
Install and uninstall command implementations for Valet Nginx
"""
import typer
from rich.markup import escape
from rich.prompt import Confirm

from ..config import Config, ConfigError, ValetEnvironment
from ..proxy.base import InstallationFailure
from .common import console, enable_debug, load_proxy

def install_command(debug: bool = False):
    """Install Nginx and its configuration"""
    enable_debug(debug)
    try:
        env = ValetEnvironment.detect()
        if not env.config_file.exists():
            Config().save(env.config_file)
            console.print(f"Created default configuration at {env.config_file}")

        proxy = load_proxy(env)
        proxy.install()
        proxy.restart()

        console.print("[bold green]✓ Nginx installed successfully")
        console.print(f"Configuration: {proxy.nginx_conf}")

    except InstallationFailure as e:
        console.print(f"[bold red]Installation failed: {escape(str(e))}")
        raise typer.Exit(code=1)
    except ConfigError as e:
        console.print(f"[bold red]Configuration error: {escape(str(e))}")
        console.print("Please run 'valet-nginx init' to initialize the configuration.")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)

def uninstall_command(force: bool = False, debug: bool = False):
    """Uninstall Nginx"""
    enable_debug(debug)
    try:
        if not force and not Confirm.ask("Are you sure you want to uninstall Nginx and delete its configuration?"):
            return

        proxy = load_proxy()
        proxy.uninstall()
        console.print("[bold green]✓ Nginx uninstalled successfully")

    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)
