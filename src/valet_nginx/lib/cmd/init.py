"""
Init command implementation for Valet Nginx
"""
import typer
from rich.markup import escape

from ..config import Config, ConfigError, ValetEnvironment
from .common import console

def init_command():
    """Initialize Valet Nginx configuration"""
    try:
        env = ValetEnvironment.detect()
        defaults = Config.load(env.config_file) if env.config_file.exists() else None
        config = Config.initialize_interactive(env.config_file, defaults=defaults)
        console.print("[bold green]✓ Configuration initialized successfully!")
        console.print(f"\nSites will be served as <name>.{config.tld} on {config.loopback}.")
    except ConfigError as e:
        console.print(f"[bold red]Configuration error: {escape(str(e))}")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)
