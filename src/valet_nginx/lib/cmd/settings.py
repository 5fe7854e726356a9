"""
Tld and loopback command implementations for Valet Nginx
"""
import ipaddress
from typing import Optional

import typer
from rich.markup import escape

from ..config import Config, ConfigError, ValetEnvironment
from ..site import SiteError
from .common import console, enable_debug, load_proxy

def _load(env: ValetEnvironment) -> Config:
    # Saved back after changes; VALET_TLD / VALET_LOOPBACK must not leak into the file
    return Config.load(env.config_file, apply_env=False)

def tld_command(tld: Optional[str] = None, debug: bool = False):
    """Show or change the top-level domain"""
    enable_debug(debug)
    try:
        env = ValetEnvironment.detect()

        if tld is None:
            console.print(Config.load(env.config_file).tld)
            return
        config = _load(env)

        tld = tld.strip().lstrip('.')
        if not tld:
            console.print("[bold red]The tld cannot be empty")
            raise typer.Exit(code=1)

        old = {'tld': config.tld, 'loopback': config.loopback}

        # Server blocks first, a refused change must leave the saved tld alone
        proxy = load_proxy(env)
        proxy.site.resecure_for_new_configuration(old, {'tld': tld, 'loopback': config.loopback})

        config.tld = tld
        config.save(env.config_file)
        proxy.restart()

        console.print(f"[bold green]✓ Your Valet tld has been updated to {tld}")

    except typer.Exit:
        raise
    except SiteError as e:
        console.print(f"[bold red]{escape(str(e))}")
        raise typer.Exit(code=1)
    except ConfigError as e:
        console.print(f"[bold red]Configuration error: {escape(str(e))}")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)

def loopback_command(loopback: Optional[str] = None, debug: bool = False):
    """Show or change the loopback address"""
    enable_debug(debug)
    try:
        env = ValetEnvironment.detect()

        if loopback is None:
            console.print(Config.load(env.config_file).loopback)
            return
        config = _load(env)

        try:
            ipaddress.ip_address(loopback)
        except ValueError:
            console.print(f"[bold red]{loopback} is not a valid IP address")
            raise typer.Exit(code=1)

        old_loopback = config.loopback
        config.loopback = loopback
        config.save(env.config_file)

        proxy = load_proxy(env)
        proxy.site.alias_loopback(old_loopback, loopback)
        proxy.install_server()
        proxy.rewrite_secure_nginx_files()
        proxy.restart()

        console.print(f"[bold green]✓ Your Valet loopback address has been updated to {loopback}")

    except typer.Exit:
        raise
    except ConfigError as e:
        console.print(f"[bold red]Configuration error: {escape(str(e))}")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}")
        raise typer.Exit(code=1)
