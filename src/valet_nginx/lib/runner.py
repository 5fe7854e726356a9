"""
Shell command execution for Valet Nginx
"""
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Sequence

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of a finished command"""
    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandLine:
    """Runs commands synchronously, optionally through sudo"""

    def _build(self, args: Sequence[str], sudo: bool) -> List[str]:
        command = [str(arg) for arg in args]
        return ['sudo'] + command if sudo else command

    def run(self, args: Sequence[str], sudo: bool = False) -> CommandResult:
        """
        Run a command and capture stdout and stderr together

        Args:
            args: Command and its arguments
            sudo: Whether to run with elevated privileges

        Returns:
            CommandResult with the exit code and combined output

        Raises:
            CommandError: If the command could not be executed at all
        """
        command = self._build(args, sudo)
        logger.debug(f"Running: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False  # Exit codes are reported, not raised
            )
        except OSError as e:
            raise CommandError(f"Failed to run {command[0]}: {e}")

        if result.returncode != 0:
            logger.debug(f"{command[0]} exited with {result.returncode}: {result.stdout.strip()}")

        return CommandResult(exit_code=result.returncode, output=result.stdout or "")

    def quietly(self, args: Sequence[str], sudo: bool = False) -> int:
        """Run a command, discarding its output, and return the exit code"""
        return self.run(args, sudo=sudo).exit_code


class CommandError(Exception):
    """Command could not be executed"""
    pass
