"""
Privilege-aware filesystem access and stub rendering
"""
import logging
import os
import pwd
import re
import tempfile
from contextlib import contextmanager
from importlib import resources
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set

from .utils import is_root

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r'\bVALET_[A-Z_]+\b')

# Placeholders each packaged stub must contain in its active lines
STUB_PLACEHOLDERS: Dict[str, Set[str]] = {
    'nginx.conf': {'VALET_USER', 'VALET_HOME_PATH'},
    'valet.conf': {'VALET_HOME_PATH', 'VALET_SERVER_PATH', 'VALET_STATIC_PREFIX'},
    'fastcgi_params': set(),
    'secure.valet.conf': {
        'VALET_HOME_PATH', 'VALET_SERVER_PATH', 'VALET_STATIC_PREFIX',
        'VALET_SITE', 'VALET_CERT', 'VALET_KEY', 'VALET_LOOPBACK',
    },
}


class Filesystem:
    """Filesystem operations that keep files owned by the invoking user"""

    def __init__(self, user: str):
        self.user = user

    def _owner_ids(self, owner: str):
        try:
            entry = pwd.getpwnam(owner)
        except KeyError:
            raise FilesystemFailure(f"Unknown user: {owner}")
        return entry.pw_uid, entry.pw_gid

    @contextmanager
    def owned_by(self, path: Path, owner: Optional[str] = None) -> Iterator[Path]:
        """Hand ``path`` to ``owner`` once the block exits, whatever happens inside"""
        owner = owner or self.user
        try:
            yield path
        finally:
            if is_root() and os.path.lexists(path):
                uid, gid = self._owner_ids(owner)
                try:
                    os.chown(path, uid, gid)
                except OSError as e:
                    raise FilesystemFailure(f"Could not hand {path} to {owner}: {e}")

    def put(self, path: Path, contents: str) -> None:
        """Atomically write ``contents`` to ``path``"""
        path = Path(path)
        try:
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, 'w') as f:
                    f.write(contents)
                os.chmod(tmp, 0o644)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise FilesystemFailure(f"Could not write {path}: {e}")

    def put_as_user(self, path: Path, contents: str, owner: Optional[str] = None) -> None:
        """Write a file and make sure it belongs to the invoking user"""
        with self.owned_by(Path(path), owner) as target:
            self.put(target, contents)
        logger.debug(f"Wrote {path}")

    def get(self, path: Path) -> str:
        try:
            return Path(path).read_text()
        except OSError as e:
            raise FilesystemFailure(f"Could not read {path}: {e}")

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def ensure_dir_exists(self, path: Path, owner: Optional[str] = None) -> None:
        """Create a directory (and parents) if missing"""
        path = Path(path)
        if path.is_dir():
            return
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemFailure(f"Could not create directory {path}: {e}")
        if owner:
            with self.owned_by(path, owner):
                pass

    def mkdir_as_user(self, path: Path, mode: int = 0o755) -> None:
        path = Path(path)
        with self.owned_by(path):
            try:
                path.mkdir(mode=mode, parents=True, exist_ok=True)
            except OSError as e:
                raise FilesystemFailure(f"Could not create directory {path}: {e}")

    def scandir(self, path: Path) -> List[str]:
        """List entry names in ``path``, sorted"""
        try:
            return sorted(os.listdir(path))
        except OSError as e:
            raise FilesystemFailure(f"Could not scan {path}: {e}")

    def unlink(self, path: Path) -> None:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            raise FilesystemFailure(f"Could not remove {path}: {e}")


class Templates:
    """Loads stubs and substitutes their placeholders"""

    def __init__(self, files: Filesystem, overrides: Optional[Path] = None):
        self.files = files
        self.overrides = overrides

    def get_stub(self, name: str) -> str:
        """
        Load a stub, preferring a user override when one exists

        Raises:
            TemplateError: If no stub with that name ships with the package
        """
        if self.overrides is not None:
            custom = Path(self.overrides) / name
            if self.files.exists(custom):
                logger.debug(f"Using custom stub {custom}")
                return self.files.get(custom)

        stub = resources.files('valet_nginx').joinpath('stubs').joinpath(name)
        if not stub.is_file():
            raise TemplateError(f"Unknown stub: {name}")
        return stub.read_text()

    @staticmethod
    def placeholders(text: str) -> Set[str]:
        """Placeholders used in lines that are not comments"""
        found = set()
        for line in text.splitlines():
            if line.lstrip().startswith('#'):
                continue
            found.update(PLACEHOLDER_PATTERN.findall(line))
        return found

    def render(self, name: str, text: str, tokens: Dict[str, str]) -> str:
        """
        Replace every placeholder of ``tokens`` in ``text``

        Args:
            name: Stub name, used in error messages
            text: Stub contents
            tokens: Placeholder to literal value

        Returns:
            Rendered text

        Raises:
            TemplateError: If the stub's placeholders differ from the token keys
        """
        used = self.placeholders(text)
        expected = set(tokens)
        if used != expected:
            missing = ', '.join(sorted(expected - used)) or '-'
            unknown = ', '.join(sorted(used - expected)) or '-'
            raise TemplateError(
                f"Placeholders of {name} do not match (not in stub: {missing}; no value for: {unknown})"
            )

        for placeholder in sorted(tokens, key=len, reverse=True):
            text = text.replace(placeholder, str(tokens[placeholder]))
        return text


class FilesystemFailure(Exception):
    """Filesystem operation failed"""
    pass


class TemplateError(Exception):
    """Stub could not be rendered"""
    pass
