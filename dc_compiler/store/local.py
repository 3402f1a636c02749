import logging
import os
from pathlib import Path
from typing import Union

from dc_compiler.errors import StoreError
from .base import DirectoryListing, VaultStore

logger = logging.getLogger("dc_compiler.store")


class LocalVaultStore(VaultStore):
    """Filesystem-backed store rooted at a vault directory."""

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        """Map a store path onto the filesystem, refusing to leave the root."""
        target = (self.root / path.strip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise StoreError(f"Path escapes vault root: {path}", path)
        return target

    def _relative(self, target: Path) -> str:
        return target.relative_to(self.root).as_posix()

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).exists()
        except StoreError:
            return False

    def list(self, path: str) -> DirectoryListing:
        target = self._resolve(path)
        try:
            entries = sorted(os.scandir(target), key=lambda e: e.name)
        except OSError as e:
            raise StoreError(f"Failed to read directory: {path}. {e}", path)

        listing = DirectoryListing()
        for entry in entries:
            rel = self._relative(Path(entry.path))
            if entry.is_dir():
                listing.folders.append(rel)
            elif entry.is_file():
                listing.files.append(rel)
        return listing

    def read(self, path: str) -> str:
        target = self._resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Failed to read file: {path}. {e}", path)

    def write(self, path: str, content: str) -> None:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Failed to write file: {path}. {e}", path)
        logger.debug(f"Wrote {len(content)} characters to {path}")

    def mkdir(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Failed to create directory: {path}. {e}", path)
