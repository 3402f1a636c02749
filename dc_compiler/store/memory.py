from typing import Dict, Optional, Set

from dc_compiler.errors import StoreError
from .base import DirectoryListing, VaultStore


class MemoryVaultStore(VaultStore):
    """
    Dict-backed store.

    Directories are implied by file paths; ``mkdir`` records empty ones.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = {}
        self.directories: Set[str] = set()
        for path, content in (files or {}).items():
            self.write(path, content)

    @staticmethod
    def _clean(path: str) -> str:
        return path.strip("/")

    def _register_parents(self, path: str) -> None:
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            self.directories.add("/".join(parts[:i]))

    def exists(self, path: str) -> bool:
        path = self._clean(path)
        return path == "" or path in self.files or path in self.directories

    def list(self, path: str) -> DirectoryListing:
        path = self._clean(path)
        if path and path not in self.directories:
            raise StoreError(f"Failed to read directory: {path}. Not a directory", path)

        prefix = f"{path}/" if path else ""
        listing = DirectoryListing()
        for file_path in sorted(self.files):
            if file_path.startswith(prefix) and "/" not in file_path[len(prefix):]:
                listing.files.append(file_path)
        for dir_path in sorted(self.directories):
            if dir_path.startswith(prefix) and dir_path != path and "/" not in dir_path[len(prefix):]:
                listing.folders.append(dir_path)
        return listing

    def read(self, path: str) -> str:
        path = self._clean(path)
        if path not in self.files:
            raise StoreError(f"Failed to read file: {path}. File not found", path)
        return self.files[path]

    def write(self, path: str, content: str) -> None:
        path = self._clean(path)
        if path in self.directories:
            raise StoreError(f"Failed to write file: {path}. Is a directory", path)
        self._register_parents(path)
        self.files[path] = content

    def mkdir(self, path: str) -> None:
        path = self._clean(path)
        if path:
            self._register_parents(path + "/_")
