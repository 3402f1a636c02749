"""
Vault store interface.

The compiler never touches the filesystem directly; every listing, read and
write goes through a VaultStore. Paths are store-relative and use ``/``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


@dataclass
class DirectoryListing:
    """Immediate children of a directory, as full store paths."""
    files: List[str] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)


class VaultStore(ABC):
    """Abstract base class for vault storage backends."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a file or directory exists."""
        pass

    @abstractmethod
    def list(self, path: str) -> DirectoryListing:
        """List a directory. Raises StoreError if it cannot be listed."""
        pass

    @abstractmethod
    def read(self, path: str) -> str:
        """Read a text file. Raises StoreError on failure."""
        pass

    @abstractmethod
    def write(self, path: str, content: str) -> None:
        """Write a text file, replacing any existing content."""
        pass

    @abstractmethod
    def mkdir(self, path: str) -> None:
        """Create a directory (and its parents)."""
        pass
