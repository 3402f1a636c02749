from pathlib import Path
from typing import Dict, Tuple

from dc_compiler.config import settings

from .base import VaultStore
from .local import LocalVaultStore
from .memory import MemoryVaultStore

# Singleton cache: (type, resolved root) -> instance
_STORE_CACHE: Dict[Tuple[str, str], VaultStore] = {}


def create_store(store_type: str = "local", root: str = ".") -> VaultStore:
    """
    Factory to create or retrieve a vault store.

    Args:
        store_type: "local" or "memory".
        root: Vault root directory (local stores only).

    Returns:
        A ready-to-use VaultStore instance. Local stores are cached per root;
        memory stores are always fresh.
    """
    store_type = store_type.lower()

    if store_type == "memory":
        return MemoryVaultStore()

    if store_type == "local":
        cache_key = (store_type, str(Path(root).resolve()))
        if cache_key not in _STORE_CACHE:
            _STORE_CACHE[cache_key] = LocalVaultStore(root)
        return _STORE_CACHE[cache_key]

    raise ValueError(f"Unknown store type: {store_type}")


def get_store(root: str = ".") -> VaultStore:
    """Store selected by ``settings.STORE_TYPE`` (env: DC_COMPILER_STORE_TYPE)."""
    return create_store(settings.STORE_TYPE, root)
