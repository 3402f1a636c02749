"""
File discovery.

Walks a project directory through the vault store and loads every script
module. Listing is sequential (it decides duplicate names in traversal
order); file reads are issued concurrently.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

from dc_compiler.config import settings
from dc_compiler.errors import (
    DirectoryNotFound,
    DuplicateModuleName,
    InvalidInputError,
    NoModulesFound,
    StoreError,
)
from dc_compiler.models import ScriptModule
from dc_compiler.store.base import VaultStore
from dc_compiler.utils import get_file_extension, get_file_name, normalize_path, remove_extension

logger = logging.getLogger("dc_compiler.discovery")


def _collect_entries(store: VaultStore, directory: str) -> List[Tuple[str, str, str]]:
    """Return (path, name, base_name) for every script file under ``directory``."""
    entries: List[Tuple[str, str, str]] = []
    seen = set()

    def walk(current: str) -> None:
        listing = store.list(current)

        for file_path in listing.files:
            ext = get_file_extension(file_path)
            if ext not in settings.SCRIPT_EXTENSIONS:
                continue
            name = get_file_name(file_path)
            base_name = remove_extension(name, ext)
            if base_name in seen:
                raise DuplicateModuleName(base_name)
            seen.add(base_name)
            entries.append((file_path, name, base_name))

        for folder in listing.folders:
            try:
                walk(folder)
            except DuplicateModuleName:
                raise
            except StoreError as e:
                raise StoreError(f"Failed to process subdirectory: {folder}. {e}", folder)

    walk(directory)
    return entries


def _read_module(store: VaultStore, entry: Tuple[str, str, str]) -> ScriptModule:
    path, name, base_name = entry
    try:
        content = store.read(path)
    except StoreError as e:
        raise StoreError(f"Failed to read file: {path}. {e}", path)
    return ScriptModule(path=path, name=name, base_name=base_name, content=content)


def scan_directory(store: VaultStore, directory_path: str) -> List[ScriptModule]:
    """
    Load every script module under ``directory_path``.

    Returns:
        Modules sorted by file name (case-sensitive).

    Raises:
        InvalidInputError: ``directory_path`` is empty or not a string.
        DirectoryNotFound: The directory does not exist.
        DuplicateModuleName: Two files share a base name.
        NoModulesFound: No script files were found.
    """
    if not directory_path or not isinstance(directory_path, str):
        raise InvalidInputError("Directory path")

    directory = normalize_path(directory_path)
    if not store.exists(directory):
        raise DirectoryNotFound(directory)

    entries = _collect_entries(store, directory)
    if not entries:
        raise NoModulesFound(directory)

    with ThreadPoolExecutor(max_workers=max(1, settings.DISCOVERY_MAX_WORKERS)) as executor:
        modules = list(executor.map(lambda entry: _read_module(store, entry), entries))

    modules.sort(key=lambda m: m.name)
    logger.info(f"Discovered {len(modules)} script modules in {directory}")
    return modules
