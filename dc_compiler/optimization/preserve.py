"""
Names that must survive obfuscation.

Built once over the whole ordered module list, before any module is
minified: identifiers visible across module boundaries go into the preserve
set, and every one- or two-character identifier already in the source goes
into the used-short-name set so generated names cannot shadow it.
"""

import re
from typing import Iterable, List, Set, Tuple

from dc_compiler.models import ScriptModule

RETURN_EXPORT_PATTERN = re.compile(r"return\s*\{([^}]+)\}")
IMPORT_DESTRUCTURE_PATTERN = re.compile(r"const\s*\{([^}]+)\}\s*=\s*(?:await\s+)?dc\.require")
OBJECT_KEY_PATTERN = re.compile(r"\{\s*([a-zA-Z_$][a-zA-Z0-9_$]*)\s*:")
FUNCTION_PARAMS_PATTERN = re.compile(r"function\s+[a-zA-Z_$][a-zA-Z0-9_$]*\s*\(\s*\{\s*([^}]+)\}\s*\)")
ARROW_PARAMS_PATTERN = re.compile(r"\(\s*\{\s*([^}]+)\}\s*\)\s*=>")
SHORT_NAME_PATTERN = re.compile(r"\b([a-zA-Z_$][a-zA-Z0-9_$]?)\b")


def _split_items(block: str) -> List[str]:
    return [item.strip() for item in block.split(",") if item.strip()]


def extract_exported_names(content: str) -> Set[str]:
    """Keys of the first ``return { ... }`` object (the module's exports)."""
    names = set()
    match = RETURN_EXPORT_PATTERN.search(content)
    if match:
        for item in _split_items(match.group(1)):
            name = item.split(":")[0].strip() if ":" in item else item
            if name:
                names.add(name)
    return names


def extract_imported_names(content: str) -> Set[str]:
    """Local names bound by ``const { a, b: c } = dc.require(...)`` (a, c)."""
    names = set()
    for match in IMPORT_DESTRUCTURE_PATTERN.finditer(content):
        for item in _split_items(match.group(1)):
            name = item.split(":")[1].strip() if ":" in item else item
            if name:
                names.add(name)
    return names


def extract_object_property_keys(content: str) -> Set[str]:
    return set(OBJECT_KEY_PATTERN.findall(content))


def extract_destructured_params(content: str) -> Set[str]:
    names = set()
    for pattern in (FUNCTION_PARAMS_PATTERN, ARROW_PARAMS_PATTERN):
        for block in pattern.findall(content):
            for param in _split_items(block):
                name = param.split(":")[0].strip()
                if name:
                    names.add(name)
    return names


def _preserve(names: Iterable[str], preserve_set: Set[str], used_short_names: Set[str]) -> None:
    for name in names:
        preserve_set.add(name)
        if len(name) <= 2:
            used_short_names.add(name)


def build_preserve_set(modules: List[ScriptModule]) -> Tuple[Set[str], Set[str]]:
    """
    Returns:
        (preserve_set, used_short_names) for the whole bundle.
    """
    preserve_set: Set[str] = set()
    used_short_names: Set[str] = set()

    for module in modules:
        content = module.content
        _preserve(extract_exported_names(content), preserve_set, used_short_names)
        _preserve(extract_imported_names(content), preserve_set, used_short_names)
        _preserve(module.dependencies, preserve_set, used_short_names)
        _preserve(extract_object_property_keys(content), preserve_set, used_short_names)
        _preserve(extract_destructured_params(content), preserve_set, used_short_names)
        used_short_names.update(SHORT_NAME_PATTERN.findall(content))

    return preserve_set, used_short_names
