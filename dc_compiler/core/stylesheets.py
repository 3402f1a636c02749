"""
Stylesheet reference detection and resolution.

Scripts load stylesheets through a handful of vault-read idioms bound to a
``const``. A binding counts as a stylesheet reference only when its variable
name looks like one (see ``is_stylesheet_variable``) and the path ends in the
stylesheet extension. Template-literal paths only yield the file name; those
are resolved by searching the project directory.
"""

import logging
import re
from typing import Dict, List, Optional

from dc_compiler.config import settings
from dc_compiler.errors import StoreError
from dc_compiler.models import (
    PatternKind,
    ScriptModule,
    StylesheetModule,
    StylesheetReference,
    StylesheetScan,
)
from dc_compiler.store.base import VaultStore
from dc_compiler.utils import get_file_name, get_stylesheet_module_name, is_stylesheet_path

logger = logging.getLogger("dc_compiler.stylesheets")

_BINDING = r"const\s+(\w*(?:[cC][sS][sS]|[sS][tT][yY][lL][eE])\w*)\s*=\s*await\s+"
_APP = r"(?:dc\.)?app\.vault\."
_QUOTED = r"""\s*['"]([^'"]+\.css)['"]\s*"""
_TEMPLATE = r"`[^`]*?/([^/`]+\.css)`"

# name -> (regex, kind)
PATTERNS = {
    "cachedRead": (
        _BINDING + _APP + r"cachedRead\s*\(\s*await\s+" + _APP + r"getFileByPath\s*\(" + _QUOTED + r"\)\s*\)",
        PatternKind.LITERAL,
    ),
    "readAbstract": (
        _BINDING + _APP + r"read\s*\(\s*" + _APP + r"getAbstractFileByPath\s*\(" + _QUOTED + r"\)\s*\)",
        PatternKind.LITERAL,
    ),
    "adapterRead": (
        _BINDING + _APP + r"adapter\.read\s*\(" + _QUOTED + r"\)",
        PatternKind.LITERAL,
    ),
    "cachedReadTemplate": (
        _BINDING + _APP + r"cachedRead\s*\(\s*await\s+" + _APP + r"getFileByPath\s*\(\s*" + _TEMPLATE + r"\s*\)\s*\)\s*;?",
        PatternKind.TEMPLATE,
    ),
    "readAbstractTemplate": (
        _BINDING + _APP + r"read\s*\(\s*" + _APP + r"getAbstractFileByPath\s*\(\s*" + _TEMPLATE + r"\s*\)\s*\)\s*;?",
        PatternKind.TEMPLATE,
    ),
    "adapterReadTemplate": (
        _BINDING + _APP + r"adapter\.read\s*\(\s*" + _TEMPLATE + r"\s*\)\s*;?",
        PatternKind.TEMPLATE,
    ),
    "cachedReadTagged": (
        _BINDING + _APP + r"cachedRead\s*\(\s*await\s+" + _APP + r"getFileByPath" + _TEMPLATE + r"\s*\)\s*;?",
        PatternKind.TAGGED,
    ),
    "readAbstractTagged": (
        _BINDING + _APP + r"read\s*\(\s*" + _APP + r"getAbstractFileByPath" + _TEMPLATE + r"\s*\)\s*;?",
        PatternKind.TAGGED,
    ),
    "adapterReadTagged": (
        _BINDING + _APP + r"adapter\.read" + _TEMPLATE + r"\s*;?",
        PatternKind.TAGGED,
    ),
    "headerLink": (
        _BINDING + r"dc\.require\s*\(\s*dc\.headerLink\s*\([^)]*,\s*['\"`]([^'\"`]+)['\"`]\s*\)\s*\)",
        PatternKind.CANONICAL,
    ),
}

_COMPILED = {name: (re.compile(regex, re.DOTALL), kind) for name, (regex, kind) in PATTERNS.items()}


def is_stylesheet_variable(name: Optional[str]) -> bool:
    """
    Variable-name heuristic: the name contains "css" or "style" in any case.

    False positives: unrelated names such as ``styleGuideUrl`` still pass and
    are then filtered by the path extension. False negatives: a stylesheet
    bound to e.g. ``theme`` is never detected.
    """
    if not name:
        return False
    lower = name.lower()
    return "css" in lower or "style" in lower


def detect_stylesheet_references(content: str) -> List[StylesheetReference]:
    """
    Find stylesheet references in the current text of one module.

    Offsets refer to ``content`` exactly as passed; callers must re-run
    detection after any edit to the text.

    At most ``settings.MAX_PATTERN_MATCHES`` matches are kept per idiom;
    when an idiom matches more often, the rest are ignored with a warning.
    """
    if not isinstance(content, str):
        return []

    references: List[StylesheetReference] = []
    for pattern_name, (regex, kind) in _COMPILED.items():
        for count, match in enumerate(regex.finditer(content), start=1):
            if count > settings.MAX_PATTERN_MATCHES:
                logger.warning(f"Stylesheet pattern {pattern_name} matched >{settings.MAX_PATTERN_MATCHES} times, stopping")
                break

            var_name, target = match.group(1), match.group(2)
            if not is_stylesheet_variable(var_name):
                continue
            if kind is not PatternKind.CANONICAL and not is_stylesheet_path(target):
                continue

            references.append(StylesheetReference(
                variable_name=var_name,
                file_path=None if kind is PatternKind.CANONICAL else target,
                module_name=target if kind is PatternKind.CANONICAL else None,
                pattern=pattern_name,
                pattern_kind=kind,
                start=match.start(),
                end=match.end(),
                full_match=match.group(0),
            ))

    return references


def find_stylesheets_by_name(store: VaultStore, directory: str, file_names: List[str]) -> Dict[str, Optional[str]]:
    """
    Search ``directory`` recursively for stylesheets with the given file names.

    The first match in traversal order wins. Unreadable directories are
    logged and skipped.
    """
    wanted = set(file_names)
    results: Dict[str, Optional[str]] = {name: None for name in file_names}

    def search(path: str) -> None:
        try:
            listing = store.list(path)
        except StoreError as e:
            logger.warning(f"Skipping unreadable directory {path}: {e}")
            return

        for file_path in listing.files:
            if not is_stylesheet_path(file_path):
                continue
            file_name = get_file_name(file_path)
            if file_name in wanted and results[file_name] is None:
                results[file_name] = file_path

        for folder in listing.folders:
            search(folder)

    search(directory)
    return results


def _read_stylesheet(store: VaultStore, path: str) -> Optional[StylesheetModule]:
    try:
        if not store.exists(path):
            logger.warning(f"Stylesheet not found: {path} - skipping")
            return None
        content = store.read(path)
    except StoreError as e:
        logger.warning(f"Failed to read stylesheet {path}: {e.message} - skipping")
        return None

    return StylesheetModule(
        path=path,
        name=get_file_name(path),
        module_name=get_stylesheet_module_name(path),
        content=content,
    )


def resolve_stylesheets(store: VaultStore, modules: List[ScriptModule], project_dir: str) -> StylesheetScan:
    """
    Detect every stylesheet reference in ``modules`` and load the files.

    Missing files and unresolvable partial references are logged and left
    out; they never fail the run.
    """
    scan = StylesheetScan()
    needed: Dict[str, None] = {}
    partials: Dict[str, Optional[str]] = {}

    logger.info(f"Scanning {len(modules)} modules for stylesheet references")
    for module in modules:
        refs = detect_stylesheet_references(module.content)
        if not refs:
            continue
        logger.debug(f"Module '{module.base_name}' has {len(refs)} stylesheet references")
        scan.references[module.base_name] = refs

        for ref in refs:
            if ref.is_canonical or not ref.file_path:
                continue
            if ref.is_partial_path:
                partials.setdefault(ref.file_path, None)
            else:
                needed.setdefault(ref.file_path, None)

    if partials:
        logger.info(f"Searching for {len(partials)} partial stylesheet names")
        for file_name, full_path in find_stylesheets_by_name(store, project_dir, list(partials)).items():
            if full_path:
                logger.debug(f"Resolved {file_name} -> {full_path}")
                partials[file_name] = full_path
                needed.setdefault(full_path, None)
            else:
                logger.warning(f"Could not resolve stylesheet: {file_name}")

    for path in needed:
        sheet = _read_stylesheet(store, path)
        if sheet is None:
            continue
        scan.stylesheets.append(sheet)
        scan.resolved.add(sheet.path)
        scan.resolved.add(sheet.name)
        logger.debug(f"Bundled {sheet.name} as module '{sheet.module_name}'")

    for refs in scan.references.values():
        for ref in refs:
            if ref.is_partial_path and ref.file_path and partials.get(ref.file_path):
                ref.resolved_path = partials[ref.file_path]

    logger.info(f"{len(scan.stylesheets)} stylesheets bundled")
    return scan
