"""
Reference rewriting.

Once every module lives in one compiled note, each cross-module reference is
rewritten to the canonical header-link form::

    dc.require(dc.headerLink(dc.resolvePath("<note>"), "<module>"))

Edits are collected as (start, end, replacement) spans against the current
text and applied right-to-left so earlier offsets stay valid.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List

from dc_compiler.config import settings
from dc_compiler.core.stylesheets import detect_stylesheet_references
from dc_compiler.errors import InvalidInputError, UnresolvedReference
from dc_compiler.models import ScriptModule, StylesheetReference, StylesheetScan
from dc_compiler.utils import extract_module_name, get_stylesheet_module_name

logger = logging.getLogger("dc_compiler.rewriter")

DC_REQUIRE_PATTERN = re.compile(r"""(?:await\s+)?dc\.require\s*\(\s*['"`]([^'"`]+)['"`]\s*\)""")
DC_RESOLVE_PATH_PATTERN = re.compile(
    r"""(?:await\s+)?dc\.require\s*\(\s*dc\.resolvePath\s*\(\s*['"`]([^'"`]+)['"`]\s*\)\s*\)"""
)
REQUIRE_MODULE_PATTERN = re.compile(r"""requireModuleByName\s*\(\s*['"`]([^'"`]+)['"`]\s*\)""")

# Separator swallowed by the partial-path idioms (`;` and/or whitespace)
TRAILING_TERMINATOR_PATTERN = re.compile(r"\s*;?$")


@dataclass
class Replacement:
    start: int
    end: int
    text: str


def canonical_reference(note_name: str, module_name: str, awaited: bool = False) -> str:
    prefix = "await " if awaited else ""
    return f'{prefix}dc.require(dc.headerLink(dc.resolvePath("{note_name}"), "{module_name}"))'


def apply_replacements(content: str, replacements: Iterable[Replacement]) -> str:
    """Apply spans from the highest start offset down."""
    result = content
    for rep in sorted(replacements, key=lambda r: r.start, reverse=True):
        result = result[:rep.start] + rep.text + result[rep.end:]
    return result


def _line_span(content: str, match: "re.Match[str]") -> Replacement:
    line_start = content.rfind("\n", 0, match.start()) + 1
    return Replacement(line_start, match.end(), "")


def find_path_resolver_imports(content: str) -> List[Replacement]:
    """
    Spans for lines that only exist to load the path-resolution helper.

    Covers ``const r = dc.resolvePath("pathResolver.js")`` together with the
    ``dc.require(r)`` that consumes it, and a direct
    ``dc.require("…/pathResolver.js")``.
    """
    helper = re.escape(settings.PATH_RESOLVER_MODULE)
    spans: List[Replacement] = []

    var_pattern = re.compile(
        r"""const\s+(\w+)\s*=\s*dc\.resolvePath\s*\(\s*['"`]""" + helper + r"""\.js['"`]\s*\)\s*;?\s*\n?"""
    )
    var_names = []
    for match in var_pattern.finditer(content):
        var_names.append(match.group(1))
        spans.append(_line_span(content, match))

    for var_name in var_names:
        require_pattern = re.compile(
            r"const\s+(?:\{[^}]+\}|\w+)\s*=\s*(?:await\s+)?dc\.require\s*\(\s*"
            + re.escape(var_name)
            + r"\s*\)\s*;?\s*\n?"
        )
        for match in require_pattern.finditer(content):
            spans.append(_line_span(content, match))

    direct_pattern = re.compile(
        r"""const\s+(?:\{[^}]+\}|\w+)\s*=\s*(?:await\s+)?dc\.require\s*\(\s*['"`][^'"`]*"""
        + helper
        + r"""\.js['"`]\s*\)\s*;?\s*\n?"""
    )
    for match in direct_pattern.finditer(content):
        span = _line_span(content, match)
        if not any(s.start == span.start and s.end == span.end for s in spans):
            spans.append(span)

    return spans


def _module_replacements(content, pattern, available, note_name, skip_nested=False) -> List[Replacement]:
    replacements = []
    for match in pattern.finditer(content):
        full_match = match.group(0)
        if skip_nested and ("dc.headerLink" in full_match or "dc.resolvePath" in full_match):
            continue

        module_name = extract_module_name(match.group(1))
        if not module_name or module_name == settings.PATH_RESOLVER_MODULE:
            continue
        if module_name not in available:
            raise UnresolvedReference(module_name, full_match)

        awaited = full_match.lstrip().startswith("await")
        replacements.append(Replacement(
            match.start(), match.end(), canonical_reference(note_name, module_name, awaited)
        ))
    return replacements


def rewrite_imports(content: str, module_names: Iterable[str], note_name: str) -> str:
    """
    Rewrite module references in ``content`` to the canonical form.

    Raises:
        UnresolvedReference: A reference targets a base name not in ``module_names``.
    """
    if not isinstance(content, str):
        raise InvalidInputError("File content", "File content must be a string")
    if not note_name or not isinstance(note_name, str):
        raise InvalidInputError("compiledNoteName")

    available = set(module_names)
    replacements = find_path_resolver_imports(content)
    replacements += _module_replacements(content, DC_RESOLVE_PATH_PATTERN, available, note_name)
    replacements += _module_replacements(content, DC_REQUIRE_PATTERN, available, note_name, skip_nested=True)
    replacements += _module_replacements(content, REQUIRE_MODULE_PATTERN, available, note_name)
    return apply_replacements(content, replacements)


def rewrite_stylesheet_references(content: str, references: List[StylesheetReference], note_name: str) -> str:
    """Rewrite resolved stylesheet bindings to load the bundled stylesheet module."""
    if not references:
        return content

    replacements = []
    for ref in references:
        if ref.is_canonical:
            continue
        module_name = get_stylesheet_module_name(ref.resolved_path or ref.file_path)
        if not module_name:
            continue
        terminator = TRAILING_TERMINATOR_PATTERN.search(ref.full_match).group(0)
        replacements.append(Replacement(
            ref.start,
            ref.end,
            f"const {ref.variable_name} = {canonical_reference(note_name, module_name, awaited=True)}{terminator}",
        ))
    return apply_replacements(content, replacements)


def _bundled_references(module: ScriptModule, scan: StylesheetScan) -> List[StylesheetReference]:
    """Re-detect on the module's current text and keep the bundled ones."""
    bundled = []
    for ref in detect_stylesheet_references(module.content):
        if ref.is_canonical:
            continue
        if not scan.is_resolved(ref):
            logger.debug(f"Skipping unresolved stylesheet {ref.file_path} in '{module.base_name}'")
            continue
        if ref.is_partial_path:
            ref.resolved_path = scan.path_for_file_name(ref.file_path)
        bundled.append(ref)
    return bundled


def rewrite_all(ordered: List[ScriptModule], all_modules: List[ScriptModule], note_name: str,
                scan: StylesheetScan) -> None:
    """Rewrite module and stylesheet references of every ordered module in place."""
    module_names = [m.base_name for m in all_modules]
    logger.info(f"Rewriting references for {len(ordered)} modules")

    for module in ordered:
        module.content = rewrite_imports(module.content, module_names, note_name)

        refs = _bundled_references(module, scan)
        if refs:
            before = len(module.content)
            module.content = rewrite_stylesheet_references(module.content, refs, note_name)
            logger.debug(
                f"'{module.base_name}': rewrote {len(refs)} stylesheet references "
                f"({before} -> {len(module.content)} chars)"
            )
