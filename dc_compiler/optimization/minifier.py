"""
Minification and identifier obfuscation.

Stage A (``minify``) strips comments, console diagnostics and surplus
whitespace. Stage B (``minify_with_obfuscation``) additionally renames
declared identifiers to short generated names.

Renaming is whole-bundle: the caller threads one counter and one
used-short-name set through every module in load order, so generated names
never collide across modules. Modules must therefore be processed one at a
time, in order.
"""

import logging
import re
import string
from dataclasses import dataclass
from typing import Optional, Set, Tuple

from dc_compiler.core.scanner import remove_comments

logger = logging.getLogger("dc_compiler.minifier")

REACT_HOOKS = (
    "useState", "useEffect", "useCallback", "useMemo", "useRef", "useContext",
    "useReducer", "useLayoutEffect", "useImperativeHandle", "useDebugValue",
)
PRESERVED_KEYWORDS = (
    "dc", "return", "export", "import", "const", "let", "var", "function",
    "class", "extends", "await", "async",
)
PRESERVED_IDENTIFIERS = frozenset(PRESERVED_KEYWORDS + REACT_HOOKS)

# Generated names that would be parsed as keywords
RESERVED_SHORT_NAMES = frozenset({"do", "if", "in", "of", "as", "is"})

LOWER_POOL = string.ascii_lowercase
UPPER_POOL = string.ascii_uppercase

_DIAGNOSTIC_PATTERNS = [
    re.compile(rf"console\.{method}\s*\([^;]*\)\s*;?\s*")
    for method in ("log", "warn", "error", "debug", "info")
]

_WHITESPACE_RULES = [
    (re.compile(r"[ \t]+"), " "),
    (re.compile(r"\n\s*\n\s*\n+"), "\n\n"),
    (re.compile(r"\n\s+"), "\n"),
    (re.compile(r"\s*\{\s*"), "{"),
    (re.compile(r"\s*\}\s*"), "}"),
    (re.compile(r"\s*\(\s*"), "("),
    (re.compile(r"\s*\)\s*"), ")"),
    (re.compile(r"\s*;\s*"), ";"),
    (re.compile(r"\s*,\s*"), ","),
    (re.compile(r"\s*=\s*"), "="),
    (re.compile(r"\s*:\s*"), ":"),
]

_IDENT = r"[a-zA-Z_$][a-zA-Z0-9_$]*"
VAR_PATTERN = re.compile(rf"\b(?:const|let|var)\s+({_IDENT})\s*=")
FUNC_PATTERN = re.compile(rf"\bfunction\s+({_IDENT})\s*\(")
ARROW_PATTERN = re.compile(rf"\bconst\s+({_IDENT})\s*=\s*\([^)]*\)\s*=>")
COMPONENT_TAG_PATTERN = re.compile(r"<([A-Z][a-zA-Z0-9_$]*)")

# Note and module names inside a merged reference are never renamed
REFERENCE_SPAN_PATTERN = re.compile(
    r"""dc\.headerLink\s*\(\s*dc\.resolvePath\s*\(\s*(['"`])[^'"`]*\1\s*\)\s*,\s*(['"`])[^'"`]*\2\s*\)"""
)


@dataclass
class RenameState:
    """Bundle-wide renaming state, threaded through modules in load order."""
    preserve_names: Set[str]
    used_short_names: Set[str]
    counter: int = 0


def remove_console_statements(code: str) -> str:
    for pattern in _DIAGNOSTIC_PATTERNS:
        code = pattern.sub("", code)
    return code


def compress_whitespace(code: str) -> str:
    for pattern, replacement in _WHITESPACE_RULES:
        code = pattern.sub(replacement, code)
    return code.strip()


def aggressive_whitespace_compression(code: str) -> str:
    code = re.sub(r"\n+", "\n", code)
    code = re.sub(r"\n\s*", "\n", code)
    code = re.sub(r"\s*\n", "\n", code)
    return code.strip()


def minify(code: str) -> str:
    """Stage A: comments, diagnostics, whitespace."""
    if not isinstance(code, str):
        return code
    code = remove_comments(code)
    code = remove_console_statements(code)
    return compress_whitespace(code)


def generate_short_name(index: int, component: bool = False) -> str:
    """Bijective base-26 name: 0 -> a, 25 -> z, 26 -> aa, ..."""
    pool = UPPER_POOL if component else LOWER_POOL
    name = ""
    num = index
    while True:
        name = pool[num % 26] + name
        num = num // 26 - 1
        if num < 0:
            return name


def starts_with_capital(name: str) -> bool:
    return bool(name) and name[0].isupper()


def find_component_names(code: str) -> Set[str]:
    """
    Names used as markup tags (``<Widget``).

    Heuristic: any ``<`` followed by a capitalised word counts, so a
    comparison such as ``a <B`` is a false positive; such names are simply
    left unrenamed.
    """
    return set(COMPONENT_TAG_PATTERN.findall(code))


def should_preserve(name: str, preserve_names: Set[str], components: Set[str]) -> bool:
    if name in PRESERVED_IDENTIFIERS:
        return True
    if name.startswith("_"):
        return True
    return name in preserve_names or name in components


def _next_free_name(state: RenameState, component: bool) -> str:
    while True:
        candidate = generate_short_name(state.counter, component)
        state.counter += 1
        if candidate not in state.used_short_names and candidate not in RESERVED_SHORT_NAMES:
            return candidate


def shorten_variable_names(code: str, state: RenameState) -> str:
    """Rename declared identifiers in ``code``, advancing ``state``."""
    components = find_component_names(code)
    candidates = {}

    for pattern in (VAR_PATTERN, FUNC_PATTERN, ARROW_PATTERN):
        for name in pattern.findall(code):
            if should_preserve(name, state.preserve_names, components):
                if len(name) <= 2:
                    state.used_short_names.add(name)
            else:
                candidates.setdefault(name, None)

    # Longest first so a replacement never lands inside a longer pending name
    for name in sorted(candidates, key=len, reverse=True):
        if len(name) <= 2:
            state.used_short_names.add(name)
            continue

        short = _next_free_name(state, starts_with_capital(name))
        state.used_short_names.add(short)
        code = rename_identifier(code, name, short)

    return code


def rename_identifier(code: str, name: str, short: str) -> str:
    """Whole-word rename of ``name`` outside merged reference spans."""
    pattern = re.compile(rf"\b{re.escape(name)}\b")
    parts = []
    last = 0
    for match in REFERENCE_SPAN_PATTERN.finditer(code):
        parts.append(pattern.sub(short, code[last:match.start()]))
        parts.append(match.group(0))
        last = match.end()
    parts.append(pattern.sub(short, code[last:]))
    return "".join(parts)


def minify_with_obfuscation(code: str, counter_start: int = 0,
                            preserve_names: Optional[Set[str]] = None,
                            used_short_names: Optional[Set[str]] = None) -> Tuple[str, int]:
    """
    Stage A plus renaming.

    ``used_short_names`` is updated in place with every generated name.

    Returns:
        (code, next_counter)
    """
    if not isinstance(code, str):
        return code, counter_start

    state = RenameState(
        preserve_names=preserve_names if preserve_names is not None else set(),
        used_short_names=used_short_names if used_short_names is not None else set(),
        counter=counter_start,
    )
    code = shorten_variable_names(minify(code), state)
    return aggressive_whitespace_compression(code), state.counter
