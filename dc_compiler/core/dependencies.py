"""Static dependency extraction for one script module."""

import re
from typing import List

from dc_compiler.core.scanner import remove_comments
from dc_compiler.utils import extract_module_name

# dc.require("path"), dc.require(dc.resolvePath("path")) and the
# already-merged dc.require(dc.headerLink(x, "name")) form
DC_REQUIRE_PATTERN = re.compile(
    r"""(?:await\s+)?dc\.require\s*\(\s*(?:"""
    r"""dc\.headerLink\s*\([^)]*,\s*['"`]([^'"`]+)['"`]\s*\)"""
    r"""|dc\.resolvePath\s*\(\s*['"`]([^'"`]+)['"`]\s*\)"""
    r"""|['"`]([^'"`]+)['"`])"""
)

REQUIRE_MODULE_PATTERN = re.compile(r"""requireModuleByName\s*\(\s*['"`]([^'"`]+)['"`]\s*\)""")


def extract_dependencies(content: str) -> List[str]:
    """
    Return the base names a module references, in order of first appearance.

    Comments are stripped first so commented-out requires do not count.
    """
    if not isinstance(content, str):
        return []

    code = remove_comments(content)
    dependencies = {}

    for match in DC_REQUIRE_PATTERN.finditer(code):
        module_name = extract_module_name(match.group(1) or match.group(2) or match.group(3))
        if module_name:
            dependencies.setdefault(module_name, None)

    for match in REQUIRE_MODULE_PATTERN.finditer(code):
        module_name = extract_module_name(match.group(1))
        if module_name:
            dependencies.setdefault(module_name, None)

    return list(dependencies)
