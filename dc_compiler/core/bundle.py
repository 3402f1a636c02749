"""
Bundle assembly.

Produces the compiled note: a metadata comment header, a usage demo, one
``# <module>`` section per module in load order, and an optional stylesheet
section. Tools re-parse this layout, so headings and fences are fixed.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from dc_compiler.errors import InvalidInputError
from dc_compiler.models import ScriptModule, StylesheetModule

TRAILING_RETURN_PATTERN = re.compile(r"return\s*\{([^}]+)\}\s*;?\s*$", re.DOTALL)
VIEW_EXPORT_PATTERN = re.compile(r"View:\s*(\w+)")
SINGLE_EXPORT_PATTERN = re.compile(r"^\s*(\w+)\s*$")
FIRST_EXPORT_PATTERN = re.compile(r"^\s*(?:\w+\s*:\s*)?(\w+)")


@dataclass
class DemoTarget:
    component_name: str
    is_multi_export: bool = False


def _require(value, field: str) -> None:
    if not value or not isinstance(value, str):
        raise InvalidInputError(field, f"{field} must be a non-empty string")


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def detect_demo_target(modules: List[ScriptModule], entry_name: str) -> DemoTarget:
    """
    Pick the name the demo should render, from the entry module's exports.

    Priority: an explicit ``View: X`` export, then a single bare export, then
    the first of several exports (flagged as multi-export).
    """
    entry = next((m for m in modules if m.base_name == entry_name), None)
    if entry is None:
        return DemoTarget(entry_name)

    match = TRAILING_RETURN_PATTERN.search(entry.content)
    if not match:
        return DemoTarget(entry_name)
    exports = match.group(1).strip()

    if "View:" in exports:
        view = VIEW_EXPORT_PATTERN.search(exports)
        if view:
            return DemoTarget(view.group(1))

    single = SINGLE_EXPORT_PATTERN.match(exports)
    if single:
        return DemoTarget(single.group(1))

    first = FIRST_EXPORT_PATTERN.match(exports)
    if first:
        return DemoTarget(first.group(1), is_multi_export=True)

    return DemoTarget(entry_name)


def ensure_view_wrapper(content: str) -> str:
    """Turn a trailing ``return { X };`` into ``return { View: X };``."""
    match = TRAILING_RETURN_PATTERN.search(content)
    if not match:
        return content

    exports = match.group(1).strip()
    if "View:" in exports:
        return content

    single = SINGLE_EXPORT_PATTERN.match(exports)
    if not single:
        return content

    replacement = f"return {{ View: {single.group(1)} }};"
    return content[:match.start()] + replacement + content[match.end():]


def generate_header(project_dir: str, entry_name: str, module_count: int, stylesheet_count: int,
                    minify: bool, obfuscate: bool, version: Optional[str], timestamp: str) -> List[str]:
    parts = [
        "<!-- Compiled by Datacore Script Compiler -->",
        f"<!-- Source: {project_dir} -->",
        f"<!-- Main Component: {entry_name} -->",
        f"<!-- Compiled: {timestamp} -->",
        f"<!-- Files: {module_count} -->",
    ]
    if version:
        parts.append(f"<!-- Version: {version} -->")
    if stylesheet_count > 0:
        parts.append(f"<!-- CSS Files: {stylesheet_count} -->")
    if minify:
        parts.append(f"<!-- Minified: {'Yes (Obfuscated)' if obfuscate else 'Yes'} -->")
    parts.append("")
    return parts


def generate_demo(target: DemoTarget, entry_name: str, note_name: str, include_notes: bool = True) -> List[str]:
    name = target.component_name
    parts = ["# Demo"]

    if include_notes:
        parts += [
            "> [!NOTE]- A Note on the Demo",
            "> This compiler does its best to demonstrate the way you call your script",
            "> However you may need to adjust if your specific script works in an unexpected way.",
            "> The compiled script should work (any other caveats like Data files aside) regardless of the demo's functioning.",
            "",
        ]
        if target.is_multi_export:
            parts += [
                "> [!WARNING] Multiple Exports Detected",
                "> This script exports multiple components. The compiler selected the first one for this demo.",
                "> You may need to adjust the code below to use the correct component for your needs.",
                "",
            ]
    else:
        parts.append("")

    binding = name if target.is_multi_export else f"View: {name}"
    parts += [
        "```datacorejsx",
        f"// Example: How to use the compiled {name} component",
        f'const {{ {binding} }} = await dc.require(dc.headerLink(dc.resolvePath("{note_name}"), "{entry_name}"));',
        "",
        "// Pass props to your component as needed:",
        f'// return <{name} someProp="value" />;',
        "",
        f"return <{name} />;",
        "```",
        "",
    ]

    if include_notes:
        parts += [
            "> [!NOTE] External Data Files",
            "> If your project uses external data files, you'll need to manually update the paths in the compiled code.",
            '> Use `dc.resolvePath("your-data-file.json")` to reference data files in your vault.',
            "",
        ]
    return parts


def generate_module_sections(modules: List[ScriptModule], entry_name: str) -> List[str]:
    parts = []
    for module in modules:
        content = ensure_view_wrapper(module.content) if module.base_name == entry_name else module.content
        parts += [
            f"# {module.base_name}",
            "",
            "```" + (module.extension or "javascript"),
            content,
            "```",
            "",
        ]
    return parts


def escape_stylesheet(text: str) -> str:
    """Escape backslashes and backticks so the text is safe inside a template literal."""
    return text.replace("\\", "\\\\").replace("`", "\\`")


def generate_stylesheet_sections(stylesheets: List[StylesheetModule], note_name: str) -> List[str]:
    parts = [
        "---",
        "",
        "# CSS Styles",
        "",
        "> [!TIP] Using CSS Files",
        "> CSS files are bundled as JavaScript modules that return CSS strings:",
        "> ```javascript",
        f'> const myStyles = await dc.require(dc.headerLink(dc.resolvePath("{note_name}"), "styleName"));',
        "> // Use in JSX: <style>{myStyles}</style>",
        "> ```",
        "",
    ]
    for sheet in stylesheets:
        parts += [
            f"## {sheet.module_name}",
            "",
            "```js",
            "const css = `",
            escape_stylesheet(sheet.content),
            "`;",
            "",
            "return css;",
            "```",
            "",
        ]
    return parts


def generate_bundle(modules: List[ScriptModule], project_dir: str, entry_name: str, note_name: str,
                    stylesheets: Optional[List[StylesheetModule]] = None, minify: bool = False,
                    obfuscate: bool = False, version: Optional[str] = None,
                    include_usage_notes: bool = True, timestamp: Optional[str] = None) -> str:
    """Assemble the compiled note text."""
    if not isinstance(modules, list) or not modules:
        raise InvalidInputError("orderedFiles", "orderedFiles must be a non-empty array")
    _require(project_dir, "projectDir")
    _require(entry_name, "mainComponentName")
    _require(note_name, "compiledNoteName")

    stylesheets = stylesheets or []
    target = detect_demo_target(modules, entry_name)

    parts = generate_header(
        project_dir, entry_name, len(modules), len(stylesheets),
        minify, obfuscate, version, timestamp or iso_timestamp(),
    )
    parts += generate_demo(target, entry_name, note_name, include_usage_notes)
    parts += generate_module_sections(modules, entry_name)
    if stylesheets:
        parts += generate_stylesheet_sections(stylesheets, note_name)

    return "\n".join(parts)
