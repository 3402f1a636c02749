"""Path and naming helpers shared by the pipeline stages."""

import re
from typing import Optional

from dc_compiler.config import settings

_SEGMENT_SPLIT = re.compile(r"[/\\]")


def _script_suffix_pattern() -> "re.Pattern[str]":
    alternatives = "|".join(re.escape(ext.lstrip(".")) for ext in settings.SCRIPT_EXTENSIONS)
    return re.compile(rf"\.(?:{alternatives})$", re.IGNORECASE)


def normalize_path(path: str) -> str:
    """Strip leading and trailing slashes from a store path."""
    return path.strip("/")


def join_path(*parts: str) -> str:
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def get_file_name(file_path: str) -> str:
    return _SEGMENT_SPLIT.split(file_path)[-1]


def get_file_extension(file_path: str) -> str:
    """Return the extension including the dot, or '' when there is none."""
    last_dot = file_path.rfind(".")
    return "" if last_dot == -1 else file_path[last_dot:]


def remove_extension(file_name: str, ext: str) -> str:
    if ext and file_name.endswith(ext):
        return file_name[: -len(ext)]
    return file_name


def extract_module_name(path_string: Optional[str]) -> Optional[str]:
    """
    Reduce a reference path to a module base name.

    ``"lib/utils.js"`` -> ``"utils"``, ``"Widget"`` -> ``"Widget"``.
    Returns None for an empty path or a path that is only an extension.
    """
    if not path_string:
        return None
    file_name = get_file_name(path_string)
    return _script_suffix_pattern().sub("", file_name) or None


def is_stylesheet_path(file_path: Optional[str]) -> bool:
    return bool(file_path) and file_path.lower().endswith(settings.STYLESHEET_EXTENSION)


def get_stylesheet_module_name(file_path: Optional[str]) -> Optional[str]:
    """``"styles/theme.css"`` -> ``"theme"``."""
    if not file_path or not isinstance(file_path, str):
        return None
    file_name = get_file_name(file_path)
    if is_stylesheet_path(file_name):
        return file_name[: -len(settings.STYLESHEET_EXTENSION)]
    return file_name


def extract_note_name(output_file_name: str) -> str:
    """Output artifact name without its note extension."""
    name = output_file_name.strip()
    if name.endswith(settings.NOTE_EXTENSION):
        name = name[: -len(settings.NOTE_EXTENSION)]
    return name
