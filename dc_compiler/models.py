"""
Data model for a compilation run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from dc_compiler.config import settings


@dataclass
class ScriptModule:
    """One discovered script file. ``base_name`` is unique within a run."""
    path: str
    name: str
    base_name: str
    content: str
    dependencies: Tuple[str, ...] = ()

    @property
    def extension(self) -> str:
        return self.name[self.name.rfind(".") + 1:] if "." in self.name else ""


class PatternKind(str, Enum):
    """How a stylesheet reference was written in source."""
    LITERAL = "literal"
    TEMPLATE = "template"
    TAGGED = "tagged"
    CANONICAL = "canonical"


@dataclass
class StylesheetReference:
    variable_name: str
    file_path: Optional[str]
    pattern: str
    pattern_kind: PatternKind
    start: int
    end: int
    full_match: str
    module_name: Optional[str] = None
    resolved_path: Optional[str] = None

    @property
    def is_partial_path(self) -> bool:
        """Template forms only carry the file name, not the full path."""
        return self.pattern_kind in (PatternKind.TEMPLATE, PatternKind.TAGGED)

    @property
    def is_canonical(self) -> bool:
        return self.pattern_kind is PatternKind.CANONICAL


@dataclass
class StylesheetModule:
    path: str
    name: str
    module_name: str
    content: str


@dataclass
class StylesheetScan:
    """Outcome of stylesheet detection and resolution over a module list."""
    stylesheets: List[StylesheetModule] = field(default_factory=list)
    references: Dict[str, List[StylesheetReference]] = field(default_factory=dict)
    # Bundled paths and bare file names
    resolved: Set[str] = field(default_factory=set)

    def is_resolved(self, ref: StylesheetReference) -> bool:
        return bool(ref.file_path) and ref.file_path in self.resolved

    def path_for_file_name(self, file_name: str) -> Optional[str]:
        for sheet in self.stylesheets:
            if sheet.name == file_name:
                return sheet.path
        return None


@dataclass
class WriteResult:
    success: bool
    path: Optional[str] = None
    error: Optional[str] = None


@dataclass
class CompileResult:
    success: bool
    output_path: Optional[str] = None
    modules_processed: int = 0
    stylesheets_processed: int = 0
    version_path: Optional[str] = None
    changelog_path: Optional[str] = None
    copied_files: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.output_path is not None:
            data["outputPath"] = self.output_path
        data["modulesProcessed"] = self.modules_processed
        data["stylesheetsProcessed"] = self.stylesheets_processed
        if self.version_path:
            data["versionPath"] = self.version_path
        if self.changelog_path:
            data["changelogPath"] = self.changelog_path
        if self.copied_files:
            data["copiedFiles"] = list(self.copied_files)
        if self.error is not None:
            data["error"] = self.error
        return data


class BundleOptions(BaseModel):
    """
    Per-run options supplied by the front end.

    Accepts snake_case or the front end's camelCase keys (``outputDir``,
    ``includeUsageNotes``, ``additionalFiles``).
    """
    model_config = ConfigDict(strict=True, frozen=True, alias_generator=to_camel, populate_by_name=True)

    minify: bool = False
    obfuscate: bool = False
    version: Optional[str] = None
    changelog: Optional[str] = None
    output_dir: str = settings.DEFAULT_OUTPUT_DIR
    include_usage_notes: bool = True
    additional_files: List[str] = []

    @field_validator("version", "changelog")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("output_dir")
    @classmethod
    def _default_output_dir(cls, value: str) -> str:
        return value.strip().strip("/") or settings.DEFAULT_OUTPUT_DIR
