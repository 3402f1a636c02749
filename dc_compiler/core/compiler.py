"""
Compiler orchestration.

compile_project() runs the whole pipeline against a vault store:

    discovery -> dependency extraction -> load order -> stylesheet resolution
    -> reference rewriting -> (minify / obfuscate) -> bundle -> write

Any fatal error aborts before the artifact is written and comes back as a
failed CompileResult. Auxiliary outputs (VERSION, CHANGELOG, copied files)
are best-effort.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from dc_compiler.config import settings
from dc_compiler.core.bundle import generate_bundle
from dc_compiler.core.dependencies import extract_dependencies
from dc_compiler.core.discovery import scan_directory
from dc_compiler.core.graph import build_dependency_order
from dc_compiler.core.rewriter import rewrite_all
from dc_compiler.core.stylesheets import resolve_stylesheets
from dc_compiler.core.writer import write_to_vault
from dc_compiler.errors import CompilerError, DirectoryNotFound, InvalidInputError, StoreError
from dc_compiler.models import BundleOptions, CompileResult, ScriptModule
from dc_compiler.optimization.minifier import minify, minify_with_obfuscation
from dc_compiler.optimization.preserve import build_preserve_set
from dc_compiler.store.base import VaultStore
from dc_compiler.utils import extract_note_name, get_file_name, join_path, normalize_path

logger = logging.getLogger("dc_compiler.compiler")


def validate_inputs(project_dir: Any, entry_name: Any, output_name: Any) -> None:
    if not project_dir or not isinstance(project_dir, str):
        raise InvalidInputError("Project directory")
    if not entry_name or not isinstance(entry_name, str):
        raise InvalidInputError("Main component name")
    if not output_name or not isinstance(output_name, str):
        raise InvalidInputError("Output filename")


def analyze_modules(store: VaultStore, project_dir: str) -> List[ScriptModule]:
    modules = scan_directory(store, project_dir)
    for module in modules:
        module.dependencies = tuple(extract_dependencies(module.content))
    return modules


def apply_minification(ordered: List[ScriptModule], obfuscate: bool) -> int:
    """
    Minify every module in load order.

    With obfuscation the rename counter is folded through the modules one by
    one. Returns the final counter value.
    """
    if not obfuscate:
        for module in ordered:
            module.content = minify(module.content)
        return 0

    preserve_names, used_short_names = build_preserve_set(ordered)
    logger.debug(f"Preserved names: {sorted(preserve_names)}")
    logger.debug(f"Pre-existing short names: {sorted(used_short_names)}")

    counter = 0
    for module in ordered:
        logger.debug(f"Obfuscating '{module.base_name}', counter start: {counter}")
        module.content, counter = minify_with_obfuscation(
            module.content, counter, preserve_names, used_short_names
        )
    logger.info(f"Obfuscation finished, final counter: {counter}")
    return counter


def ensure_output_directory(store: VaultStore, output_dir: str) -> None:
    try:
        if not store.exists(output_dir):
            store.mkdir(output_dir)
    except StoreError as e:
        raise StoreError(f"Failed to create output directory: {output_dir}. {e.message}", output_dir)


def copy_additional_files(store: VaultStore, paths: List[str], output_dir: str) -> List[str]:
    """Copy each file into ``output_dir``; missing or unreadable files are skipped."""
    copied = []
    for path in paths:
        try:
            if not store.exists(path):
                logger.warning(f"Additional file not found: {path} - skipping")
                continue
            content = store.read(path)
        except StoreError as e:
            logger.warning(f"Failed to copy additional file {path}: {e.message} - skipping")
            continue

        result = write_to_vault(store, content, join_path(output_dir, get_file_name(path)), ensure_note_extension=False)
        if result.success:
            copied.append(result.path)
        else:
            logger.warning(f"Failed to copy additional file {path}: {result.error} - skipping")
    return copied


def _write_auxiliary(store: VaultStore, options: BundleOptions, output_dir: str, result: CompileResult) -> None:
    if options.version:
        written = write_to_vault(
            store, options.version, join_path(output_dir, settings.VERSION_FILE_NAME), ensure_note_extension=False
        )
        if written.success:
            result.version_path = written.path

    if options.changelog:
        written = write_to_vault(store, options.changelog, join_path(output_dir, settings.CHANGELOG_FILE_NAME))
        if written.success:
            result.changelog_path = written.path

    if options.additional_files:
        result.copied_files = copy_additional_files(store, options.additional_files, output_dir)


def compile_project(store: VaultStore, project_dir: str, entry_name: str, output_name: str,
                    options: Optional[Union[BundleOptions, Dict[str, Any]]] = None) -> CompileResult:
    """
    Compile the modules under ``project_dir`` into one note.

    Args:
        store: Vault store to read from and write to.
        project_dir: Store path of the project directory.
        entry_name: Base name of the entry module.
        output_name: Output note name (``.md`` is appended when missing).
        options: BundleOptions or an equivalent mapping.

    Returns:
        CompileResult; ``success`` is False with ``error`` set on any fatal error.
    """
    try:
        validate_inputs(project_dir, entry_name, output_name)
        if not isinstance(options, BundleOptions):
            options = BundleOptions.model_validate(options or {})

        project_dir = normalize_path(project_dir)
        if not store.exists(project_dir):
            raise DirectoryNotFound(project_dir)

        note_name = extract_note_name(output_name)
        output_dir = normalize_path(options.output_dir)

        modules = analyze_modules(store, project_dir)
        ordered = build_dependency_order(modules, entry_name)
        scan = resolve_stylesheets(store, ordered, project_dir)

        rewrite_all(ordered, modules, note_name, scan)

        if options.minify:
            apply_minification(ordered, options.obfuscate)

        modules_processed = len(ordered)
        stylesheets_processed = len(scan.stylesheets)

        bundle = generate_bundle(
            ordered,
            project_dir,
            entry_name,
            note_name,
            scan.stylesheets,
            minify=options.minify,
            obfuscate=options.obfuscate,
            version=options.version,
            include_usage_notes=options.include_usage_notes,
        )

        ensure_output_directory(store, output_dir)
        written = write_to_vault(store, bundle, join_path(output_dir, output_name))
        if not written.success:
            return CompileResult(
                success=False,
                error=written.error,
                modules_processed=modules_processed,
                stylesheets_processed=stylesheets_processed,
            )

        result = CompileResult(
            success=True,
            output_path=written.path,
            modules_processed=modules_processed,
            stylesheets_processed=stylesheets_processed,
        )
        _write_auxiliary(store, options, output_dir, result)
        return result

    except CompilerError as e:
        logger.error(e.message)
        return CompileResult(success=False, error=e.message)
    except ValidationError as e:
        logger.error(f"Invalid options: {e}")
        return CompileResult(success=False, error=f"Invalid options: {e}")
    except Exception as e:
        logger.exception("Unexpected compilation failure")
        return CompileResult(success=False, error=str(e) or "An unknown error occurred during compilation")
