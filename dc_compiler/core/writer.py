import logging

from dc_compiler.config import settings
from dc_compiler.errors import StoreError
from dc_compiler.models import WriteResult
from dc_compiler.store.base import VaultStore

logger = logging.getLogger("dc_compiler.writer")


def write_to_vault(store: VaultStore, content: str, output_path: str, ensure_note_extension: bool = True) -> WriteResult:
    """
    Write ``content`` to ``output_path``, appending the note extension unless told not to.

    Failures are reported in the result rather than raised.
    """
    if not isinstance(content, str):
        return WriteResult(success=False, error="Content must be a string")
    if not output_path or not isinstance(output_path, str):
        return WriteResult(success=False, error="Output filename must be a non-empty string")

    final_path = output_path.strip()
    if ensure_note_extension and not final_path.endswith(settings.NOTE_EXTENSION):
        final_path += settings.NOTE_EXTENSION

    try:
        store.write(final_path, content)
    except StoreError as e:
        logger.error(f"Failed to write {final_path}: {e.message}")
        return WriteResult(success=False, path=final_path, error=f"Failed to write file: {e.message}")

    logger.info(f"Wrote {final_path}")
    return WriteResult(success=True, path=final_path)
