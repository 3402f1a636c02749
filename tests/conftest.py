"""
conftest.py: test isolation for the Datacore Script Compiler suite.

Strategy:
1. STORE CACHE: Local vault stores are cached per root by the factory; clear
   the cache after each test so temp directories never leak between tests.
2. ENV CLEANUP: Snapshot and restore DC_COMPILER_* environment variables.
3. LOGGING: The CLI calls logging.basicConfig(); drop any root handlers it
   installs so later tests see a clean root logger.
"""
import logging
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dc_compiler.store import factory  # noqa: E402


# ─── Store Cache ─────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _reset_store_cache():
    """Clear the local store cache after each test."""
    yield
    factory._STORE_CACHE.clear()


# ─── Environment Variable Safety ────────────────────────────────────────────

_ENV_PREFIX = "DC_COMPILER_"


@pytest.fixture(autouse=True)
def _clean_env_vars():
    """Snapshot and restore compiler environment variables after each test."""
    saved = {k: v for k, v in os.environ.items() if k.startswith(_ENV_PREFIX)}

    yield

    for key in [k for k in os.environ if k.startswith(_ENV_PREFIX)]:
        if key not in saved:
            os.environ.pop(key, None)
    os.environ.update(saved)


# ─── Root Logger ────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level

    yield

    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
