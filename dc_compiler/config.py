"""
Compiler settings.

Values are read from the environment (prefix ``DC_COMPILER_``) or a local
``.env`` file, e.g. ``DC_COMPILER_LOG_LEVEL=DEBUG``.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DC_COMPILER_",
        env_file=".env",
        extra="ignore",
    )

    # File types
    SCRIPT_EXTENSIONS: List[str] = [".js", ".jsx", ".ts", ".tsx"]
    STYLESHEET_EXTENSION: str = ".css"
    NOTE_EXTENSION: str = ".md"

    # Output
    DEFAULT_OUTPUT_DIR: str = "dist"
    VERSION_FILE_NAME: str = "VERSION"
    CHANGELOG_FILE_NAME: str = "CHANGELOG.md"

    # Helper module whose imports are dropped when merging
    PATH_RESOLVER_MODULE: str = "pathResolver"

    # Per-idiom match cap for stylesheet detection
    MAX_PATTERN_MATCHES: int = 100

    # Vault store backend for get_store(): "local" or "memory"
    STORE_TYPE: str = "local"

    # Concurrent reads during discovery
    DISCOVERY_MAX_WORKERS: int = 8

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


settings = Settings()
