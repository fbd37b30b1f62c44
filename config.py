"""
Configuration module for the contractor search MCP server.

Provides centralized configuration management with support for:
- Environment variables
- Default values
- Path resolution
- Logging configuration
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# config.py lives at the repository root, next to .env
_env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=_env_path)


def _parse_int(env_var: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back on blanks."""
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return int(value)


def _parse_float(env_var: str, default: float) -> float:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return float(value)


class Config:
    """
    Configuration class for MCP server settings.

    Supports configuration via environment variables (and .env file) with sensible defaults.
    All relative paths are resolved against the repository root.
    """

    def __init__(self):
        """Initialize configuration from environment variables and defaults."""
        self._repo_root = self._find_repo_root()

        # Database configuration
        self.db_path = self._resolve_db_path()
        self.busy_timeout = _parse_float("CONTRACTOR_SEARCH_BUSY_TIMEOUT", 5.0)

        # Logging configuration
        self.log_level = os.getenv("CONTRACTOR_SEARCH_LOG_LEVEL", "INFO").upper()
        self.log_file = self._resolve_log_path()

        # Server configuration
        self.server_name = os.getenv("CONTRACTOR_SEARCH_SERVER_NAME", "contractor-search")

        # Page size defaults
        self.search_limit = _parse_int("CONTRACTOR_SEARCH_SEARCH_LIMIT", 10)
        self.jobs_limit = _parse_int("CONTRACTOR_SEARCH_JOBS_LIMIT", 20)
        self.match_limit = _parse_int("CONTRACTOR_SEARCH_MATCH_LIMIT", 10)

    def _find_repo_root(self) -> Path:
        """Return the directory holding this file (the repository root)."""
        return Path(__file__).resolve().parent

    def _resolve_db_path(self) -> Path:
        """
        Resolve the database path from environment or default.

        Resolution order:
        1. CONTRACTOR_SEARCH_DB environment variable (absolute or relative)
        2. CONTRACTOR_SEARCH_ROOT/data/contractors.db
        3. Default: <repo_root>/data/contractors.db

        Returns:
            Resolved absolute Path to database
        """
        db_env = os.getenv("CONTRACTOR_SEARCH_DB")
        if db_env:
            db_path = Path(db_env)
            if db_path.is_absolute():
                return db_path
            return self._repo_root / db_path

        root_env = os.getenv("CONTRACTOR_SEARCH_ROOT")
        if root_env:
            return Path(root_env) / "data" / "contractors.db"

        return self._repo_root / "data" / "contractors.db"

    def _resolve_log_path(self) -> Optional[Path]:
        """
        Resolve the log file path from environment.

        If CONTRACTOR_SEARCH_LOG_FILE is set, logs are also written to that file.
        Otherwise, logs go to stderr only.
        """
        log_env = os.getenv("CONTRACTOR_SEARCH_LOG_FILE")
        if not log_env:
            return None

        log_path = Path(log_env)
        if log_path.is_absolute():
            return log_path
        return self._repo_root / log_path

    def setup_logging(self):
        """
        Configure logging based on configuration settings.

        Sets up logging to stderr and optionally to a file. stdout is left
        alone because the stdio transport owns it.
        """
        numeric_level = getattr(logging, self.log_level, logging.INFO)

        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)

        # Remove existing handlers to avoid duplicates
        root_logger.handlers.clear()

        stderr_handler = logging.StreamHandler()
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(formatter)
        root_logger.addHandler(stderr_handler)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            logging.info(f"Logging to file: {self.log_file}")

        logging.info(f"Log level set to: {self.log_level}")
        logging.info(f"Database path: {self.db_path}")

    def get_db_path_str(self) -> str:
        """Get database path as string for use in tool handlers."""
        return str(self.db_path)

    def validate(self) -> list[str]:
        """
        Validate configuration and return any warnings.

        Returns:
            List of warning messages (empty if all valid)
        """
        warnings = []

        if not self.db_path.exists():
            warnings.append(
                f"Database file not found: {self.db_path}. "
                "It will be created with an empty schema on startup."
            )

        for name in ("search_limit", "jobs_limit", "match_limit"):
            if getattr(self, name) < 1:
                warnings.append(f"{name} must be at least 1, got {getattr(self, name)}")

        if self.log_file:
            log_dir = self.log_file.parent
            if not log_dir.exists():
                try:
                    log_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    warnings.append(f"Cannot create log directory {log_dir}: {e}")
            elif not os.access(log_dir, os.W_OK):
                warnings.append(f"Log directory not writable: {log_dir}")

        return warnings


# Global configuration instance
config = Config()


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Global Config instance
    """
    return config
