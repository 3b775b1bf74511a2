"""
Configuration settings for the application.
"""

import os
import shlex

from dotenv import load_dotenv

from lsp_bridge.exceptions import ConfigurationError

# Load environment variables from .env file
_ = load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.server_command_line: str = self._get_env("LSP_BRIDGE_SERVER_COMMAND", "")
        self.workspace_root: str = os.path.abspath(
            os.path.expanduser(self._get_env("LSP_BRIDGE_WORKSPACE_ROOT", os.getcwd()))
        )
        self.workspace_enforce: bool = self._get_bool_env(
            "LSP_BRIDGE_WORKSPACE_ENFORCE", True
        )
        self.request_timeout: float = self._get_float_env(
            "LSP_BRIDGE_REQUEST_TIMEOUT", 30.0
        )
        self.diagnostics_timeout: float = self._get_float_env(
            "LSP_BRIDGE_DIAGNOSTICS_TIMEOUT", 5.0
        )
        self.context_lines: int = self._get_int_env("LSP_BRIDGE_CONTEXT_LINES", 2)
        self.log_level: str = self._get_env("LOG_LEVEL", "INFO").upper()

    def server_command(self) -> list[str]:
        """Language server command line, split like a shell would. Empty when unset."""
        return shlex.split(self.server_command_line)

    def _get_env(self, key: str, default: str) -> str:
        """Get an environment variable with a default value."""
        return os.getenv(key, default)

    def _get_bool_env(self, key: str, default: bool) -> bool:
        val = os.getenv(key)
        if val is None:
            return default
        return val.strip().lower() not in ("0", "false", "no")

    def _get_float_env(self, key: str, default: float) -> float:
        val = os.getenv(key)
        if val is None or not val.strip():
            return default
        try:
            parsed = float(val)
        except ValueError:
            raise ConfigurationError(f"Environment variable {key} must be a number")
        if parsed <= 0:
            raise ConfigurationError(f"Environment variable {key} must be positive")
        return parsed

    def _get_int_env(self, key: str, default: int) -> int:
        val = os.getenv(key)
        if val is None or not val.strip():
            return default
        try:
            parsed = int(val)
        except ValueError:
            raise ConfigurationError(f"Environment variable {key} must be an integer")
        if parsed < 0:
            raise ConfigurationError(f"Environment variable {key} must be >= 0")
        return parsed


# Global settings instance
settings = Settings()
