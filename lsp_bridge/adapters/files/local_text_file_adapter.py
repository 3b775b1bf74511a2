"""
Local file system adapter implementation for source file operations.
"""

import logging
import os
import stat
import tempfile

from typing_extensions import override

from lsp_bridge.exceptions import FileIOError
from lsp_bridge.ports.files.text_file_port import TextFilePort


class LocalTextFileAdapter(TextFilePort):
    """Local file system implementation of the text file port."""

    def __init__(self, logger: logging.Logger | None = None):
        """
        Initialize the adapter with an optional logger.

        Args:
            logger: Logger instance to use for logging. If None, a default logger will be created.
        """
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    @override
    def read_text(self, path: str) -> str:
        """
        Read a UTF-8 text file, keeping its line terminators untouched.

        Args:
            path: Absolute path of the file

        Returns:
            The file content

        Raises:
            FileIOError: If the file is missing, unreadable or not UTF-8
        """
        try:
            # newline="" keeps \r\n as-is so edits never rewrite line endings
            with open(path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            raise FileIOError(f"File not found: {path}")
        except IsADirectoryError:
            raise FileIOError(f"Path is a directory, not a file: {path}")
        except PermissionError:
            raise FileIOError(f"Permission denied reading {path}")
        except UnicodeDecodeError:
            raise FileIOError(f"File is not valid UTF-8 text: {path}")
        except OSError as e:
            raise FileIOError(f"Failed to read {path}: {str(e)}")

    @override
    def write_text_atomic(self, path: str, content: str) -> None:
        """
        Replace the content of a file through a temporary sibling and os.replace.

        Args:
            path: Absolute path of the file
            content: New UTF-8 content

        Raises:
            FileIOError: If the file cannot be written; the original is left untouched
        """
        directory = os.path.dirname(os.path.abspath(path))
        tmp_path = None
        try:
            mode = stat.S_IMODE(os.stat(path).st_mode) if os.path.exists(path) else None
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            if mode is not None:
                os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
            tmp_path = None
            self._logger.debug(f"Wrote {len(content)} characters to {path}")
        except OSError as e:
            raise FileIOError(f"Failed to write {path}: {str(e)}")
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                except OSError as e:
                    self._logger.warning(f"Could not remove temporary file {tmp_path}: {e}")
