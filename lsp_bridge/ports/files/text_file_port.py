"""
Text file port interface defining the contract for reading and writing source files.
"""

from abc import ABC, abstractmethod


class TextFilePort(ABC):
    """Port interface for source file operations."""

    @abstractmethod
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
        pass

    @abstractmethod
    def write_text_atomic(self, path: str, content: str) -> None:
        """
        Replace the content of a file in a single step.

        Either the new content is fully in place when this returns, or the file
        is left exactly as it was.

        Args:
            path: Absolute path of the file
            content: New UTF-8 content

        Raises:
            FileIOError: If the file cannot be written
        """
        pass
