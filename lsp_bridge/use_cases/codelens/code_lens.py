"""
Use cases for listing the code lenses of a file and executing one of them.

Indices are 1-based and only meaningful for the list most recently returned
for the file. Execution never trusts a caller-held list: it fetches the
current lenses again and validates the index against them.
"""

import json
import logging
import threading
from typing import Optional

from lsp_bridge.adapters.lsp.lsp_session import LspSession
from lsp_bridge.entities.CodeLens import CodeLens
from lsp_bridge.exceptions import (
    BackendRequestError,
    BaseAppError,
    IndexOutOfRangeError,
    SchemaValidationError,
)
from lsp_bridge.utils.cancellation import raise_if_cancelled
from lsp_bridge.utils.rendering import format_range


class GetCodeLensUseCase:
    """Use case for listing code lenses with their 1-based indices."""

    def __init__(self, session: LspSession, logger: Optional[logging.Logger] = None):
        self._session = session
        self._logger = logger or logging.getLogger(__name__)

    def fetch(self, path: str) -> list[CodeLens]:
        """Synchronize the document, then return its lenses in server order."""
        self._session.synchronize(path)
        return self._session.code_lenses(path)

    def execute(self, path: str, cancel_event: Optional[threading.Event] = None) -> str:
        """
        Render the current code lenses of a file.

        Args:
            path: Absolute path of the file
            cancel_event: Set by the caller to abandon the call

        Returns:
            One entry per lens: index, title, range and command

        Raises:
            FileIOError, BackendRequestError
        """
        try:
            self._logger.info(f"Getting code lenses for {path}")
            lenses = self.fetch(path)
            raise_if_cancelled(cancel_event, "get_codelens")
            self._logger.info(f"Found {len(lenses)} code lens(es) for {path}")
            if not lenses:
                return f"No code lenses found for {path}"
            out = [f"Found {len(lenses)} code lens(es) for {path}:"]
            for index, lens in enumerate(lenses, start=1):
                out.append("")
                out.append(f"[{index}] {lens.title} ({format_range(lens.range)})")
                if lens.command is not None:
                    out.append(f"    Command: {lens.command.command}")
            return "\n".join(out)
        except BaseAppError:
            raise
        except Exception as e:
            self._logger.error(f"Error getting code lenses: {e}")
            raise BackendRequestError(f"Failed to get code lenses for {path}: {str(e)}")


class ExecuteCodeLensUseCase:
    """Use case for executing the command of one code lens."""

    def __init__(
        self,
        session: LspSession,
        get_code_lens: GetCodeLensUseCase,
        logger: Optional[logging.Logger] = None,
    ):
        self._session = session
        self._get_code_lens = get_code_lens
        self._logger = logger or logging.getLogger(__name__)

    def execute(
        self, path: str, index: int, cancel_event: Optional[threading.Event] = None
    ) -> str:
        """
        Re-fetch the lenses of a file and run the command of lens ``index``.

        Args:
            path: Absolute path of the file
            index: 1-based index from the latest get_codelens output
            cancel_event: Set by the caller to abandon the call before execution

        Returns:
            Confirmation naming the executed lens, with the command result if any

        Raises:
            IndexOutOfRangeError: If index is not valid for the current list
            BackendRequestError: If the lens has no command or execution fails
        """
        try:
            if index < 1:
                raise SchemaValidationError("'index' must be >= 1", field="index")
            self._logger.info(f"Executing code lens {index} of {path}")
            lenses = self._get_code_lens.fetch(path)
            if index > len(lenses):
                raise IndexOutOfRangeError(index, len(lenses))

            lens = lenses[index - 1]
            if not lens.is_resolved:
                lens = self._session.resolve_code_lens(lens)
            if lens.command is None:
                raise BackendRequestError(
                    f"Code lens {index} of {path} has no command to execute",
                    method="codeLens/resolve",
                )
            raise_if_cancelled(cancel_event, "execute_codelens")

            result = self._session.execute_command(lens.command.command, lens.command.arguments)
            self._logger.info(f"Executed code lens command {lens.command.command}")
            message = (
                f"Executed code lens [{index}] '{lens.title}' "
                f"(command: {lens.command.command})"
            )
            if result is not None:
                message += "\nResult: " + json.dumps(result, ensure_ascii=False, default=str)
            return message
        except BaseAppError:
            raise
        except Exception as e:
            self._logger.error(f"Error executing code lens: {e}")
            raise BackendRequestError(f"Failed to execute code lens {index} of {path}: {str(e)}")
