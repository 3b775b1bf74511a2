import threading
from typing import Optional

from lsp_bridge.exceptions import OperationCancelledError


def raise_if_cancelled(cancel_event: Optional[threading.Event], operation: str) -> None:
    """Abort between steps once the caller has set ``cancel_event``."""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(f"{operation} was cancelled by the caller")
