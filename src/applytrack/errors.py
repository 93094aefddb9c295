"""Exception hierarchy for applytrack.

Remote failures are translated into RemoteStoreError subclasses at the HTTP
boundary (see applytrack.clients.utils). Client-side policy checks raise
PolicyViolationError before anything is sent.
"""

from typing import Optional


class ApplytrackError(Exception):
    """Base class for all applytrack errors."""


class RemoteStoreError(ApplytrackError):
    """A request to the backend failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.method = method
        self.url = url


class TransportError(RemoteStoreError):
    """Network failure or timeout, no response was received."""


class BackendValidationError(RemoteStoreError):
    """Backend rejected the request (4xx)."""


class BackendServerError(RemoteStoreError):
    """Backend failed while handling the request (5xx)."""


class InvalidResponseError(RemoteStoreError):
    """Backend answered 2xx with a body that is not the expected JSON shape."""



class PolicyViolationError(ApplytrackError):
    """Operation rejected on the client before any request was issued."""


class CrossApplicationMoveError(PolicyViolationError):
    """An item may only move within the application that owns it."""

    def __init__(self, item: str, source_application_id: int, target_application_id: int):
        super().__init__(
            f"Cannot move {item} from application {source_application_id} "
            f"to application {target_application_id}"
        )
        self.source_application_id = source_application_id
        self.target_application_id = target_application_id


class InvalidDropTargetError(PolicyViolationError):
    """The drop target cannot receive the dragged item."""


class InvalidReportError(ApplytrackError):
    """Report definition cannot be sent (unknown or duplicate columns)."""
