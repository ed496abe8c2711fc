"""
Custom exceptions for the governance relay.

Provides a hierarchy of exceptions with HTTP-like error codes so the chat
handler, the API layer and the orchestrator share one vocabulary for
validation failures and upstream (oracle, chain, subgraph) failures.
"""
from typing import Optional


class GovRelayError(Exception):
    """Base exception for all relay errors."""

    def __init__(
        self,
        message: str,
        code: int = 500,
        retryable: bool = False,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        result = {
            "error_code": self.code,
            "error_message": self.message,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        return result


# ============================================
# 4xx Validation Errors
# ============================================

class ValidationError(GovRelayError):
    """400 Bad Request - The command cannot be turned into a proposal."""

    def __init__(self, message: str = "Invalid request data"):
        super().__init__(message, code=400, retryable=False)


class DirectMessageError(ValidationError):
    """Command issued outside of a guild channel."""

    def __init__(self):
        super().__init__(
            "Sorry, this method can't be used in direct messaging. Please use it in a channel."
        )


class DaoNotBoundError(ValidationError):
    """The guild has not been connected to a DAO yet."""

    def __init__(self):
        super().__init__(
            "Sorry, this DAO isn't connected yet to any DAO. Please connect it to a DAO "
            "using the `!setup` command like this:\n`!setup theNameOfYourDao`"
        )


class MalformedProposalError(ValidationError):
    """The proposal command is missing its deadline or its text."""

    def __init__(self):
        super().__init__(
            "The proposal should follow this format:\n'`!proposal [MM dd yyyy HH:mm:ss] [message]'`"
        )


class PastDeadlineError(ValidationError):
    """The proposal deadline is not in the future."""

    def __init__(self):
        super().__init__(
            "The entered deadline for the voting period is already past. "
            "Please try again with a future date and time."
        )


class MalformedSetupError(ValidationError):
    """The setup command is missing the DAO name."""

    def __init__(self):
        super().__init__(
            "The setup command should follow this format:\n`!setup theNameOfYourDao`"
        )


class PermissionDeniedError(GovRelayError):
    """403 Forbidden - Requester lacks the administrator role."""

    def __init__(
        self,
        message: str = "Sorry, only users with Admin permission are allowed to setup this integration.",
    ):
        super().__init__(message, code=403, retryable=False)


class DaoNotFoundError(GovRelayError):
    """404 Not Found - No registry entry with that name."""

    def __init__(self, dao_name: str = ""):
        self.dao_name = dao_name
        super().__init__(
            f'Sorry, couldn\'t find a registered DAO named "{dao_name}"', code=404, retryable=False
        )


class ConflictError(GovRelayError):
    """409 Conflict - A proposal for this message is already being tracked."""

    def __init__(self, message_id: str = ""):
        message = (
            f"A proposal for message '{message_id}' is already scheduled"
            if message_id else "Proposal already scheduled"
        )
        super().__init__(message, code=409, retryable=False)


# ============================================
# 5xx Upstream Errors
# ============================================

class OracleError(GovRelayError):
    """The oracle network failed to resolve a data request."""

    def __init__(self, message: str = "Oracle request failed.", request_id: Optional[str] = None):
        self.request_id = request_id
        super().__init__(message, code=502, retryable=False)


class OracleSubmissionError(OracleError):
    """The node refused or failed to accept a data request."""

    def __init__(self, message: str = "Oracle node rejected the data request."):
        super().__init__(message)


class OracleTimeoutError(OracleError):
    """504 - The data request was not tallied in time."""

    def __init__(self, request_id: str = "", timeout: float = 0):
        super().__init__(
            f"Data request {request_id} was not tallied within {timeout:.0f}s", request_id=request_id
        )
        self.code = 504


class SubgraphError(GovRelayError):
    """The Govern subgraph returned an error."""

    def __init__(self, message: str, status_code: int = 502):
        self.status_code = status_code
        super().__init__(f"Subgraph Error {status_code}: {message}", code=502, retryable=True)


class NotifierError(GovRelayError):
    """A reply could not be delivered to the chat platform."""

    def __init__(self, message: str, status_code: int = 502):
        self.status_code = status_code
        super().__init__(f"Notifier Error {status_code}: {message}", code=502, retryable=True)


class InvalidTransitionError(GovRelayError):
    """A proposal run was asked to move to a stage its current stage cannot reach."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move proposal from '{current}' to '{requested}'", code=500)
