"""Error taxonomy shared by the core and the request orchestrators.

Services raise these exceptions; the API layer translates them into HTTP
responses in a single exception handler (see ``threadline.main``). None of
them is fatal to the process: every error is scoped to one request.
"""

from __future__ import annotations


class ThreadlineError(Exception):
    """Base class for structured, per-request failures."""

    code: str = "error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail()
        super().__init__(self.detail)

    def default_detail(self) -> str:
        return self.code.replace("_", " ").capitalize()


class Unauthenticated(ThreadlineError):
    """No credential, or the credential failed verification."""

    code = "unauthenticated"

    def default_detail(self) -> str:
        return "Could not validate credentials"


class Forbidden(ThreadlineError):
    """The actor is authenticated but not permitted to perform the action.

    ``reason`` is a stable code (``role``, ``not-owner``, ``inactive-account``) for logs
    and metrics; ``detail`` is the human readable message.
    """

    code = "forbidden"

    def __init__(self, reason: str, detail: str | None = None) -> None:
        self.reason = reason
        super().__init__(detail or f"Forbidden: {reason}")


class NotFound(ThreadlineError):
    """A resource required by the operation does not exist (or is hidden)."""

    code = "not_found"


class ParentNotFound(NotFound):
    """The parent comment of a reply could not be resolved on the post."""

    code = "parent_not_found"

    def default_detail(self) -> str:
        return "Parent comment not found"


class TargetUnavailable(ThreadlineError):
    """A reaction or reply target is missing, or exists but is not ACTIVE."""

    code = "target_unavailable"

    MISSING = "missing"
    INACTIVE = "inactive"

    def __init__(self, reason: str, detail: str | None = None) -> None:
        self.reason = reason
        super().__init__(detail or f"Target unavailable: {reason}")

    @property
    def missing(self) -> bool:
        return self.reason == self.MISSING


class InvalidInput(ThreadlineError):
    """Malformed kind, empty content, or another rejected value."""

    code = "invalid_input"


class InvalidKind(InvalidInput):
    """Reaction kind outside {LIKE, DISLIKE}."""

    code = "invalid_kind"

    def default_detail(self) -> str:
        return 'Type must be either "LIKE" or "DISLIKE"'


class Conflict(ThreadlineError):
    """A concurrent write won the race and the store could not reconcile it."""

    code = "conflict"
