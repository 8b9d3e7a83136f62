"""Exceptions raised by rolegate."""

from __future__ import annotations

from typing import Literal

RequestErrorReason = Literal["missing", "ambiguous", "invalid"]


class RolegateError(Exception):
    """Base class for rolegate errors."""


class PermissionRequestError(RolegateError, ValueError):
    """Raised when a permission request does not carry exactly one shape.

    ``reason`` is ``"missing"`` when neither ``permission`` nor ``permissions``
    was supplied, ``"ambiguous"`` when both were, and ``"invalid"`` when the
    payload could not be parsed at all.
    """

    def __init__(self, reason: RequestErrorReason, detail: str | None = None) -> None:
        self.reason = reason
        msg = {
            "missing": "permission request supplies neither 'permissions' nor 'permission'",
            "ambiguous": "permission request supplies both 'permissions' and 'permission'",
            "invalid": "permission request is malformed",
        }[reason]
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class RoleConfigError(RolegateError, ValueError):
    """Raised when a roles file cannot be parsed or validated."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Invalid roles in {path}: {detail}")
