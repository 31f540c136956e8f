"""
Recurrence engine errors

Every error carries a machine-readable code, a human message and details,
so the HTTP layer can render an actionable message without guessing.
"""

from typing import Any, Dict, List, Optional


class RecurrenceError(Exception):
    """Base exception for recurrence engine errors"""
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidRule(RecurrenceError):
    """A rule violates its type-specific field invariant or its date range."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(
            code="INVALID_RULE",
            message="; ".join(self.errors) or "Invalid recurrence rule",
            details={"errors": self.errors}
        )


class RuleNotFound(RecurrenceError):
    """The requested rule does not exist (or was already deleted)."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(
            code="NOT_FOUND",
            message=f"Recurrence rule {rule_id} not found",
            details={"rule_id": rule_id}
        )


class StoreFailure(RecurrenceError):
    """
    A rule or event store call failed.

    `step` names the lifecycle step that failed; steps after it were not
    attempted. The original exception is chained as ``__cause__``.
    """

    def __init__(self, step: str, rule_id: Optional[str] = None, reason: str = ""):
        self.step = step
        self.rule_id = rule_id
        super().__init__(
            code="STORE_FAILURE",
            message=f"Storage step '{step}' failed" + (f": {reason}" if reason else ""),
            details={"step": step, "rule_id": rule_id}
        )


def create_error_response(error: RecurrenceError) -> Dict[str, Any]:
    """
    Create a standardized error response

    Args:
        error: The RecurrenceError to convert

    Returns:
        Standardized error response dictionary
    """
    return {
        "success": False,
        "error": {
            "code": error.code,
            "message": error.message,
            "details": error.details
        }
    }

