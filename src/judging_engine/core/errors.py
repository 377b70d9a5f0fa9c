"""Exception taxonomy for the judging engine."""

from __future__ import annotations


class JudgingError(Exception):
    """Base exception for judging failures with optional suggestions."""

    kind = "error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.kind}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class NotFoundError(JudgingError):
    """Error when an event, team, judge, assignment or criterion does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str | None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} '{entity_id}' not found")


class InvalidStateError(JudgingError):
    """Error when an operation is not allowed in the current lifecycle state."""

    kind = "invalid_state"


class ForbiddenError(JudgingError):
    """Error when a judge acts on something that is not theirs."""

    kind = "forbidden"


class ValidationError(JudgingError):
    """Error when submitted judging input is malformed or out of bounds."""

    kind = "validation"


class NoCriteriaDefinedError(ValidationError):
    """Error when criteria scoring is requested for an event without criteria."""

    def __init__(self, event_id: str | None = None) -> None:
        target = f"event '{event_id}'" if event_id else "this event"
        super().__init__(
            f"No judging criteria defined for {target}",
            "Add at least one criterion before collecting scores.",
        )


class NoEligibleTeamsError(JudgingError):
    """Raised when a judge has no team left to evaluate.

    This is an expected, terminal outcome for that judge at that moment rather
    than a defect. It recurs until the event state changes.
    """

    kind = "exhausted"

    def __init__(self, event_id: str, judge_id: str) -> None:
        self.event_id = event_id
        self.judge_id = judge_id
        super().__init__(f"No eligible teams left for judge '{judge_id}' in event '{event_id}'")


class ConfigurationError(Exception):
    """Base exception for configuration errors with optional suggestions."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Configuration Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg
