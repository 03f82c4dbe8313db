"""Exception hierarchy for the FSM core."""

from __future__ import annotations


class FSMError(Exception):
    """Base class for every error raised by taskfsm."""


class DefinitionError(FSMError, ValueError):
    """Machine definition schema is malformed or inconsistent.

    Attributes:
        errors: Individual problems found while validating the schema.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        if self.errors:
            message = f"{message}: " + "; ".join(self.errors)
        super().__init__(message)


class AlreadyStartedError(FSMError):
    """`start` was called on an object whose state field is already set."""

    def __init__(self, state: object) -> None:
        self.state = state
        super().__init__(f"Object already started (current state: {state!r})")


class IllegalTransitionError(FSMError):
    """No transition is declared for the object's state and the event."""

    def __init__(self, state: str | None, event: str) -> None:
        self.state = state
        self.event = event
        super().__init__(f"No transition for event {event!r} from state {state!r}")


class GuardRejectedError(FSMError):
    """A matching transition exists but its guard declined it."""

    def __init__(self, state: str | None, event: str, guard: str) -> None:
        self.state = state
        self.event = event
        self.guard = guard
        super().__init__(
            f"Guard {guard!r} rejected event {event!r} from state {state!r}"
        )
