"""Guard and action registries.

Schemas refer to guards and actions by name. The names are resolved to
callables once, when a Machine is built, so a typo in a schema fails early
instead of on the first event.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar


@dataclass(frozen=True)
class TransitionContext:
    """Everything a guard or action learns about the transition in flight.

    Attributes:
        event: Event being sent
        from_state: State the object is leaving
        to_state: State the object is entering
        request: Caller-supplied event payload (may be None)
        params: Parameters configured for the hook in the schema
    """

    event: str
    from_state: str
    to_state: str
    request: Any = None
    params: dict[str, Any] = field(default_factory=dict)


Guard = Callable[[Any, TransitionContext], bool | Awaitable[bool]]
Action = Callable[[Any, TransitionContext], None | Awaitable[None]]


F = TypeVar("F", bound=Callable[..., Any])


class HookRegistry(Generic[F]):
    """Maps hook names to callables."""

    kind = "hook"

    def __init__(self, hooks: dict[str, F] | None = None) -> None:
        self._hooks: dict[str, F] = dict(hooks or {})

    def register(self, name: str, fn: F) -> None:
        """Register a named hook. Overwrites if already registered."""
        self._hooks[name] = fn

    def __call__(self, name: str) -> Callable[[F], F]:
        """Decorator form of `register`.

        Example:
            >>> guards = GuardRegistry()
            >>> @guards("hasApprover")
            ... def has_approver(obj, ctx):
            ...     return bool(obj.get("approver"))
        """

        def decorator(fn: F) -> F:
            self.register(name, fn)
            return fn

        return decorator

    def get(self, name: str) -> F:
        """Look up a hook. Raises KeyError if not registered."""
        try:
            return self._hooks[name]
        except KeyError:
            raise KeyError(f"Unknown {self.kind}: {name!r}") from None

    def has(self, name: str) -> bool:
        return name in self._hooks

    def names(self) -> list[str]:
        return list(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)


class GuardRegistry(HookRegistry[Guard]):
    """Named guard predicates: ``(obj, ctx) -> bool``, sync or async."""

    kind = "guard"


class ActionRegistry(HookRegistry[Action]):
    """Named transition actions: ``(obj, ctx) -> None``, sync or async."""

    kind = "action"
