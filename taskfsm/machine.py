"""Transition engine.

A Machine applies a MachineDefinition to caller-owned objects. It keeps no
per-object state: every call takes an object and returns a new one, so a
single Machine can serve any number of objects concurrently.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from taskfsm.core.errors import (
    AlreadyStartedError,
    DefinitionError,
    GuardRejectedError,
    IllegalTransitionError,
)
from taskfsm.definition import HookSpec, MachineDefinition, Transition
from taskfsm.registry import (
    Action,
    ActionRegistry,
    Guard,
    GuardRegistry,
    HookRegistry,
    TransitionContext,
)

logger = logging.getLogger(__name__)


async def _resolve(value: Any) -> Any:
    """Await hook results that are awaitable; pass others through."""
    if inspect.isawaitable(value):
        return await value
    return value


def _is_empty(state: Any) -> bool:
    """A missing field, None and "" all mean the object has not started."""
    return state is None or state == ""


F = TypeVar("F")
_HookF = TypeVar("_HookF", bound=Callable[..., Any])


@dataclass(frozen=True)
class _BoundHook(Generic[F]):
    """A schema hook reference resolved against a registry."""

    name: str
    fn: F
    params: dict[str, Any]


class Machine:
    """Applies transitions declared in a MachineDefinition.

    Args:
        definition: Validated machine definition
        guards: Registry providing every guard named in the definition
        actions: Registry providing every action named in the definition

    Raises:
        DefinitionError: If the definition names a guard or action that the
            registries do not provide.
    """

    def __init__(
        self,
        definition: MachineDefinition,
        *,
        guards: GuardRegistry | None = None,
        actions: ActionRegistry | None = None,
    ) -> None:
        self._definition = definition
        guards = guards if guards is not None else GuardRegistry()
        actions = actions if actions is not None else ActionRegistry()

        self._guards: dict[tuple[str, str], list[_BoundHook[Guard]]] = {}
        self._actions: dict[tuple[str, str], list[_BoundHook[Action]]] = {}
        missing: list[str] = []
        for t in definition.transitions:
            key = (t.from_state, t.event)
            bound_guards = [self._bind(g, guards, missing) for g in t.guard_specs]
            bound_actions = [self._bind(a, actions, missing) for a in t.action_specs]
            self._guards[key] = [g for g in bound_guards if g is not None]
            self._actions[key] = [a for a in bound_actions if a is not None]

        if missing:
            raise DefinitionError(
                f"Machine {definition.name!r} references unregistered hooks",
                sorted(set(missing)),
            )

    @staticmethod
    def _bind(
        spec: HookSpec, registry: HookRegistry[_HookF], missing: list[str]
    ) -> _BoundHook[_HookF] | None:
        if not registry.has(spec.name):
            missing.append(f"{registry.kind} {spec.name!r}")
            return None
        return _BoundHook(
            name=spec.name, fn=registry.get(spec.name), params=spec.arguments
        )

    def __repr__(self) -> str:
        return f"Machine(definition={self._definition.name!r})"

    @property
    def definition(self) -> MachineDefinition:
        return self._definition

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def current_state(self, obj: Any) -> str | None:
        return self._definition.get_object_state(obj)

    def is_in_state(self, obj: Any, state: str) -> bool:
        return self.current_state(obj) == state

    def is_in_final_state(self, obj: Any) -> bool:
        return self._definition.is_final_state(self.current_state(obj))

    def is_running(self, obj: Any) -> bool:
        """Check if the object has been started and has not finished."""
        state = self.current_state(obj)
        return not _is_empty(state) and not self._definition.is_final_state(state)

    def available_events(self, obj: Any) -> list[str]:
        """Events declared from the object's current state (guards not run)."""
        state = self.current_state(obj)
        return [t.event for t in self._definition.transitions_from(state)]

    def next_states(self, obj: Any) -> list[str]:
        """Distinct target states reachable in one step, in declaration order."""
        targets: list[str] = []
        for t in self._definition.transitions_from(self.current_state(obj)):
            if t.to not in targets:
                targets.append(t.to)
        return targets

    async def can(self, obj: Any, event: str, request: Any = None) -> bool:
        """Check if `send_event` would succeed, evaluating the guards."""
        state = self.current_state(obj)
        transition = self._definition.find_transition(state, event)
        if transition is None:
            return False
        return await self._rejecting_guard(obj, transition, request) is None

    async def cannot(self, obj: Any, event: str, request: Any = None) -> bool:
        return not await self.can(obj, event, request)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def start(self, obj: Any) -> Any:
        """Enter the initial state.

        Returns:
            A copy of ``obj`` with its state field set to the initial state.

        Raises:
            AlreadyStartedError: If the object's state field holds a value
                other than None or "".
        """
        state = self.current_state(obj)
        if not _is_empty(state):
            raise AlreadyStartedError(state)

        initial = self._definition.get_initial_state()
        started = self._definition.set_object_state(obj, initial)
        logger.debug("[%s] started in state %r", self._definition.name, initial)
        return started

    async def send_event(self, obj: Any, event: str, request: Any = None) -> Any:
        """Apply ``event`` to ``obj``.

        Args:
            obj: Managed object in its current state
            event: Event name
            request: Optional payload handed to the guard and action

        Returns:
            A copy of ``obj`` in the transition's target state.

        Raises:
            IllegalTransitionError: If no transition matches the current
                state and event (always the case for final states).
            GuardRejectedError: If one of the transition's guards declines.
        """
        state = self.current_state(obj)
        transition = self._definition.find_transition(state, event)
        if transition is None:
            logger.debug(
                "[%s] rejected event %r in state %r: no transition",
                self._definition.name,
                event,
                state,
            )
            raise IllegalTransitionError(state, event)

        rejected_by = await self._rejecting_guard(obj, transition, request)
        if rejected_by is not None:
            logger.debug(
                "[%s] guard %r rejected event %r in state %r",
                self._definition.name,
                rejected_by,
                event,
                state,
            )
            raise GuardRejectedError(state, event, rejected_by)

        transitioned = self._definition.set_object_state(obj, transition.to)

        for action in self._actions[(transition.from_state, transition.event)]:
            logger.debug("[%s] running action %r", self._definition.name, action.name)
            await _resolve(
                action.fn(transitioned, self._context(transition, request, action.params))
            )

        logger.info(
            "[%s] %s --%s--> %s",
            self._definition.name,
            transition.from_state,
            event,
            transition.to,
        )
        return transitioned

    async def _rejecting_guard(
        self, obj: Any, transition: Transition, request: Any
    ) -> str | None:
        """Run the transition's guards in order; name the first that declines."""
        for guard in self._guards[(transition.from_state, transition.event)]:
            ctx = self._context(transition, request, guard.params)
            if not await _resolve(guard.fn(obj, ctx)):
                return guard.name
        return None

    @staticmethod
    def _context(
        transition: Transition, request: Any, params: dict[str, Any]
    ) -> TransitionContext:
        return TransitionContext(
            event=transition.event,
            from_state=transition.from_state,
            to_state=transition.to,
            request=request,
            params=dict(params),
        )
