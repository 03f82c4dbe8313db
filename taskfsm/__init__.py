"""Finite state machine core for task lifecycles.

Example:
    >>> from taskfsm import Machine, MachineDefinition, TaskManager
    >>> definition = MachineDefinition({
    ...     "name": "review",
    ...     "initialState": "open",
    ...     "finalStates": ["closed"],
    ...     "transitions": [{"from": "open", "event": "close", "to": "closed"}],
    ... })
    >>> machine = Machine(definition)
    >>> manager = TaskManager(machine, search=store.search, update=store.update)
    >>> task = await manager.start({"id": 1})
    >>> result = await manager.send_event(task, "close")
    >>> result["object"]["status"]
    'closed'
"""

from taskfsm.core.constants import DEFAULT_OBJECT_STATE_FIELD_NAME
from taskfsm.core.errors import (
    AlreadyStartedError,
    DefinitionError,
    FSMError,
    GuardRejectedError,
    IllegalTransitionError,
)
from taskfsm.definition import HookParam, HookSpec, MachineDefinition, Transition
from taskfsm.loader import dump_schema, load_definition, load_schema
from taskfsm.machine import Machine
from taskfsm.registry import ActionRegistry, GuardRegistry, TransitionContext
from taskfsm.task_manager import SearchFn, TaskManager, UpdateFn

__all__ = [
    "DEFAULT_OBJECT_STATE_FIELD_NAME",
    "ActionRegistry",
    "AlreadyStartedError",
    "DefinitionError",
    "FSMError",
    "GuardRegistry",
    "GuardRejectedError",
    "HookParam",
    "HookSpec",
    "IllegalTransitionError",
    "Machine",
    "MachineDefinition",
    "SearchFn",
    "TaskManager",
    "Transition",
    "TransitionContext",
    "UpdateFn",
    "dump_schema",
    "load_definition",
    "load_schema",
]
