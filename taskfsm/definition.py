"""Declarative machine definitions.

A definition is built once from the schema produced by the editor and is
read-only afterwards. Keys stay camelCase on the wire so existing schema
files load unchanged:

    {
        "name": "invoice",
        "initialState": "draft",
        "finalStates": ["paid"],
        "objectStateFieldName": "status",
        "transitions": [
            {"from": "draft", "event": "approve", "to": "approved",
             "guard": "hasApprover", "action": {"name": "notify", "params": {"to": "ap"}}},
            {"from": "approved", "event": "pay", "to": "paid"},
        ],
    }
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from taskfsm.core.constants import DEFAULT_OBJECT_STATE_FIELD_NAME
from taskfsm.core.errors import DefinitionError

logger = logging.getLogger(__name__)


# =============================================================================
# Schema models
# =============================================================================


class HookParam(BaseModel):
    """One entry of a hook's list-form params: ``{"name": ..., "value": ...}``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    value: Any = None


class HookSpec(BaseModel):
    """Reference to a registered guard or action.

    Accepts a bare name, ``{"name": ..., "params": {...}}``, or the editor's
    list form ``{"name": ..., "params": [{"name": ..., "value": ...}]}``.
    Whichever params form was given is kept and written back by `to_schema`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Registered hook name")
    params: dict[str, Any] | list[HookParam] = Field(
        default_factory=dict, description="Keyword values passed to the hook"
    )

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    @field_validator("params")
    @classmethod
    def _unique_param_names(
        cls, params: dict[str, Any] | list[HookParam]
    ) -> dict[str, Any] | list[HookParam]:
        if isinstance(params, list):
            names = [p.name for p in params]
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise ValueError(f"duplicate param names: {', '.join(duplicates)}")
        return params

    @property
    def arguments(self) -> dict[str, Any]:
        """Params as a mapping, whichever form the schema used."""
        if isinstance(self.params, list):
            return {p.name: p.value for p in self.params}
        return dict(self.params)

    def to_schema(self) -> str | dict[str, Any]:
        if not self.params:
            return self.name
        if isinstance(self.params, list):
            return {"name": self.name, "params": [p.model_dump() for p in self.params]}
        return {"name": self.name, "params": dict(self.params)}


class StateSpec(BaseModel):
    """Explicitly declared state."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data


class Transition(BaseModel):
    """A single ``(from, event) -> to`` rule.

    Hooks may be given singly (``guard``/``action``), as lists
    (``guards``/``actions``), or both. Unknown keys are rejected so that a
    misspelt hook key never loads as an unguarded transition.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    from_state: str = Field(alias="from", min_length=1)
    event: str = Field(min_length=1)
    to: str = Field(min_length=1)
    guard: HookSpec | None = None
    guards: list[HookSpec] = Field(default_factory=list)
    action: HookSpec | None = None
    actions: list[HookSpec] = Field(default_factory=list)
    description: str | None = None

    @property
    def guard_specs(self) -> tuple[HookSpec, ...]:
        """Every guard, ``guard`` first. All must accept."""
        return ((self.guard,) if self.guard else ()) + tuple(self.guards)

    @property
    def action_specs(self) -> tuple[HookSpec, ...]:
        """Every action in run order, ``action`` first."""
        return ((self.action,) if self.action else ()) + tuple(self.actions)

    def to_schema(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "from": self.from_state,
            "event": self.event,
            "to": self.to,
        }
        if self.guard:
            data["guard"] = self.guard.to_schema()
        if self.guards:
            data["guards"] = [g.to_schema() for g in self.guards]
        if self.action:
            data["action"] = self.action.to_schema()
        if self.actions:
            data["actions"] = [a.to_schema() for a in self.actions]
        if self.description:
            data["description"] = self.description
        return data


class MachineSchema(BaseModel):
    """Wire format of a machine definition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    initial_state: str = Field(alias="initialState", min_length=1)
    final_states: list[str] = Field(default_factory=list, alias="finalStates")
    object_state_field_name: str | None = Field(
        default=None, alias="objectStateFieldName"
    )
    transitions: list[Transition]
    states: list[StateSpec] | None = None
    description: str | None = None


def _format_validation_error(exc: ValidationError) -> list[str]:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<schema>"
        problems.append(f"{loc}: {err['msg']}")
    return problems


def _check_consistency(schema: MachineSchema) -> list[str]:
    """Return the structural problems of an otherwise well-typed schema."""
    problems: list[str] = []

    if schema.states is not None:
        declared = {s.name for s in schema.states}
        if schema.initial_state not in declared:
            problems.append(f"initialState {schema.initial_state!r} is not a declared state")
        for state in schema.final_states:
            if state not in declared:
                problems.append(f"final state {state!r} is not a declared state")
        for i, t in enumerate(schema.transitions):
            for label, state in (("from", t.from_state), ("to", t.to)):
                if state not in declared:
                    problems.append(
                        f"transitions.{i}.{label}: {state!r} is not a declared state"
                    )

    seen: set[tuple[str, str]] = set()
    finals = set(schema.final_states)
    for i, t in enumerate(schema.transitions):
        key = (t.from_state, t.event)
        if key in seen:
            problems.append(
                f"transitions.{i}: duplicate transition for event {t.event!r} "
                f"from state {t.from_state!r}"
            )
        seen.add(key)
        if t.from_state in finals:
            problems.append(
                f"transitions.{i}: final state {t.from_state!r} cannot have "
                "outgoing transitions"
            )

    return problems


# =============================================================================
# MachineDefinition
# =============================================================================


class MachineDefinition:
    """Validated, immutable view of a machine schema.

    Raises:
        DefinitionError: If required fields are missing, a transition refers
            to an undeclared state, a ``(from, event)`` pair repeats, or a
            final state has outgoing transitions.
    """

    def __init__(self, schema: Mapping[str, Any]) -> None:
        try:
            self._schema = MachineSchema.model_validate(schema)
        except ValidationError as exc:
            raise DefinitionError(
                "Invalid machine schema", _format_validation_error(exc)
            ) from exc

        problems = _check_consistency(self._schema)
        if problems:
            raise DefinitionError(
                f"Inconsistent machine definition {self._schema.name!r}", problems
            )

        self._table: dict[tuple[str, str], Transition] = {
            (t.from_state, t.event): t for t in self._schema.transitions
        }
        self._final_states = frozenset(self._schema.final_states)

        if self._schema.states is not None:
            self._states = frozenset(s.name for s in self._schema.states)
        else:
            implied = {self._schema.initial_state, *self._final_states}
            for t in self._schema.transitions:
                implied.update((t.from_state, t.to))
            self._states = frozenset(implied)

        logger.debug(
            "Loaded machine definition %r: %d states, %d transitions",
            self.name,
            len(self._states),
            len(self._table),
        )

    @classmethod
    def from_schema(cls, schema: Mapping[str, Any]) -> MachineDefinition:
        return cls(schema)

    def __repr__(self) -> str:
        return f"MachineDefinition(name={self.name!r})"

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    @staticmethod
    def get_default_object_state_field_name() -> str:
        """Field name used when a schema omits objectStateFieldName."""
        return DEFAULT_OBJECT_STATE_FIELD_NAME

    @property
    def name(self) -> str:
        return self._schema.name

    @property
    def object_state_field_name(self) -> str:
        return (
            self._schema.object_state_field_name
            or self.get_default_object_state_field_name()
        )

    @property
    def states(self) -> frozenset[str]:
        return self._states

    @property
    def final_states(self) -> frozenset[str]:
        return self._final_states

    @property
    def events(self) -> frozenset[str]:
        return frozenset(t.event for t in self._schema.transitions)

    @property
    def transitions(self) -> tuple[Transition, ...]:
        return tuple(self._schema.transitions)

    def get_initial_state(self) -> str:
        return self._schema.initial_state

    def is_final_state(self, state: str | None) -> bool:
        return state in self._final_states

    def find_transition(self, from_state: str | None, event: str) -> Transition | None:
        """Look up the transition for ``(from_state, event)``.

        Absence is a normal outcome, so this returns None instead of raising.
        """
        if from_state is None:
            return None
        return self._table.get((from_state, event))

    def transitions_from(self, state: str | None) -> list[Transition]:
        """Transitions leaving ``state``, in declaration order."""
        return [t for t in self._schema.transitions if t.from_state == state]

    # -------------------------------------------------------------------------
    # Object state field
    # -------------------------------------------------------------------------

    def get_object_state(self, obj: Any) -> str | None:
        """Read the state field, or None when the object does not carry one."""
        field = self.object_state_field_name
        if isinstance(obj, Mapping):
            return obj.get(field)
        return getattr(obj, field, None)

    def set_object_state(self, obj: Any, new_state: str) -> Any:
        """Return a copy of ``obj`` with its state field set to ``new_state``.

        Mappings become a new dict; pydantic models and dataclasses are
        copied with the field replaced. The input is never modified.

        Raises:
            TypeError: If ``obj`` is not a supported record, or is a pydantic
                model or dataclass that does not declare the state field.
        """
        field = self.object_state_field_name
        if isinstance(obj, BaseModel):
            extra_allowed = obj.model_config.get("extra") == "allow"
            if field not in type(obj).model_fields and not extra_allowed:
                raise TypeError(f"{type(obj).__name__} has no state field {field!r}")
            return obj.model_copy(update={field: new_state})
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            if field not in {f.name for f in dataclasses.fields(obj)}:
                raise TypeError(f"{type(obj).__name__} has no state field {field!r}")
            return dataclasses.replace(obj, **{field: new_state})
        if isinstance(obj, Mapping):
            return {**obj, field: new_state}
        raise TypeError(f"Unsupported managed object type: {type(obj).__name__}")

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_schema(self) -> dict[str, Any]:
        """Convert back to the camelCase wire format."""
        data: dict[str, Any] = {
            "name": self._schema.name,
            "initialState": self._schema.initial_state,
            "finalStates": list(self._schema.final_states),
        }
        if self._schema.object_state_field_name:
            data["objectStateFieldName"] = self._schema.object_state_field_name
        data["transitions"] = [t.to_schema() for t in self._schema.transitions]
        if self._schema.states is not None:
            data["states"] = [
                {"name": s.name, "description": s.description}
                if s.description
                else s.name
                for s in self._schema.states
            ]
        if self._schema.description:
            data["description"] = self._schema.description
        return data
