"""Factory functions for creating test schemas and stores."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any

# ============================================================================
# Schema Factories
# ============================================================================


def create_schema(**overrides: Any) -> dict[str, Any]:
    """Create the minimal ``init -finish-> finished`` schema.

    Keyword overrides replace top-level schema keys.
    """
    schema: dict[str, Any] = {
        "name": "test",
        "initialState": "init",
        "finalStates": ["finished"],
        "objectStateFieldName": "status",
        "transitions": [
            {"from": "init", "event": "finish", "to": "finished"},
        ],
    }
    schema.update(overrides)
    return schema


def create_invoice_schema(**overrides: Any) -> dict[str, Any]:
    """Create a multi-step invoice approval schema with a guard and action."""
    schema: dict[str, Any] = {
        "name": "invoice",
        "initialState": "draft",
        "finalStates": ["paid", "cancelled"],
        "objectStateFieldName": "status",
        "transitions": [
            {"from": "draft", "event": "submit", "to": "review"},
            {"from": "draft", "event": "cancel", "to": "cancelled"},
            {
                "from": "review",
                "event": "approve",
                "to": "approved",
                "guard": {"name": "amountBelow", "params": {"limit": 1000}},
                "action": "notify",
            },
            {"from": "review", "event": "reject", "to": "draft"},
            {"from": "review", "event": "cancel", "to": "cancelled"},
            {"from": "approved", "event": "pay", "to": "paid"},
        ],
    }
    schema.update(overrides)
    return schema


def create_editor_invoice_schema() -> dict[str, Any]:
    """Invoice schema as the editor saves it.

    The approve transition carries a ``guards`` list whose params are
    ``{name, value}`` pairs, and an ``actions`` list.
    """
    schema = create_invoice_schema()
    schema["transitions"][2] = {
        "from": "review",
        "event": "approve",
        "to": "approved",
        "guards": [
            {"name": "amountBelow", "params": [{"name": "limit", "value": 1000}]},
            {"name": "hasApprover"},
        ],
        "actions": [{"name": "notify"}, {"name": "archive"}],
    }
    return schema


# ============================================================================
# Store Fakes
# ============================================================================


@dataclass
class InMemoryStore:
    """Async search/update pair backed by a dict keyed on ``id``.

    Records every call so tests can assert on the storage boundary.
    """

    records: dict[Any, dict[str, Any]] = field(default_factory=dict)
    delay: float = 0.0
    search_calls: list[dict[str, Any]] = field(default_factory=list)
    update_calls: list[dict[str, Any]] = field(default_factory=list)

    def put(self, obj: dict[str, Any]) -> None:
        self.records[obj["id"]] = copy.deepcopy(obj)

    async def search(self, *, search_params: dict[str, Any]) -> list[dict[str, Any]]:
        self.search_calls.append(search_params)
        await asyncio.sleep(self.delay)
        return [
            copy.deepcopy(obj)
            for obj in self.records.values()
            if all(obj.get(k) == v for k, v in search_params.items())
        ]

    async def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        self.update_calls.append(obj)
        await asyncio.sleep(self.delay)
        stored = copy.deepcopy(obj)
        stored["version"] = stored.get("version", 0) + 1
        self.records[stored["id"]] = stored
        return {"object": copy.deepcopy(stored)}
