"""Root test fixtures shared across unit and integration tests."""

import logging
from collections.abc import Generator
from typing import Any

import pytest

from taskfsm import ActionRegistry, GuardRegistry, Machine, MachineDefinition
from tests.factories import InMemoryStore, create_invoice_schema, create_schema

# ============================================================================
# Definition Fixtures
# ============================================================================


@pytest.fixture
def schema() -> dict[str, Any]:
    """Minimal ``init -finish-> finished`` schema."""
    return create_schema()


@pytest.fixture
def definition(schema: dict[str, Any]) -> MachineDefinition:
    return MachineDefinition(schema)


@pytest.fixture
def machine(definition: MachineDefinition) -> Machine:
    return Machine(definition)


# ============================================================================
# Invoice Machine (guard + action)
# ============================================================================


@pytest.fixture
def notified() -> list[tuple[Any, Any]]:
    """Collects (object, context) pairs passed to the notify action."""
    return []


@pytest.fixture
def invoice_guards() -> GuardRegistry:
    guards = GuardRegistry()

    @guards("amountBelow")
    def amount_below(obj, ctx):
        return obj.get("amount", 0) < ctx.params["limit"]

    return guards


@pytest.fixture
def invoice_actions(notified: list[tuple[Any, Any]]) -> ActionRegistry:
    actions = ActionRegistry()

    @actions("notify")
    async def notify(obj, ctx):
        notified.append((obj, ctx))

    return actions


@pytest.fixture
def invoice_machine(
    invoice_guards: GuardRegistry, invoice_actions: ActionRegistry
) -> Machine:
    return Machine(
        MachineDefinition(create_invoice_schema()),
        guards=invoice_guards,
        actions=invoice_actions,
    )


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


# ============================================================================
# Logging Isolation
# ============================================================================


@pytest.fixture
def isolate_logging() -> Generator[None]:
    """Restore the taskfsm logger after tests that reconfigure it."""
    logger = logging.getLogger("taskfsm")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
