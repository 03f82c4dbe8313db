"""Core errors and constants.

The leaf modules here have no imports from other taskfsm modules.
"""

from taskfsm.core.constants import DEFAULT_OBJECT_STATE_FIELD_NAME, LOGGING
from taskfsm.core.errors import (
    AlreadyStartedError,
    DefinitionError,
    FSMError,
    GuardRejectedError,
    IllegalTransitionError,
)

__all__ = [
    "DEFAULT_OBJECT_STATE_FIELD_NAME",
    "LOGGING",
    "AlreadyStartedError",
    "DefinitionError",
    "FSMError",
    "GuardRejectedError",
    "IllegalTransitionError",
]
