"""Centralized configuration constants."""

from dataclasses import dataclass

# Field holding the current state when a schema omits objectStateFieldName
DEFAULT_OBJECT_STATE_FIELD_NAME = "status"

DEFINITION_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass(frozen=True)
class LoggingConfig:
    """Logging settings."""

    dir_env_var: str = "TASKFSM_LOG_DIR"
    dir_name: str = ".taskfsm/logs"
    retention_days: int = 7
    file_format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    date_format: str = "%H:%M:%S"


# Singleton configs
LOGGING = LoggingConfig()
