"""Reading machine definitions from disk.

Definition files are the artifacts saved by the editor. Both YAML and JSON
are accepted; YAML is a superset of JSON, but JSON files go through the
json module so error messages point at JSON syntax.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from taskfsm.core.constants import DEFINITION_SUFFIXES
from taskfsm.core.errors import DefinitionError
from taskfsm.definition import MachineDefinition

logger = logging.getLogger(__name__)


def load_schema(path: Path | str) -> dict[str, Any]:
    """Read a raw schema mapping from a ``.yaml``, ``.yml`` or ``.json`` file.

    Raises:
        DefinitionError: If the suffix is unsupported, the file cannot be
            parsed, or its top level is not a mapping.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in DEFINITION_SUFFIXES:
        raise DefinitionError(
            f"Unsupported definition file {path.name!r} "
            f"(expected one of {', '.join(DEFINITION_SUFFIXES)})"
        )

    content = path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DefinitionError(f"Cannot parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise DefinitionError(
            f"{path}: top level must be a mapping, got {type(data).__name__}"
        )

    logger.debug("Loaded schema from %s", path)
    return data


def load_definition(path: Path | str) -> MachineDefinition:
    """Read and validate a machine definition file."""
    return MachineDefinition(load_schema(path))


def dump_schema(definition: MachineDefinition, path: Path | str) -> Path:
    """Write a definition back to disk in the format implied by the suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in DEFINITION_SUFFIXES:
        raise DefinitionError(f"Unsupported definition file {path.name!r}")

    data = definition.to_schema()
    if suffix == ".json":
        content = json.dumps(data, indent=2) + "\n"
    else:
        content = yaml.safe_dump(
            data, default_flow_style=False, sort_keys=False, allow_unicode=True
        )
    path.write_text(content, encoding="utf-8")
    logger.debug("Wrote schema %r to %s", definition.name, path)
    return path
