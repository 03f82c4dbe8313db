"""CLI for checking and inspecting machine definition files."""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

from dotenv import load_dotenv
from rich.markup import escape
from rich.table import Table

from taskfsm.console import console, print_error, print_success
from taskfsm.core.errors import DefinitionError
from taskfsm.definition import MachineDefinition
from taskfsm.loader import load_definition
from taskfsm.utils import cleanup_old_logs, get_logs_dir, setup_logging

logger = logging.getLogger(__name__)

try:
    VERSION = get_version("taskfsm")
except PackageNotFoundError:
    VERSION = "0.0.0"


def _create_parser() -> argparse.ArgumentParser:
    """Create and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="taskfsm",
        description="Validate and inspect finite-state-machine definitions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable logging to console",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate definition files")
    validate.add_argument("files", nargs="+", type=Path, help="YAML or JSON definitions")

    show = subparsers.add_parser("show", help="Print a definition's transition table")
    show.add_argument("file", type=Path, help="YAML or JSON definition")

    events = subparsers.add_parser("events", help="List events available from a state")
    events.add_argument("file", type=Path, help="YAML or JSON definition")
    events.add_argument("state", help="State to inspect")

    return parser


def _validate(files: list[Path]) -> int:
    failed = 0
    for path in files:
        try:
            definition = load_definition(path)
        except (DefinitionError, OSError) as exc:
            failed += 1
            logger.warning("Invalid definition %s: %s", path, exc)
            print_error(f"[path]{path}[/path]: {escape(str(exc))}")
            continue
        print_success(
            f"[path]{path}[/path] ({definition.name}, "
            f"{len(definition.states)} states, {len(definition.transitions)} transitions)"
        )
    return 1 if failed else 0


def _transition_table(definition: MachineDefinition) -> Table:
    table = Table(title=definition.name, title_style="heading")
    table.add_column("From", style="state")
    table.add_column("Event", style="event")
    table.add_column("To", style="state")
    table.add_column("Guard", style="muted")
    table.add_column("Action", style="muted")
    for t in definition.transitions:
        table.add_row(
            t.from_state,
            t.event,
            t.to,
            ", ".join(g.name for g in t.guard_specs),
            ", ".join(a.name for a in t.action_specs),
        )
    return table


def _show(path: Path) -> int:
    definition = load_definition(path)
    console.print(_transition_table(definition))
    console.print(
        f"[muted]initial:[/muted] [state]{definition.get_initial_state()}[/state]  "
        f"[muted]final:[/muted] [state]{', '.join(sorted(definition.final_states)) or '-'}[/state]  "
        f"[muted]state field:[/muted] {definition.object_state_field_name}"
    )
    return 0


def _events(path: Path, state: str) -> int:
    definition = load_definition(path)
    if state not in definition.states:
        print_error(f"Unknown state [state]{state}[/state] in {definition.name}")
        return 1
    if definition.is_final_state(state):
        console.print(f"[state]{state}[/state] is final: no events")
        return 0
    for t in definition.transitions_from(state):
        names = ", ".join(g.name for g in t.guard_specs)
        guard = f" [muted](guard: {names})[/muted]" if names else ""
        console.print(f"[event]{t.event}[/event] -> [state]{t.to}[/state]{guard}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the taskfsm CLI."""
    load_dotenv()
    args = _create_parser().parse_args(argv)

    logs_dir = get_logs_dir()
    cleanup_old_logs(logs_dir)
    log_path = setup_logging(logs_dir, verbose=args.verbose)
    logger.debug("taskfsm %s: %s (log: %s)", VERSION, args.command, log_path)

    try:
        if args.command == "validate":
            return _validate(args.files)
        if args.command == "show":
            return _show(args.file)
        return _events(args.file, args.state)
    except (DefinitionError, OSError) as exc:
        print_error(escape(str(exc)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
