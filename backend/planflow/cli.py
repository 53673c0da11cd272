"""
Planflow command line.

    planflow check STEP     Decide whether a planning step may run
    planflow status         Show every step's state and the next steps
    planflow validate       Check a workflow definition for consistency
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import GateSettings
from .errors import PlanflowError
from .gate import Allowed, Blocked, Skipped, WorkflowGate
from .inventory import detect_platform, discover_bindings, scan_documents
from .loader import resolve_workflow
from .models import Platform
from .validator import ConsistencyValidator

logger = logging.getLogger(__name__)

EXIT_ALLOWED = 0
EXIT_BLOCKED = 1
EXIT_SKIPPED = 2
EXIT_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planflow", description="Product-planning workflow gate")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--log-level", help="Logging level (default: PLANFLOW_LOG_LEVEL or WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    project = argparse.ArgumentParser(add_help=False)
    project.add_argument("--root", help="Project root holding the planning documents")
    project.add_argument("--workflow", help="Workflow definition YAML file")
    project.add_argument("--platform", help="Target platform (default: read from the product overview)")
    project.add_argument(
        "--section",
        action="append",
        default=[],
        help="Section id to check section-scoped documents for (repeatable)",
    )
    project.add_argument("--json", action="store_true", help="Print JSON output")

    check = subparsers.add_parser("check", parents=[project], help="Decide whether a step may run")
    check.add_argument("step", help="Step identifier, e.g. data-model")

    subparsers.add_parser("status", parents=[project], help="Show the state of every step")

    validate = subparsers.add_parser("validate", help="Check a workflow definition for consistency")
    validate.add_argument("--workflow", help="Workflow definition YAML file")
    validate.add_argument("--json", action="store_true", help="Print JSON output")

    return parser


def _bindings(args: argparse.Namespace) -> Dict[str, List[str]]:
    if args.section:
        return {"id": list(args.section)}
    return {}


def _platform(args: argparse.Namespace, settings: GateSettings, root: Path) -> Platform:
    if args.platform:
        return Platform.parse(args.platform)
    if settings.platform:
        return Platform.parse(settings.platform)
    platform = detect_platform(root)
    logger.info("Platform from product overview: %s", platform.value)
    return platform


def _print_json(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2))


def run_check(args: argparse.Namespace, settings: GateSettings) -> int:
    root = Path(args.root) if args.root else settings.project_root
    gate = WorkflowGate(resolve_workflow(args.workflow or settings.workflow_path))
    platform = _platform(args, settings, root)
    documents = scan_documents(root)
    bindings = _bindings(args)

    decision = gate.can_run(args.step, documents, platform, bindings)
    outputs = gate.expected_outputs(args.step, bindings)
    producers: List[str] = []
    if isinstance(decision, Blocked):
        producers = gate.producers_of(decision.missing)

    if args.json:
        data = {"step": args.step, "platform": platform.value, **decision.to_dict()}
        data["outputs"] = outputs
        if isinstance(decision, Blocked):
            data["run_first"] = producers
        _print_json(data)
    else:
        print(f"{args.step}: {decision.status}")
        if isinstance(decision, Blocked):
            for path in decision.missing:
                print(f"  missing: {path}")
            if producers:
                print(f"  run first: {', '.join(producers)}")
        elif isinstance(decision, Allowed):
            for path in outputs:
                print(f"  produces: {path}")
        elif isinstance(decision, Skipped):
            print(f"  {decision.reason}")

    if isinstance(decision, Allowed):
        return EXIT_ALLOWED
    if isinstance(decision, Blocked):
        return EXIT_BLOCKED
    return EXIT_SKIPPED


def run_status(args: argparse.Namespace, settings: GateSettings) -> int:
    root = Path(args.root) if args.root else settings.project_root
    gate = WorkflowGate(resolve_workflow(args.workflow or settings.workflow_path))
    platform = _platform(args, settings, root)
    documents = scan_documents(root)

    status = gate.evaluate(documents, platform, _bindings(args))
    discovered = discover_bindings(documents)

    if args.json:
        data = status.to_dict()
        data["sections"] = discovered["id"]
        data["domains"] = discovered["domain"]
        _print_json(data)
    else:
        print(status.summary())
        if discovered["id"]:
            print(f"Sections: {', '.join(discovered['id'])}")
        if discovered["domain"]:
            print(f"Domains: {', '.join(discovered['domain'])}")
    return 0


def run_validate(args: argparse.Namespace, settings: GateSettings) -> int:
    workflow = resolve_workflow(args.workflow or settings.workflow_path)
    result = ConsistencyValidator().validate(workflow)
    if args.json:
        _print_json(result.to_dict())
    else:
        print(result.summary())
    return 0 if result.valid else 1


COMMANDS = {
    "check": run_check,
    "status": run_status,
    "validate": run_validate,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = GateSettings.from_env(args.env_file)
    level = (args.log_level or settings.log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        print(f"error: Unknown log level: {level}", file=sys.stderr)
        return EXIT_ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return COMMANDS[args.command](args, settings)
    except PlanflowError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
