"""Autostop CLI: instance lifecycle from the command line.

Usage examples::

    autostop --region us-east-1 list
    autostop start i-0abc --minutes 60 --idle
    autostop stop i-0abc
    autostop terminate i-0abc --yes

Credentials come from the environment or boto3's credential chain.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from pydantic import BaseModel, ValidationError

from autostop.base.config import DEFAULT_REQUEST_TIMEOUT
from autostop.base.exceptions import AutostopError
from autostop.base.models import AutoStopPolicy, LifecycleOutcome
from autostop.controller import LifecycleController
from autostop.session import configure


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ``autostop`` CLI.

    Returns:
        Configured :class:`~argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="autostop",
        description="Start, stop and terminate EC2 instances with auto-stop alarms",
    )
    parser.add_argument(
        "--region", "-r",
        default=None,
        help="AWS region (defaults to AWS_DEFAULT_REGION)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="Per-request timeout in seconds",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List instances")

    status = sub.add_parser("status", help="Show one instance's status")
    status.add_argument("instance_id")

    start = sub.add_parser("start", help="Start an instance")
    start.add_argument("instance_id")
    start.add_argument(
        "--minutes", "-m",
        type=int,
        default=None,
        help="Stop automatically after this many minutes",
    )
    start.add_argument(
        "--idle",
        action="store_true",
        help="Stop automatically once CPU stays under 5%% for 5 minutes",
    )

    stop = sub.add_parser("stop", help="Stop an instance")
    stop.add_argument("instance_id")

    terminate = sub.add_parser("terminate", help="Terminate an instance (irreversible)")
    terminate.add_argument("instance_id")
    terminate.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip the confirmation prompt",
    )
    return parser


def _emit(result: Any) -> None:
    if isinstance(result, list):
        payload = [r.model_dump(mode="json") for r in result]
    elif isinstance(result, BaseModel):
        payload = result.model_dump(mode="json", exclude_none=True)
    else:
        payload = result
    print(json.dumps(payload, indent=2, default=str))


def _confirm(instance_id: str) -> bool:
    answer = input(
        f"Terminate {instance_id}? This cannot be undone and all data on the "
        "instance will be lost. [y/N] "
    )
    return answer.strip().lower() in ("y", "yes")


def _run(controller: LifecycleController, ns: argparse.Namespace) -> Any:
    if ns.command == "list":
        return controller.list_instances()
    if ns.command == "status":
        return controller.get_status(ns.instance_id)
    if ns.command == "start":
        return controller.start(
            ns.instance_id, AutoStopPolicy(minutes=ns.minutes, idle=ns.idle)
        )
    if ns.command == "stop":
        return controller.stop(ns.instance_id)
    return controller.terminate(ns.instance_id)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses arguments, configures a session, runs the lifecycle command and
    prints the result as JSON. Exits non-zero when the operation did not
    succeed.

    Args:
        argv: Optional argument list (defaults to ``sys.argv``).
    """
    parser = _build_parser()
    ns = parser.parse_args(argv)

    if ns.command == "terminate" and not ns.yes and not _confirm(ns.instance_id):
        print("Aborted", file=sys.stderr)
        sys.exit(1)

    try:
        session = configure(ns.region, request_timeout=ns.timeout)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    except AutostopError as e:
        _emit(LifecycleOutcome.from_error(e))
        sys.exit(1)

    controller = LifecycleController(session)
    try:
        result = _run(controller, ns)
    except AutostopError as e:
        _emit(LifecycleOutcome.from_error(e))
        sys.exit(1)

    _emit(result)
    if isinstance(result, LifecycleOutcome):
        if getattr(result, "schedule_error", None):
            print(
                "Warning: instance started but auto-stop is not active: "
                f"{result.schedule_error}",
                file=sys.stderr,
            )
        if getattr(result, "can_terminate", False):
            print(
                f"Run 'autostop terminate {ns.instance_id}' to terminate it instead.",
                file=sys.stderr,
            )
        if not result.success:
            sys.exit(1)


if __name__ == "__main__":
    main()
