"""
Top-level CLI dispatcher: api-version-manager <command> [options].

Commands map onto the deployment lifecycle:
  validate      before packaging: the configured api_version must be well formed
                and greater than the latest deployed version
  cleanup       retire every version outside the retention window
  after-deploy  cleanup, run after a successful deployment
  get-versions  list deployed versions, oldest first
  next-version  print the configured api_version, or the latest with patch bumped

Exit: 0 OK, 2 configuration/format/ordering error, 3 service/registry resolution error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from ..config import Settings, load_settings
from ..core.errors import ResolutionError, VersionManagerError
from ..logging_utils import LoggingEventSink, configure_logging
from ..orchestrator import LifecycleOrchestrator
from ..providers.aws import CloudFormationRegistry, CloudFormationResourceManager

logger = logging.getLogger("api_version_manager.cli")

EXIT_OK = 0
EXIT_INVALID = 2
EXIT_UNRESOLVED = 3

COMMANDS = ("validate", "cleanup", "after-deploy", "get-versions", "next-version")


def build_orchestrator(settings: Settings) -> LifecycleOrchestrator:
    """Wire the AWS collaborators for `settings`."""
    registry = CloudFormationRegistry.from_region(
        settings.region,
        version_prefix=settings.version_prefix,
        alias_tag=settings.alias_tag,
        api_output_key=settings.api_output_key,
        tag_separators=settings.tag_separators,
    )
    resource_manager = CloudFormationResourceManager.from_region(
        settings.region,
        wait_delay_s=settings.wait_delay_s,
        wait_max_attempts=settings.wait_max_attempts,
    )
    return LifecycleOrchestrator(settings, registry, resource_manager, LoggingEventSink(logger))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="api-version-manager",
        description="Validate, list and retire versioned API Gateway stages",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--service", required=True, help="Service name (stack prefix)")
    common.add_argument("--stage", default=None, help="Deployment stage (default: config or 'dev')")
    common.add_argument("--region", default=None, help="AWS region")
    common.add_argument("--config", default=None, help="Path to config.yaml")
    common.add_argument("--retain", default=None, help="Number of versions to keep")
    common.add_argument("--api-version", default=None, help="Candidate version, e.g. v3-2-0")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="command")
    for name in COMMANDS:
        subparsers.add_parser(name, parents=[common], help=f"Run {name}")
    return parser


def _run(args: argparse.Namespace) -> int:
    settings = load_settings(
        args.config,
        overrides={
            "retain_policy": args.retain,
            "api_version": args.api_version,
            "stage": args.stage,
            "region": args.region,
        },
    )
    orchestrator = build_orchestrator(settings)
    context = settings.context_for(args.service)

    cmd = args.command
    if cmd == "validate":
        orchestrator.validate_deployment(context)
    elif cmd in ("cleanup", "after-deploy"):
        report = orchestrator.after_deploy(context) if cmd == "after-deploy" else orchestrator.cleanup(context)
        logger.info("Cleanup finished: %s", report.summary())
    elif cmd == "get-versions":
        for record in orchestrator.list_versions(context):
            print(f"{record.label}\t{record.identifier or '-'}")
    elif cmd == "next-version":
        print(orchestrator.next_version(context))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return EXIT_OK

    configure_logging(args.verbose)
    try:
        return _run(args)
    except ResolutionError as exc:
        logger.error("%s", exc)
        return EXIT_UNRESOLVED
    except VersionManagerError as exc:
        logger.error("%s", exc)
        return EXIT_INVALID


if __name__ == "__main__":
    raise SystemExit(main())
