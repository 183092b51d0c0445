"""
CLI Module

Architectural Intent:
- Command-line interface for tierplan
- Reads template / config / state documents from JSON files, delegates to
  the use cases via the composition root and prints JSON to stdout
- Supports --verbose/--debug flags for log level control and --log-json
  for structured logs carrying component and tier context
"""

import argparse
import json
import logging
import sys
import traceback
from typing import Any

from tierplan.application.dtos.resolution_dtos import (
    ProjectDeploymentRequest,
    ResolveDeploymentRequest,
)
from tierplan.composition_root import create_container
from tierplan.infrastructure.config import load_config
from tierplan.infrastructure.logging import configure_logging, level_from_name
from tierplan.infrastructure.snapshot_codec import (
    decode_component_override,
    decode_config,
    decode_instance_configurations,
    decode_state,
    decode_template,
    encode_component_override,
    encode_plans,
)


def _read_json(path: str) -> Any:
    with open(path) as f:
        return json.load(f)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="tierplan: deployment topology resolution engine"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--log-json", action="store_true", help="Emit logs as JSON lines on stderr"
    )
    parser.add_argument(
        "--settings", help="Path to tierplan settings file (JSON)", default=None
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve a declarative config against a deployment template"
    )
    resolve_parser.add_argument(
        "--template", "-t", required=True, help="Path to deployment template JSON"
    )
    resolve_parser.add_argument(
        "--config", "-c", required=True, help="Path to deployment config JSON"
    )
    resolve_parser.add_argument(
        "--version", dest="stack_version", help="Stack version to resolve for"
    )
    resolve_parser.add_argument(
        "--previous-version", help="Stack version currently deployed"
    )
    resolve_parser.add_argument(
        "--instance-configurations",
        "-i",
        help="Path to live instance configuration metadata JSON",
    )
    resolve_parser.add_argument(
        "--planned",
        help="Path to the planned elasticsearch config JSON from an earlier pass",
    )
    resolve_parser.add_argument(
        "--migrate-to-latest-hardware",
        action="store_true",
        help="Re-size the dedicated master tier from the latest instance configuration",
    )

    project_parser = subparsers.add_parser(
        "project", help="Project live deployment state into declarative config"
    )
    project_parser.add_argument(
        "--state", "-s", required=True, help="Path to live deployment state JSON"
    )

    return parser


def _resolve(container, args) -> None:
    template = decode_template(_read_json(args.template))
    document = _read_json(args.config)
    components = decode_config(document)

    instance_configurations = ()
    if args.instance_configurations:
        instance_configurations = decode_instance_configurations(
            _read_json(args.instance_configurations)
        )
    planned = None
    if args.planned:
        planned = decode_component_override(_read_json(args.planned))

    request = ResolveDeploymentRequest(
        template=template,
        components=components,
        version=args.stack_version or document.get("version"),
        previous_version=args.previous_version,
        planned_elasticsearch=planned,
        instance_configurations=instance_configurations,
        migrate_to_latest_hardware=args.migrate_to_latest_hardware
        or bool(document.get("migrate_to_latest_hardware")),
    )
    response = container.resolve_deployment.execute(request)
    _print_json(encode_plans(response.plans))


def _project(container, args) -> None:
    states = decode_state(_read_json(args.state))
    response = container.project_deployment.execute(ProjectDeploymentRequest(states))

    output: dict[str, Any] = {
        kind.value: encode_component_override(override)
        for kind, override in response.components.items()
    }
    if response.version:
        output["version"] = response.version
    if response.deployment_template_id:
        output["deployment_template_id"] = response.deployment_template_id
    _print_json(output)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    config = load_config(args.settings)

    # Configure logging based on flags
    if args.debug:
        configure_logging(level=logging.DEBUG, json_format=args.log_json)
    elif args.verbose:
        configure_logging(level=logging.INFO, json_format=args.log_json)
    else:
        configure_logging(
            level=level_from_name(config.log_level), json_format=args.log_json
        )

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    container = create_container(config)
    commands = {"resolve": _resolve, "project": _project}
    try:
        commands[args.command](container, args)
    except FileNotFoundError as e:
        print(f"[-] File not found: {e.filename}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"[-] Invalid JSON document: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"[-] Configuration error: {e}", file=sys.stderr)
        if verbose:
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
