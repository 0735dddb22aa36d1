"""CLI entry point for the JuiceFS provider.

``serve`` runs the provider for a host orchestrator, ``juicefs`` delegates to
the wrapped binary, and the remaining commands drive the same handlers
locally against a YAML state file.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from .commands import DELEGATE_SUBCOMMAND, delegate
from .config import ENV_BINARY, ProviderSettings, configure_logging, load_settings
from .diagnostics import Diagnostics
from .docs import render_docs, write_docs
from .format import FormatResource
from .provider import Provider, ProviderStartupError
from .server import ProviderServer
from .state import StateFileError, apply_config, destroy, load_resource_config
from .version import VersionDataSource


def _print_diagnostics(diags: Diagnostics) -> None:
    for diag in diags:
        label = "Error" if diag.severity == "error" else "Warning"
        print(f"{label}: {diag}", file=sys.stderr)


def _provider(args: argparse.Namespace) -> Provider:
    return Provider(settings=args.settings_obj)


def cmd_serve(args: argparse.Namespace) -> int:
    server = ProviderServer(_provider(args))
    return server.serve(sys.stdin, sys.stdout)


def run_delegate(juicefs_args: List[str], binary: Optional[str] = None) -> int:
    """Delegate mode: no logging setup, so the child output stays exactly juicefs's."""
    if juicefs_args and juicefs_args[0] == "--":
        juicefs_args = juicefs_args[1:]
    if not binary:
        binary = os.environ.get(ENV_BINARY, "").strip() or "juicefs"
    return delegate(juicefs_args, binary)


def cmd_juicefs(args: argparse.Namespace) -> int:
    return run_delegate(list(args.juicefs_args), args.settings_obj.juicefs_binary)


def cmd_version(args: argparse.Namespace) -> int:
    result = _provider(args).data_source(VersionDataSource.type_name).read()
    if not result.ok:
        _print_diagnostics(result.diagnostics)
        return 1
    print(result.state["version"])
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    print(json.dumps(_provider(args).get_schema(), indent=args.indent, sort_keys=True))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        config = load_resource_config(Path(args.config).expanduser().resolve())
    except (FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    diags = _provider(args).resource(FormatResource.type_name).validate_config(config)
    if diags.has_error():
        _print_diagnostics(diags)
        return 1
    print(f"Configuration {args.config} is valid")
    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    provider = _provider(args)
    state_path = Path(args.state).expanduser().resolve()
    try:
        config = load_resource_config(Path(args.config).expanduser().resolve())
    except (FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        provider.ensure_configured()
    except ProviderStartupError as e:
        print(f"Error: provider startup failed: {e}", file=sys.stderr)
        return 1

    try:
        action, result = apply_config(provider, args.name, config, state_path)
    except StateFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_diagnostics(result.diagnostics)
    if not result.ok:
        return 1
    resource_id = (result.state or {}).get("id")
    print(f"{args.name}: {action} complete (id={resource_id})")
    return 0


def cmd_destroy(args: argparse.Namespace) -> int:
    state_path = Path(args.state).expanduser().resolve()
    try:
        result = destroy(_provider(args), args.name, state_path)
    except StateFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not result.ok:
        _print_diagnostics(result.diagnostics)
        return 1
    print(f"{args.name}: removed from state")
    return 0


def cmd_docs(args: argparse.Namespace) -> int:
    pages = render_docs(_provider(args))
    for path in write_docs(pages, Path(args.output)):
        print(f"Wrote {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="terraform-provider-juicefs",
        description="Terraform provider for JuiceFS format operations",
    )
    parser.add_argument("--settings", help="Path to a provider settings YAML file")
    parser.add_argument("--log-level", help="Logging level (overrides settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Serve the provider over stdio")
    serve.set_defaults(func=cmd_serve)

    jfs = subparsers.add_parser(
        "juicefs", help="Run the wrapped juicefs binary with the given arguments"
    )
    jfs.add_argument("juicefs_args", nargs=argparse.REMAINDER)
    jfs.set_defaults(func=cmd_juicefs)

    version = subparsers.add_parser("version", help="Print the installed JuiceFS version")
    version.set_defaults(func=cmd_version)

    schema = subparsers.add_parser("schema", help="Print provider schemas as JSON")
    schema.add_argument("--indent", type=int, default=2)
    schema.set_defaults(func=cmd_schema)

    validate = subparsers.add_parser(
        "validate", help="Validate a juicefs_format configuration"
    )
    validate.add_argument("--config", required=True, help="Path to resource YAML")
    validate.set_defaults(func=cmd_validate)

    apply = subparsers.add_parser(
        "apply", help="Create or update a juicefs_format resource locally"
    )
    apply.add_argument("--config", required=True, help="Path to resource YAML")
    apply.add_argument(
        "--state", default="juicefs-state.yaml", help="Path to the local state file"
    )
    apply.add_argument("--name", default="default", help="Resource name in state")
    apply.set_defaults(func=cmd_apply)

    destroy_cmd = subparsers.add_parser(
        "destroy", help="Remove a juicefs_format resource from local state"
    )
    destroy_cmd.add_argument(
        "--state", default="juicefs-state.yaml", help="Path to the local state file"
    )
    destroy_cmd.add_argument("--name", default="default", help="Resource name in state")
    destroy_cmd.set_defaults(func=cmd_destroy)

    docs = subparsers.add_parser("docs", help="Render Markdown documentation")
    docs.add_argument("--output", default="docs", help="Output directory")
    docs.set_defaults(func=cmd_docs)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    # the self-invocation path bypasses argparse so every argument after
    # the first "--" reaches juicefs untouched
    if argv and argv[0] == DELEGATE_SUBCOMMAND:
        return run_delegate(argv[1:])

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings: ProviderSettings = load_settings(
            Path(args.settings).expanduser() if args.settings else None
        )
        if args.log_level:
            settings = ProviderSettings.model_validate(
                {**settings.model_dump(), "log_level": args.log_level}
            )
    except (FileNotFoundError, RuntimeError, ValueError) as e:
        # pydantic ValidationError is a ValueError
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.func is not cmd_juicefs:
        configure_logging(settings.log_level)
    args.settings_obj = settings
    result = args.func(args)
    # Commands may return an exit code; treat None as success
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
