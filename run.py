"""Command line entry point for the Memory Bank application."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import ValidationError

from memory_bank.config import AppConfig, load_config
from memory_bank.errors import MemoryBankError
from memory_bank.services import Services, build_services


def _print(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def cmd_create_project(services: Services, args: argparse.Namespace) -> int:
    project = services.projects.create_project(args.name)
    _print(project.model_dump(mode="json"))
    return 0


def cmd_init_project(services: Services, args: argparse.Namespace) -> int:
    files = services.files.initialize_project(args.project_id)
    _print({"ok": True, "files": files})
    return 0


def cmd_list_projects(services: Services, args: argparse.Namespace) -> int:
    _print([p.model_dump(mode="json") for p in services.projects.list_projects()])
    return 0


def cmd_delete_project(services: Services, args: argparse.Namespace) -> int:
    services.projects.delete_project(args.project_id)
    _print({"ok": True})
    return 0


def cmd_update(services: Services, args: argparse.Namespace) -> int:
    content = Path(args.path).read_text(encoding="utf-8")
    count = services.files.update_file(args.project_id, args.file_name, content)
    _print({"ok": True, "chunks": count})
    return 0


def cmd_get(services: Services, args: argparse.Namespace) -> int:
    sys.stdout.write(services.files.get_file_content(args.project_id, args.file_name))
    return 0


def cmd_list_files(services: Services, args: argparse.Namespace) -> int:
    _print(services.files.list_files(args.project_id))
    return 0


def cmd_delete_file(services: Services, args: argparse.Namespace) -> int:
    services.files.delete_file(args.project_id, args.file_name)
    _print({"ok": True})
    return 0


def cmd_search(services: Services, args: argparse.Namespace) -> int:
    results = services.search.search(
        args.project_id,
        args.query,
        search_type=args.type,
        top_k=args.top_k,
        file_filter=args.file,
    )
    _print({"results": [r.model_dump(mode="json") for r in results]})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Per-project memory bank")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create-project", help="Create a project")
    p.add_argument("name")
    p.set_defaults(func=cmd_create_project)

    p = sub.add_parser("init-project", help="Write the standard memory-bank files")
    p.add_argument("project_id")
    p.set_defaults(func=cmd_init_project)

    p = sub.add_parser("list-projects", help="List projects")
    p.set_defaults(func=cmd_list_projects)

    p = sub.add_parser("delete-project", help="Delete a project and its content")
    p.add_argument("project_id")
    p.set_defaults(func=cmd_delete_project)

    p = sub.add_parser("update", help="Replace a file's content from a local file")
    p.add_argument("project_id")
    p.add_argument("file_name")
    p.add_argument("path")
    p.set_defaults(func=cmd_update)

    p = sub.add_parser("get", help="Print a file's reconstructed content")
    p.add_argument("project_id")
    p.add_argument("file_name")
    p.set_defaults(func=cmd_get)

    p = sub.add_parser("list-files", help="List a project's files")
    p.add_argument("project_id")
    p.set_defaults(func=cmd_list_files)

    p = sub.add_parser("delete-file", help="Delete a file's content")
    p.add_argument("project_id")
    p.add_argument("file_name")
    p.set_defaults(func=cmd_delete_file)

    p = sub.add_parser("search", help="Search a project's content")
    p.add_argument("project_id")
    p.add_argument("query")
    p.add_argument("--type", default="semantic", choices=["semantic", "keyword"])
    p.add_argument("--top-k", type=int, default=None)
    p.add_argument("--file", action="append", default=None, help="Restrict to file (repeatable)")
    p.set_defaults(func=cmd_search)

    return parser


def configure_logging(config: AppConfig) -> None:
    # stdout carries command output
    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Load configuration, initialize storage and the model, run a command."""
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except (ValidationError, yaml.YAMLError) as e:
        print(f"error: invalid configuration in {args.config}: {e}", file=sys.stderr)
        return 1
    configure_logging(config)

    try:
        services = build_services(config)
        return int(args.func(services, args))
    except (MemoryBankError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
