from __future__ import annotations

import argparse
import asyncio
import sys
from collections import Counter
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime, time
from pathlib import Path
from typing import Any

from chat_ledger.cli import output as out
from chat_ledger.cli.config import (
    Config,
    config_exists,
    config_path_display,
    load_config,
    save_config,
)
from chat_ledger.etl.core.exceptions import (
    ExportFormatError,
    ExportNotFoundError,
    LedgerProcessingError,
    ProjectMapFormatError,
)
from chat_ledger.etl.core.types import RunSummary
from chat_ledger.ledger import DEFAULT_OUTPUT_STEM, DEFAULT_TAGGED_EXPORT, ChatLedger
from chat_ledger.output.serialize import OutputFormat
from chat_ledger.pairing.sequencer import order_messages
from chat_ledger.projects.assignment import cross_check, resolve_project
from chat_ledger.projects.membership import ProjectMembership
from chat_ledger.providers.chatgpt.adapter import EncodingKind, adapt_conversation
from chat_ledger.providers.chatgpt.lookup import (
    conversation_id_from_url,
    find_conversation,
)
from chat_ledger.providers.chatgpt.timestamps import format_instant, normalize_timestamp
from chat_ledger.storage.disk import DiskStorage
from chat_ledger.validation import validate_conversations

DESCRIPTION = """\
chat-ledger — normalize ChatGPT exports into projects and entries

Reads a conversations.json export (flat "messages" or older "mapping"
encodings), orders each conversation's messages, pairs user prompts
with assistant responses, and groups conversations into projects,
optionally using a {"Project": ["conversation-id", ...]} map.

Quick start: chat-ledger parse path/to/export-dir"""

_LIST_LIMIT = 20
_PREVIEW_CHARS = 200


# ── Infrastructure helpers ──────────────────────────────────────────


def _build_ledger(cfg: Config, output_format: str | None = None) -> ChatLedger:
    return ChatLedger(
        storage=DiskStorage(cfg.data_dir),
        output_format=OutputFormat(output_format) if output_format else cfg.format,
        indent=cfg.indent or None,
    )


def _resolve_export(path: str) -> str:
    """Accept a conversations file or an export directory containing one."""
    p = Path(path).expanduser()
    if p.is_dir():
        p = p / "conversations.json"
    if not p.is_file():
        raise ExportNotFoundError(f"No conversations file at {p}")
    return str(p.resolve())


def _resolve_project_map(cfg: Config, path: str | None) -> str | None:
    chosen = path or cfg.project_map
    if not chosen:
        return None
    return str(Path(chosen).expanduser().resolve())


def _parse_date(value: str, *, end_of_day: bool = False) -> datetime:
    """Parse ``YYYY-MM-DD`` or an ISO-8601 datetime into an aware UTC datetime."""
    try:
        if len(value) == 10:
            day = datetime.strptime(value, "%Y-%m-%d").date()
            moment = datetime.combine(
                day, time(23, 59, 59) if end_of_day else time.min, tzinfo=UTC
            )
        else:
            moment = datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date: {value}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


def _output_stem(cfg: Config, out_path: str | None) -> str:
    if out_path:
        p = Path(out_path).expanduser()
        if p.suffix in (".json", ".jsonl"):
            p = p.with_suffix("")
        return str(p.resolve())
    cfg.ensure_dirs()
    return str((cfg.output_dir / DEFAULT_OUTPUT_STEM).resolve())


async def _load_membership(
    ledger: ChatLedger, project_map: str | None
) -> ProjectMembership | None:
    if project_map is None:
        return None
    return await ledger.load_project_map(project_map)


def _print_summary(summary: RunSummary) -> None:
    out.header("Summary")
    out.kv("Conversations", f"{summary.conversations_processed:,}")
    out.kv("Projects", f"{summary.projects:,}")
    out.kv("Messages", f"{summary.messages_normalized:,}")
    out.kv("Messages paired", f"{summary.messages_paired:,}")
    out.kv("Entries", f"{summary.entries_created:,}")

    if summary.conversations_skipped:
        out.warn(f"{summary.conversations_skipped} conversation(s) skipped (no id)")
    if summary.conversations_without_messages:
        out.warn(
            f"{summary.conversations_without_messages} conversation(s) "
            "without messages"
        )
    if summary.conversations_without_entries:
        out.warn(
            f"{summary.conversations_without_entries} conversation(s) "
            "produced no entries"
        )
    if summary.conversations_without_project:
        out.info(
            f"{summary.conversations_without_project} conversation(s) "
            "in 'No Project'"
        )
    if summary.conflicts:
        out.warn(
            f"{len(summary.conflicts)} conversation id(s) appear in multiple "
            "projects (last merged list wins):"
        )
        out.truncated(
            [f"{cid} → {', '.join(names)}" for cid, names in summary.conflicts.items()],
            10,
        )
    if summary.issues:
        out.warn(
            f"{len(summary.issues)} validation issue(s); "
            "run 'chat-ledger validate' for details"
        )


# ── parse ───────────────────────────────────────────────────────────


async def cmd_parse(args: argparse.Namespace) -> None:
    """Normalize an export and write the projects + entries document."""
    cfg = load_config()
    ledger = _build_ledger(cfg, args.format)

    result = await ledger.process_export(
        _resolve_export(args.export),
        project_map_key=_resolve_project_map(cfg, args.project_map),
        output_stem=_output_stem(cfg, args.out),
        updated_since=args.updated_since,
        updated_until=args.updated_until,
    )

    _print_summary(result.summary)
    print()
    for uri in result.summary.outputs:
        out.success(f"Wrote {uri}")


# ── validate ────────────────────────────────────────────────────────


async def cmd_validate(args: argparse.Namespace) -> None:
    """Validate export records, optionally cross-checking a project map."""
    cfg = load_config()
    ledger = _build_ledger(cfg)
    export_key = _resolve_export(args.export)
    records = await ledger.load_export(export_key)
    membership = await _load_membership(
        ledger, _resolve_project_map(cfg, args.project_map)
    )

    issues = validate_conversations(records)
    out.success(f"Loaded {len(records):,} conversations from {export_key}")

    projects = Counter(
        project.name
        for record in records
        if isinstance(record, dict)
        and (project := resolve_project(record, membership)) is not None
    )
    with_project = sum(projects.values())
    out.kv("With project", with_project)
    out.kv("Without project", len(records) - with_project)

    if projects:
        out.header("Top projects by conversation count")
        for name, count in projects.most_common(15):
            out.info(f"- {name}: {count}")

    if membership is not None:
        report = cross_check(records, membership)
        out.header("Cross-check vs project map")
        if report.missing_ids:
            out.warn(
                f"{len(report.missing_ids)} chat id(s) from the project map "
                "are not present in the export"
            )
            out.truncated(report.missing_ids, _LIST_LIMIT)
        if report.mismatches:
            out.warn(f"{len(report.mismatches)} assignment mismatch(es):")
            out.truncated(
                [
                    f'{cid}: expected "{expected}", actual "{actual or "null"}"'
                    for cid, expected, actual in report.mismatches
                ],
                _LIST_LIMIT,
            )
        if report.ok:
            out.success("Cross-check passed")

    print()
    if issues:
        out.error(f"Validation failed with {len(issues)} issue(s):")
        out.truncated([issue.describe() for issue in issues], _LIST_LIMIT)
        sys.exit(1)
    out.success("Validation passed.")


# ── projects ────────────────────────────────────────────────────────


async def cmd_projects(args: argparse.Namespace) -> None:
    """List conversations grouped by project."""
    cfg = load_config()
    ledger = _build_ledger(cfg)
    records = await ledger.load_export(_resolve_export(args.export))
    membership = await _load_membership(
        ledger, _resolve_project_map(cfg, args.project_map)
    )

    document = ledger.build(records, membership).document
    for project in document.projects:
        out.header(f"=== {project.name} ({project.id}) — {len(project.chats)} chats ===")
        for chat in project.chats:
            print(f"  - {chat.title}  {out.dim(f'[{chat.id}]')}")
    print()


# ── show ────────────────────────────────────────────────────────────


async def cmd_show(args: argparse.Namespace) -> None:
    """Print one conversation's metadata and, optionally, its messages."""
    cfg = load_config()
    ledger = _build_ledger(cfg)
    records = await ledger.load_export(_resolve_export(args.export))

    try:
        conversation_id = conversation_id_from_url(args.conversation)
    except ValueError as exc:
        out.error(str(exc))
        sys.exit(1)

    record = find_conversation(records, conversation_id)
    if record is None:
        out.warn(f"No conversation found with id {conversation_id}.")
        return

    encoding, messages = adapt_conversation(record)
    project = resolve_project(record)

    out.header(record.get("title") or "(untitled)")
    out.kv("id", conversation_id)
    out.kv("project", f"{project.name} ({project.id})" if project else "null")
    out.kv("created", format_instant(normalize_timestamp(record.get("create_time"))))
    out.kv("updated", format_instant(normalize_timestamp(record.get("update_time"))))
    out.kv("encoding", encoding.value)
    out.kv("messages", len(messages))

    if args.messages:
        if encoding is EncodingKind.GRAPH:
            messages = order_messages(messages)
        for message in messages:
            text = message.text
            if len(text) > _PREVIEW_CHARS:
                text = text[:_PREVIEW_CHARS] + "…"
            print(f"\n[{message.role}] {text}")
    print()


# ── apply-map ───────────────────────────────────────────────────────


async def cmd_apply_map(args: argparse.Namespace) -> None:
    """Write a copy of the export with project tags from a membership map."""
    cfg = load_config()
    project_map = _resolve_project_map(cfg, args.project_map)
    if project_map is None:
        out.error("No project map given. Pass --project-map or set [projects] map.")
        sys.exit(1)

    if args.out:
        output_key = str(Path(args.out).expanduser().resolve())
    else:
        cfg.ensure_dirs()
        output_key = str((cfg.output_dir / DEFAULT_TAGGED_EXPORT).resolve())

    ledger = _build_ledger(cfg)
    uri = await ledger.write_with_projects(
        _resolve_export(args.export), project_map, output_key
    )
    out.success(f"Updated export written to {uri}")


# ── config ──────────────────────────────────────────────────────────


async def cmd_config_show(args: argparse.Namespace) -> None:
    """Display current configuration."""
    cfg = load_config()

    out.header(f"Configuration ({config_path_display()})")
    print()
    out.kv("Data directory", cfg.data_dir)
    out.kv("Output format", cfg.format.value)
    out.kv("JSON indent", cfg.indent)
    out.kv("Project map", cfg.project_map or out.dim("not set"))

    print()
    out.info("To change settings:")
    out.next_step("chat-ledger config set-format jsonl", "change output format")
    print()


async def cmd_config_set_format(args: argparse.Namespace) -> None:
    """Persist the default output format."""
    cfg = load_config() if config_exists() else Config()
    cfg.output_format = args.output_format
    path = save_config(cfg)
    out.success(f"Output format set to {cfg.output_format}. Config written to {path}")


async def cmd_config_path(args: argparse.Namespace) -> None:
    """Print the config file path."""
    print(config_path_display())


# ── Parser ──────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    formats = [f.value for f in OutputFormat]

    parser = argparse.ArgumentParser(
        prog="chat-ledger",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  chat-ledger parse ./export                    "
            "Write data/output/structured-chatgpt.json\n"
            "  chat-ledger parse ./export --project-map map.json --format both\n"
            '  chat-ledger parse ./export --updated-since 2025-07-01\n'
            "  chat-ledger validate ./export --project-map map.json\n"
            "  chat-ledger projects ./export\n"
            '  chat-ledger show ./export "https://chatgpt.com/c/<id>" --messages\n'
            "  chat-ledger apply-map ./export --project-map map.json\n"
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress logs",
    )
    sub = parser.add_subparsers(dest="command", title="commands")

    def add_export_args(p: argparse.ArgumentParser, *, project_map: bool) -> None:
        p.add_argument(
            "export", help="conversations.json or an export directory containing it"
        )
        if project_map:
            p.add_argument(
                "--project-map",
                metavar="PATH",
                default=None,
                help='Membership map {"Project": ["conversation-id", ...]}',
            )

    # parse
    p_parse = sub.add_parser(
        "parse",
        help="Normalize an export into projects + prompt/response entries",
    )
    add_export_args(p_parse, project_map=True)
    p_parse.add_argument("--out", metavar="PATH", help="Output file path")
    p_parse.add_argument(
        "--format",
        choices=formats,
        default=None,
        help="Output format (default: from config, else json)",
    )
    p_parse.add_argument(
        "--updated-since",
        metavar="DATE",
        type=lambda v: _parse_date(v),
        default=None,
        help="Only conversations updated on/after DATE (YYYY-MM-DD or ISO-8601)",
    )
    p_parse.add_argument(
        "--updated-until",
        metavar="DATE",
        type=lambda v: _parse_date(v, end_of_day=True),
        default=None,
        help="Only conversations updated on/before DATE (inclusive to end of day)",
    )

    # validate
    p_validate = sub.add_parser("validate", help="Validate an export's records")
    add_export_args(p_validate, project_map=True)

    # projects
    p_projects = sub.add_parser("projects", help="List conversations by project")
    add_export_args(p_projects, project_map=True)

    # show
    p_show = sub.add_parser("show", help="Show one conversation by id or share URL")
    add_export_args(p_show, project_map=False)
    p_show.add_argument("conversation", help="Conversation id or share URL")
    p_show.add_argument(
        "--messages", action="store_true", help="Print the ordered messages"
    )

    # apply-map
    p_apply = sub.add_parser(
        "apply-map",
        help="Write the export with project tags synthesized from a map",
    )
    add_export_args(p_apply, project_map=True)
    p_apply.add_argument(
        "--out",
        metavar="PATH",
        help="Output file (default: data/output/conversations-with-projects.json)",
    )

    # config
    p_cfg =sub.add_parser("config", help="View and change settings")
    cfg_sub = p_cfg.add_subparsers(dest="config_command", title="config commands")

    cfg_sub.add_parser("show", help="Show current settings")
    p_cfg_fmt = cfg_sub.add_parser("set-format", help="Set the default output format")
    p_cfg_fmt.add_argument("output_format", choices=formats, help="Output format")
    cfg_sub.add_parser("path", help="Print config file location")

    return parser


# ── Dispatch ────────────────────────────────────────────────────────

_CommandHandler = Callable[[argparse.Namespace], Coroutine[Any, Any, None]]

_COMMAND_MAP: dict[str, _CommandHandler] = {
    "parse": cmd_parse,
    "validate": cmd_validate,
    "projects": cmd_projects,
    "show": cmd_show,
    "apply-map": cmd_apply_map,
}

_CONFIG_MAP: dict[str, _CommandHandler] = {
    "show": cmd_config_show,
    "set-format": cmd_config_set_format,
    "path": cmd_config_path,
}


def main() -> None:
    import logging

    parser = _build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="  %(name)s: %(message)s",
        )

    if not args.command:
        parser.print_help()
        return

    if args.command == "config":
        if not args.config_command:
            parser.parse_args(["config", "--help"])
            return
        handler = _CONFIG_MAP.get(args.config_command)
    else:
        handler = _COMMAND_MAP.get(args.command)

    if handler is None:
        parser.print_help()
        return

    try:
        asyncio.run(handler(args))
    except KeyboardInterrupt:
        print()
    except (
        ExportFormatError,
        ExportNotFoundError,
        ProjectMapFormatError,
        LedgerProcessingError,
    ) as exc:
        out.error(str(exc))
        sys.exit(1)
