from __future__ import annotations

import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Iterable

from clickhub.bootstrap import build_container
from clickhub.clicks.click_service import CLICK_TOPIC, DEFAULT_PAGE_SIZE, ClickService
from clickhub.clicks.finance_service import FinanceService
from clickhub.clicks.model import parse_date
from clickhub.clicks.process_click_job import ClickWorker, WorkReport
from clickhub.clicks.webhook_service import SECRET_KEY, WebhookService
from clickhub.config.context import CommandArgs
from clickhub.config.env_loader import load_env_file
from clickhub.container import Container, ContainerError
from clickhub.services.database.interface import DatabaseInterface
from clickhub.services.logger.interface import LoggingInterface
from clickhub.services.message_queue.interface import MessageQueueInterface

USAGE = (
    "Usage: python -m clickhub <ingest|forward|report|summary|status|sign> "
    "[flags] [command args]"
)

_SIGNED_INPUT = [
    {"name": "file", "description": "Webhook body to load first (JSON)"},
    {"name": "signature", "description": "sha256=<hex> signature of --file"},
]

_DATE_RANGE = [
    {"name": "start-date", "description": "First day (YYYY-MM-DD)", "required": True},
    {"name": "end-date", "description": "Last day (YYYY-MM-DD)", "required": True},
]

COMMANDS: dict[str, dict[str, Any]] = {
    "ingest": {
        "description": (
            "Verify a signed webhook body (one click, a JSON array, or "
            '{"clicks": [...]}), queue the clicks and store them.'
        ),
        "args": [
            {"name": "file", "description": "Path to the webhook body", "required": True},
            {
                "name": "signature",
                "description": "sha256=<hex> signature of the body",
                "required": True,
            },
            {
                "name": "forward",
                "description": "Forward each stored day to the finance service",
                "type": "boolean",
                "default": False,
            },
        ],
    },
    "forward": {
        "description": "Forward one day's clicks to the finance service.",
        "args": [
            {
                "name": "date",
                "description": "Day to forward (YYYY-MM-DD, not in the future)",
                "required": True,
            },
            *_SIGNED_INPUT,
        ],
    },
    "report": {
        "description": "Clicks aggregated by offer, source and day, one page at a time.",
        "args": [
            *_DATE_RANGE,
            {"name": "offer-id", "description": "Only this offer", "type": "integer"},
            {"name": "source", "description": "Only this traffic source"},
            {
                "name": "sort-by",
                "description": "clicks_count, offer_id, source or date",
                "default": "clicks_count",
            },
            {"name": "sort-direction", "description": "asc or desc", "default": "desc"},
            {"name": "page", "description": "Page number", "type": "integer", "default": 1},
            {
                "name": "limit",
                "description": "Rows per page (1-1000)",
                "type": "integer",
                "default": DEFAULT_PAGE_SIZE,
            },
            *_SIGNED_INPUT,
        ],
    },
    "summary": {
        "description": "Click totals and distinct offers/sources for a date range.",
        "args": [*_DATE_RANGE, *_SIGNED_INPUT],
    },
    "status": {
        "description": "Finance reachability, storage health and export readiness for a day.",
        "args": [
            {"name": "date", "description": "Day to check (YYYY-MM-DD)", "required": True},
            *_SIGNED_INPUT,
        ],
    },
    "sign": {
        "description": "Print the webhook signature of a file using WEBHOOK_SECRET.",
        "args": [
            {"name": "file", "description": "Path to the body to sign", "required": True},
        ],
    },
}

GLOBAL_FLAGS = {
    "log": "Logging format: pretty, memory [default: pretty]",
    "env": "JSON object of environment overrides",
    "env-file": "Environment file name (.env/<name>.env) or path",
}

_TRUTHY = frozenset({"true", "1", "yes", "on"})


def _flag_pairs(tokens: list[str]) -> Iterable[tuple[str, str]]:
    """``--name value`` pairs; a flag followed by another flag (or nothing) reads as "true"."""
    pending: str | None = None
    for token in tokens:
        if token.startswith("--"):
            if pending is not None:
                yield pending, "true"
            pending = token[2:]
        elif pending is not None:
            yield pending, token
            pending = None
    if pending is not None:
        yield pending, "true"


def _cast(spec: dict[str, Any], raw: str) -> Any:
    kind = spec.get("type")
    if kind == "boolean":
        return raw.lower() in _TRUTHY
    if kind == "integer":
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"--{spec['name']} must be an integer, got {raw!r}") from None
    return raw


def parse_command_args(descriptor: dict[str, Any], raw_args: list[str]) -> dict[str, Any]:
    """Match raw ``--flag value`` tokens against a command's declared arguments."""
    given = dict(_flag_pairs(raw_args))
    result: dict[str, Any] = {}
    missing: list[str] = []
    for spec in descriptor.get("args", []):
        name = spec["name"]
        if name in given:
            result[name] = _cast(spec, given[name])
        elif "default" in spec:
            result[name] = spec["default"]
        elif spec.get("required"):
            missing.append(f"Missing required argument: --{name}")
    if missing:
        raise ValueError("; ".join(missing))
    return result


def _env_overrides(raw: str) -> dict[str, str]:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("--env value must be a JSON object")
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
        raise ValueError("--env JSON must have string keys and string values")
    return data


def extract_global_flags(
    remaining: list[str],
) -> tuple[str | None, dict[str, str], list[str]]:
    """Split global flags from command args.

    Returns (log_impl, env_overrides, command_args). Values from --env win
    over values loaded with --env-file.
    """
    found: dict[str, str] = {}
    inline: dict[str, str] = {}
    rest: list[str] = []
    tokens = iter(remaining)
    for token in tokens:
        name = token[2:] if token.startswith("--") else None
        if name not in GLOBAL_FLAGS:
            rest.append(token)
            continue
        value = next(tokens, None)
        if value is None:
            rest.append(token)
            break
        if name == "env":
            inline.update(_env_overrides(value))
        else:
            found[name] = value

    env_overrides = load_env_file(found["env-file"]) if "env-file" in found else {}
    env_overrides.update(inline)
    return found.get("log"), env_overrides, rest


def print_command_help(name: str, descriptor: dict[str, Any]) -> None:
    print(f"\nclickhub {name}: {descriptor['description']}\n")
    print("Arguments:")
    for spec in descriptor.get("args", []):
        notes = []
        if spec.get("required"):
            notes.append("required")
        if "default" in spec:
            notes.append(f"default: {spec['default']}")
        suffix = f" ({', '.join(notes)})" if notes else ""
        print(f"  --{spec['name']:<18} {spec['description']}{suffix}")
    print("\nGlobal flags:")
    for flag, description in GLOBAL_FLAGS.items():
        print(f"  --{flag:<18} {description}")


def _print_json(data: dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, default=str))


def _read_body(raw_path: str) -> bytes:
    path = Path(raw_path)
    if not path.exists():
        raise FileNotFoundError(f"click file not found: {path}")
    return path.read_bytes()


def _clicks_in(body: bytes) -> list[Any]:
    """A single click object, a JSON array of clicks, or a ``{"clicks": [...]}`` batch."""
    payload = json.loads(body)
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if "clicks" not in payload:
            return [payload]
        if isinstance(payload["clicks"], list):
            return payload["clicks"]
        raise ValueError("Invalid batch payload structure")
    raise ValueError("Webhook body must be a JSON object or array")


def _load_signed(
    container: Container, raw_path: str, signature: str | None
) -> tuple[int, int, WorkReport]:
    """Verify, validate, queue and store the clicks in a webhook body.

    Returns (accepted, total, worker report).
    """
    body = _read_body(raw_path)
    webhooks = container.make(WebhookService)
    if webhooks.configured_secret() is None:
        raise ValueError(f"Server configuration error: {SECRET_KEY} is not set")
    if not webhooks.verify_signature(body, signature):
        raise ValueError("Invalid signature")

    clicks = _clicks_in(body)
    service = container.make(ClickService)
    accepted = 0
    for click in clicks:
        if not isinstance(click, dict) or not webhooks.validate_payload(click):
            continue
        if service.process_click(click):
            accepted += 1
    return accepted, len(clicks), container.make(ClickWorker).work()


def _load_optional(container: Container, args: CommandArgs) -> None:
    if args.get("file") is None:
        return
    accepted, total, report = _load_signed(container, args.get("file"), args.get("signature"))
    container.make(LoggingInterface).info(
        "Loaded clicks", accepted=accepted, total=total, stored=report.stored
    )


def _finance_available(container: Container, finance: FinanceService) -> bool:
    if asyncio.run(finance.test_connection()):
        return True
    print("Error: Finance service is not available", file=sys.stderr)
    container.make(LoggingInterface).error("Finance service is not available", url=finance.base_url)
    return False


def _past_or_today(raw: str) -> date:
    day = parse_date(raw)
    if day > date.today():
        raise ValueError(f"--date must not be in the future, got {day.isoformat()}")
    return day


def _ingest(container: Container, args: CommandArgs) -> int:
    accepted, total, report = _load_signed(container, args.get("file"), args.get("signature"))
    print(
        f"accepted={accepted} rejected={total - accepted} "
        f"stored={report.stored} duplicates={report.duplicates} failed={report.failed}"
    )

    if args.get("forward"):
        service = container.make(ClickService)
        days = sorted({click.timestamp.date() for click in service.repository.all()})
        finance = container.make(FinanceService)
        if days and not _finance_available(container, finance):
            return 1
        results = [asyncio.run(finance.forward_clicks_for_date(day)) for day in days]
        if not all(results):
            return 1
    return 1 if report.failed else 0


def _forward(container: Container, args: CommandArgs) -> int:
    day = _past_or_today(args.get("date"))
    _load_optional(container, args)
    finance = container.make(FinanceService)
    if not _finance_available(container, finance):
        return 1
    if not asyncio.run(finance.forward_clicks_for_date(day)):
        print("Error: Failed to forward clicks data", file=sys.stderr)
        return 1
    _print_json(
        {
            "status": "success",
            "message": "Clicks data successfully forwarded to Finance service",
            "date": day.isoformat(),
        }
    )
    return 0


def _report(container: Container, args: CommandArgs) -> int:
    _load_optional(container, args)
    filters = {"offer_id": args.get("offer-id"), "source": args.get("source")}
    report = container.make(ClickService).aggregated_report(
        args.get("start-date"),
        args.get("end-date"),
        {k: v for k, v in filters.items() if v is not None},
        sort_by=args.get("sort-by"),
        direction=args.get("sort-direction"),
        page=args.get("page"),
        limit=args.get("limit"),
    )
    _print_json({"status": "success", **report})
    return 0


def _summary(container: Container, args: CommandArgs) -> int:
    _load_optional(container, args)
    summary = container.make(ClickService).summary(args.get("start-date"), args.get("end-date"))
    _print_json({"status": "success", "summary": summary})
    return 0


def _status(container: Container, args: CommandArgs) -> int:
    day = parse_date(args.get("date"))
    _load_optional(container, args)
    finance = container.make(FinanceService)
    available = asyncio.run(finance.test_connection())
    has_clicks = bool(finance.repository.for_date(day))
    _print_json(
        {
            "status": "success",
            "data": {
                "date": day.isoformat(),
                "finance_service_available": available,
                "export_ready": available and has_clicks,
                "database_healthy": container.make(DatabaseInterface).health_check(),
                "pending_clicks": container.make(MessageQueueInterface).pending(CLICK_TOPIC),
            },
        }
    )
    return 0


def _sign(container: Container, args: CommandArgs) -> int:
    body = _read_body(args.get("file"))
    webhooks = container.make(WebhookService)
    secret = webhooks.configured_secret()
    if secret is None:
        raise ValueError(f"Server configuration error: {SECRET_KEY} is not set")
    print(webhooks.sign(body, secret))
    return 0


_HANDLERS = {
    "ingest": _ingest,
    "forward": _forward,
    "report": _report,
    "summary": _summary,
    "status": _status,
    "sign": _sign,
}


def run_command(argv: list[str]) -> tuple[int, Container | None]:
    """Testable entry point: parses args, builds the container, runs the command."""
    if not argv:
        raise ValueError(USAGE)

    name, remaining = argv[0], argv[1:]
    descriptor = COMMANDS.get(name)
    if descriptor is None:
        raise ValueError(f"Unknown command '{name}' (available: {', '.join(COMMANDS)})")

    if "--help" in remaining or "-h" in remaining:
        print_command_help(name, descriptor)
        return (0, None)

    log_impl, env_overrides, command_args = extract_global_flags(remaining)
    args = CommandArgs(parse_command_args(descriptor, command_args))

    container = build_container(env_overrides, log_impl=log_impl)
    container.instance(CommandArgs, args)
    return (_HANDLERS[name](container, args), container)


def run_cli(argv: list[str] | None = None) -> None:
    args = argv if argv is not None else sys.argv[1:]
    try:
        exit_code, _ = run_command(args)
        sys.exit(exit_code)
    except (ValueError, FileNotFoundError, ContainerError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
