import sys
from datetime import datetime, timezone
from typing import Any

from clickhub.services.logger.interface import LEVELS, LoggingInterface

_ANSI = dict(zip(LEVELS, ("\033[36m", "\033[32m", "\033[33m", "\033[31m")))
_RESET = "\033[0m"


def format_context(ctx: dict[str, Any]) -> str:
    return " ".join(f"{key}={value!r}" for key, value in ctx.items())


class PrettyLogger(LoggingInterface):
    """One line per record on stderr: ``HH:MM:SS [LEVEL] message key=value ...``.

    Colour is used only when stderr is a terminal.
    """

    def log(self, level: str, msg: str, ctx: dict[str, Any]) -> None:
        stream = sys.stderr
        stamp = datetime.now(timezone.utc).strftime("%H:%M:%S")
        tag = f"[{level}]"
        if stream.isatty():
            tag = f"{_ANSI.get(level, '')}{tag}{_RESET}"
        line = f"{stamp} {tag} {msg}"
        if ctx:
            line = f"{line}  {format_context(ctx)}"
        print(line, file=stream)
