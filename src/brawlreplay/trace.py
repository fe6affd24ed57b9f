from __future__ import annotations

import datetime as dt
from pathlib import Path


def _format_value(value: object) -> str:
    text = str(value)
    return text.replace("\n", "\\n")


def _format_fields(fields: dict[str, object]) -> str:
    parts: list[str] = []
    for key in sorted(fields):
        parts.append(f"{key}={_format_value(fields[key])}")
    return " ".join(parts)


class DecodeTrace:
    """Append-only event log for one decode.

    Each line is `<utc timestamp> event=<name> key=value ...` with keys sorted.
    A trace belongs to the decode it was handed to and is never shared.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, **fields: object) -> None:
        timestamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
        payload = _format_fields(fields)
        line = f"{timestamp} event={str(event).strip()}"
        if payload:
            line += f" {payload}"
        line += "\n"
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(line)
