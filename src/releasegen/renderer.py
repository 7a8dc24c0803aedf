"""JSON rendering of the release report."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

from rich.console import Console

from .models import TeamReport

INDENT = 3


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(k): _camel_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camel_keys(v) for v in value]
    return value


def to_dict(report: TeamReport) -> dict[str, Any]:
    return _camel_keys(asdict(report))


def serialize(reports: list[TeamReport]) -> str:
    """Pretty-printed JSON with a trailing newline; HTML is not escaped."""
    payload = [to_dict(r) for r in reports]
    return json.dumps(payload, indent=INDENT, ensure_ascii=False) + "\n"


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation on stderr."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console(stderr=True).print(f"Saved to {output_file}")


def render_json(reports: list[TeamReport], output_file: str | None = None) -> None:
    content = serialize(reports)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")
