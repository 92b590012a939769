"""Field-level formatting shared by every report."""

from datetime import datetime, timezone
from typing import Any, Iterable, Sequence


def present(value: Any) -> bool:
    return value is not None and value != ""


def display(value: Any) -> str:
    if not present(value):
        return "N/A"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def format_duration(seconds: Any) -> str | None:
    """Render a total-seconds count as "<minutes>m <seconds>s"."""
    if not present(seconds):
        return None
    try:
        total = int(seconds)
    except (TypeError, ValueError):
        return str(seconds)
    return f"{total // 60}m {total % 60}s"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"not a timestamp: {value!r}")
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_local_time(value: Any) -> str | None:
    """Locale-aware local date and time, or the raw value if it does not parse."""
    if not present(value):
        return None
    try:
        moment = _parse_timestamp(value)
    except (ValueError, OverflowError, OSError):
        return str(value)
    return moment.astimezone().strftime("%c")


def format_iso_timestamp(epoch_seconds: int) -> str:
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def format_iso_date(epoch_seconds: int) -> str:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).strftime("%Y-%m-%d")


def heading(text: str, level: int, markdown: bool) -> str:
    return f"{'#' * level} {text}" if markdown else text


def section(text: str, level: int, markdown: bool) -> str:
    """A named section; plain text renders it as a label."""
    return f"{'#' * level} {text}" if markdown else f"{text}:"


def field_line(label: str, value: Any, markdown: bool) -> str:
    if markdown:
        return f"- **{label}**: {display(value)}"
    return f"{label}: {display(value)}"


def fields(pairs: Iterable[tuple[str, Any]], markdown: bool) -> list[str]:
    """One field line per pair that carries a value; missing values get no line."""
    return [field_line(label, value, markdown) for label, value in pairs if present(value)]


def inline_fields(pairs: Iterable[tuple[str, Any]], bold: bool = False) -> str:
    """Pairs with a value joined on one line, empty when none has one."""
    template = "**{}**: {}" if bold else "{}: {}"
    return ", ".join(template.format(label, display(value)) for label, value in pairs if present(value))


def code(value: Any, markdown: bool) -> str | None:
    if not present(value):
        return None
    return f"`{value}`" if markdown else str(value)


def link(url: Any, markdown: bool) -> str | None:
    if not present(url):
        return None
    return f"[{url}]({url})" if markdown else str(url)


def name_and_slug(name: Any, slug: Any) -> str | None:
    """Name (slug), or whichever half is known."""
    if present(name) and present(slug):
        return f"{name} ({slug})"
    if present(name):
        return str(name)
    return str(slug) if present(slug) else None


def list_field(label: str, items: Sequence[Any], markdown: bool) -> list[str]:
    """A label followed by one indented line per item; nothing when items is empty."""
    if not items:
        return []
    if markdown:
        return [f"- **{label}**:"] + [f"  - {item}" for item in items]
    return [f"{label}:"] + [f"  {item}" for item in items]


def _cell(value: Any) -> str:
    return display(value).replace("|", "\\|").replace("\n", " ")


def markdown_table(headers: Sequence[str], rows: Iterable[Sequence[Any]], align_left: bool = False) -> list[str]:
    lines = ["| " + " | ".join(headers) + " |"]
    if align_left:
        lines.append("|" + "|".join(":" + "-" * (len(h) + 1) for h in headers) + "|")
    else:
        lines.append("|" + "|".join("-" * (len(h) + 2) for h in headers) + "|")
    lines.extend("| " + " | ".join(_cell(c) for c in row) + " |" for row in rows)
    return lines


def plain_rows(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> list[str]:
    """Tabular data as one "Label: value, Label: value" line per row."""
    return [", ".join(f"{h}: {display(c)}" for h, c in zip(headers, row)) for row in rows]


def table(headers: Sequence[str], rows: Iterable[Sequence[Any]], markdown: bool, align_left: bool = False) -> list[str]:
    if markdown:
        return markdown_table(headers, rows, align_left=align_left)
    return plain_rows(headers, rows)


def key_value_table(pairs: Iterable[tuple[Any, Any]], markdown: bool) -> list[str]:
    """Tag-style pairs as a Key/Value table, or "key: value" lines in plain text."""
    if markdown:
        return markdown_table(("Key", "Value"), pairs)
    return [f"{key}: {display(value)}" for key, value in pairs]


def stats_table(points: Sequence[tuple[int, Any]], markdown: bool, daily: bool = False) -> list[str]:
    """Time-series [epoch_seconds, count] pairs as a two-column table."""
    fmt = format_iso_date if daily else format_iso_timestamp
    rows = [(fmt(timestamp), count) for timestamp, count in points]
    if markdown:
        return markdown_table(("Date" if daily else "Timestamp", "Count"), rows)
    return [f"{when}: {display(count)}" for when, count in rows]
