"""
Ad account insights.

Formatting follows one policy for every request:

- breakdown dimensions are detected from the keys of the first row;
- if ``date_start`` is among them, rows are grouped by date (rows sharing a
  date are aggregated when there is no other dimension, listed one per line
  otherwise);
- any other breakdown lists each row with its dimensions and metrics;
- without breakdowns the first row's metrics and action list are shown.

The raw API response is always appended as JSON.
"""

from __future__ import annotations

import json
from collections import defaultdict
from typing import Any, Iterable, Optional

from ads_bridge.graph_api import GraphAPIClient
from ads_bridge.types import ToolResult, text_result

from ._validation import InsightsArgs, validate_args

__all__ = [
    "BREAKDOWN_FIELDS",
    "get_adaccount_insights",
    "detect_breakdown_fields",
    "format_row_metrics",
    "aggregate_metrics",
    "conversion_summary",
    "format_insights",
]

BREAKDOWN_FIELDS: tuple[str, ...] = (
    "date_start",
    "date_stop",
    "placement",
    "age",
    "gender",
    "country",
    "region",
    "device_platform",
    "publisher_platform",
    "platform_position",
    "impression_device",
    "product_id",
    "dma",
)

_TIME_FIELDS = ("date_start", "date_stop")

Row = dict[str, Any]


async def get_adaccount_insights(graph: GraphAPIClient, args: dict[str, Any]) -> ToolResult:
    params = validate_args(InsightsArgs, args)

    fields = list(params.fields)
    if "actions" in fields and "conversions" not in fields:
        fields.append("conversions")

    query = params.model_dump(exclude={"act_id", "fields", "level"})
    query["fields"] = fields
    query["level"] = params.level or "account"

    data = await graph.get(f"/{params.act_id}/insights", query)

    rows = data.get("data") if isinstance(data, dict) else None
    if rows:
        text = format_insights(rows)
    else:
        text = "No insights data found."

    raw = json.dumps(data, indent=2, ensure_ascii=False)
    return text_result(f"{text}\n\n**Raw API Response:**\n```json\n{raw}\n```")


# ---------------------------------------------------------------------- formatting


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _display(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def detect_breakdown_fields(rows: list[Row]) -> list[str]:
    if not rows:
        return []
    first = rows[0]
    return [field for field in BREAKDOWN_FIELDS if field in first]


def format_row_metrics(row: Optional[Row], indent: str = "") -> str:
    if not row:
        return ""

    lines = []
    if row.get("spend") is not None:
        lines.append(f"Spend: ${_number(row['spend']):.2f}")
    if row.get("impressions") is not None:
        lines.append(f"Impressions: {int(_number(row['impressions'])):,}")
    if row.get("clicks") is not None:
        lines.append(f"Clicks: {int(_number(row['clicks'])):,}")
    if row.get("ctr") is not None:
        lines.append(f"CTR: {_number(row['ctr']):.2f}%")
    if row.get("cpc") is not None:
        lines.append(f"CPC: ${_number(row['cpc']):.2f}")
    if row.get("cpm") is not None:
        lines.append(f"CPM: ${_number(row['cpm']):.2f}")

    return "".join(f"{indent}{line}\n" for line in lines)


def aggregate_metrics(rows: Iterable[Row]) -> Row:
    """Sum spend, impressions and clicks; derive CTR, CPM and CPC from the sums."""
    aggregated: Row = {
        "spend": 0.0,
        "impressions": 0,
        "clicks": 0,
        "actions": [],
        "conversions": [],
    }
    for row in rows:
        aggregated["spend"] += _number(row.get("spend"))
        aggregated["impressions"] += int(_number(row.get("impressions")))
        aggregated["clicks"] += int(_number(row.get("clicks")))
        aggregated["actions"].extend(row.get("actions") or [])
        aggregated["conversions"].extend(row.get("conversions") or [])

    if aggregated["impressions"] > 0:
        aggregated["ctr"] = aggregated["clicks"] / aggregated["impressions"] * 100
        aggregated["cpm"] = aggregated["spend"] / aggregated["impressions"] * 1000
    if aggregated["clicks"] > 0:
        aggregated["cpc"] = aggregated["spend"] / aggregated["clicks"]

    return aggregated


def conversion_summary(rows: Iterable[Row]) -> Optional[str]:
    """
    ``"type: count, ..."`` over *rows*, or None when nothing converted.

    ``conversions`` entries win; an ``actions`` entry only counts for action
    types that never appear among the conversions.
    """
    rows = list(rows)
    counts: dict[str, float] = {}

    for row in rows:
        for entry in row.get("conversions") or []:
            if isinstance(entry, dict) and entry.get("action_type"):
                action_type = entry["action_type"]
                counts[action_type] = counts.get(action_type, 0.0) + _number(entry.get("value"))

    converted = set(counts)
    for row in rows:
        for entry in row.get("actions") or []:
            if isinstance(entry, dict) and entry.get("action_type"):
                action_type = entry["action_type"]
                if action_type not in converted:
                    counts[action_type] = counts.get(action_type, 0.0) + _number(entry.get("value"))

    positive = [(action_type, count) for action_type, count in counts.items() if count > 0]
    if not positive:
        return None
    return ", ".join(f"{action_type}: {_display(count)}" for action_type, count in positive)


def format_insights(rows: list[Row]) -> str:
    dimensions = detect_breakdown_fields(rows)
    if not dimensions:
        return _format_simple(rows)

    text = "**Performance Data with Breakdowns:**\n\n"
    text += f"**Breakdown Dimensions:** {', '.join(dimensions)}\n\n"
    if "date_start" in dimensions:
        return text + _format_by_date(rows, dimensions)
    return text + _format_per_row(rows, dimensions)


def _date_header(date: str, rows: list[Row]) -> str:
    date_stop = rows[0].get("date_stop")
    if date_stop is None or date == date_stop:
        return f"**{date}:**\n"
    return f"**{date} to {date_stop}:**\n"


def _format_by_date(rows: list[Row], dimensions: list[str]) -> str:
    other = [field for field in dimensions if field not in _TIME_FIELDS]

    groups: dict[str, list[Row]] = defaultdict(list)
    for row in rows:
        groups[str(row.get("date_start"))].append(row)
    dates = sorted(groups)

    if other:
        text = f"**Daily Performance by {' x '.join(other)}:**\n\n"
    else:
        text = "**Daily Performance Breakdown:**\n\n"
        if len(dates) == 1 and rows[0].get("date_start") != rows[0].get("date_stop"):
            text += (
                "Note: data appears to be aggregated over the entire date range rather "
                "than broken down daily. Pass time_increment=1 for daily rows.\n\n"
            )

    for date in dates:
        day_rows = groups[date]
        text += _date_header(date, day_rows)

        if other:
            for row in day_rows:
                labels = ", ".join(f"{field}: {row.get(field)}" for field in other)
                metrics = ", ".join(format_row_metrics(row).splitlines())
                text += f"  {labels} - {metrics}\n"
                summary = conversion_summary([row])
                if summary:
                    text += f"    Conversions: {summary}\n"
        else:
            merged = day_rows[0] if len(day_rows) == 1 else aggregate_metrics(day_rows)
            text += format_row_metrics(merged, "  ")
            summary = conversion_summary(day_rows)
            if summary:
                text += f"  **Conversions:** {summary}\n"
        text += "\n"

    return text


def _format_per_row(rows: list[Row], dimensions: list[str]) -> str:
    text = "**Custom Breakdown Results:**\n\n"
    for index, row in enumerate(rows, start=1):
        text += f"**Row {index}:**\n"
        for field in dimensions:
            if field in row:
                text += f"  {field}: {row[field]}\n"
        text += format_row_metrics(row, "  ")
        summary = conversion_summary([row])
        if summary:
            text += f"  **Conversions:** {summary}\n"
        text += "\n"
    return text


def _format_simple(rows: list[Row]) -> str:
    text = "**Account Performance:**\n\n"
    if not rows:
        return text + "No data available.\n"

    first = rows[0]
    text += format_row_metrics(first)

    actions = first.get("actions")
    if isinstance(actions, list):
        text += "\n**Conversion Events:**\n"
        for action in actions:
            if isinstance(action, dict):
                text += f"- {action.get('action_type')}: {action.get('value')}\n"

    return text
