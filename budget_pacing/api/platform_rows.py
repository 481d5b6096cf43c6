"""
Normalize platform-native report rows into RawSpendRow.

Platform query clients return rows in their own shapes:
- Google Ads: nested ``metrics``/``segments`` with cost in micros, keys in
  either camelCase or snake_case depending on the client
- Meta insights: flat rows with string amounts and an ``actions`` list
"""

from typing import Any, Dict, Iterable, List

from budget_pacing.models.spend import RawSpendRow

MICROS_PER_UNIT = 1_000_000


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def parse_google_ads_row(row: Dict[str, Any]) -> RawSpendRow:
    """Convert one Google Ads report row."""
    metrics = row.get("metrics") or {}
    segments = row.get("segments") or {}

    cost_micros = metrics.get("costMicros", metrics.get("cost_micros", 0))

    return RawSpendRow(
        date=str(segments.get("date", "")),
        spend=_to_float(cost_micros) / MICROS_PER_UNIT,
        conversions=_to_float(metrics.get("conversions")),
        dimension=(row.get("campaign") or {}).get("name"),
    )


def parse_google_ads_rows(rows: Iterable[Dict[str, Any]]) -> List[RawSpendRow]:
    return [parse_google_ads_row(row) for row in rows]


def parse_meta_insights_row(row: Dict[str, Any]) -> RawSpendRow:
    """
    Convert one Meta insights row.

    Action counts are kept per action type; conversion-like types are summed
    by RawSpendRow.conversion_count.
    """
    actions: Dict[str, float] = {}
    for action in row.get("actions") or []:
        action_type = action.get("action_type")
        if action_type:
            actions[action_type] = actions.get(action_type, 0.0) + _to_float(action.get("value"))

    return RawSpendRow(
        date=str(row.get("date_start", "")),
        spend=_to_float(row.get("spend")),
        dimension=row.get("campaign_name"),
        actions=actions,
    )


def parse_meta_insights_rows(rows: Iterable[Dict[str, Any]]) -> List[RawSpendRow]:
    return [parse_meta_insights_row(row) for row in rows]
