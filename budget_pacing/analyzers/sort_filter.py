"""Sort and filter the account list by pacing metrics for presentation."""

from typing import List, Optional, Tuple

from budget_pacing.models.spend import AccountConfig, PacingRecord, PacingStatus

SORT_KEYS = ("budget", "spent", "pacing_ratio")
STATUS_FILTERS = ("all",) + tuple(status.value for status in PacingStatus)

AccountPacing = Tuple[AccountConfig, Optional[PacingRecord]]


def filter_and_sort(
    pairs: List[AccountPacing],
    status: str = "all",
    sort_by: str = "budget",
    descending: bool = True
) -> List[AccountPacing]:
    """
    Filter by exact status, then sort by a numeric pacing metric.

    Accounts without a pacing record always go last, whatever the direction.

    Args:
        pairs: (AccountConfig, PacingRecord) pairs
        status: "all" or a PacingStatus value
        sort_by: "budget", "spent" or "pacing_ratio"
        descending: Sort direction

    Returns:
        New filtered and sorted list

    Raises:
        ValueError: If status or sort_by is unknown
    """
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status}")
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")

    if status == "all":
        selected = list(pairs)
    else:
        selected = [
            (account, record) for account, record in pairs
            if record is not None and record.status.value == status
        ]

    with_record = [pair for pair in selected if pair[1] is not None]
    without_record = [pair for pair in selected if pair[1] is None]

    with_record.sort(key=lambda pair: getattr(pair[1], sort_by), reverse=descending)

    return with_record + without_record
