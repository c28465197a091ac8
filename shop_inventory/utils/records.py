# shop_inventory/utils/records.py
from typing import Any, Dict, Iterable, Iterator, Union


def next_id(rows: Iterable[Union[Dict[str, Any], Any]]) -> int:
    """Next id for a table: ``max(existing ids) + 1``, or 1 when empty.

    Args:
        rows: Table rows, either dicts or records with an ``id`` attribute

    Returns:
        Next integer id
    """
    ids = [int(row['id'] if isinstance(row, dict) else row.id) for row in rows]
    return max(ids) + 1 if ids else 1


def id_sequence(rows: Iterable[Union[Dict[str, Any], Any]]) -> Iterator[int]:
    """Strictly increasing ids starting after the current maximum."""
    current = next_id(rows)
    while True:
        yield current
        current += 1
