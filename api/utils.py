"""Utility functions for API route handlers."""

from typing import Any, Sequence


def apply_pagination(
    items: Sequence[Any],
    limit: int | None = None,
    offset: int = 0,
) -> tuple[list[Any], int, int]:
    """Apply pagination to a sequence of items.

    Args:
        items: The full sequence of items to paginate.
        limit: Maximum number of items to return (None = all).
        offset: Number of items to skip.

    Returns:
        Tuple of (paginated_items, total_count, returned_count).
    """
    total_count = len(items)

    if limit is not None:
        paginated = list(items[offset : offset + limit])
    else:
        paginated = list(items[offset:])

    return paginated, total_count, len(paginated)
