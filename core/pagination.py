"""
Pagination — Page/total-count pagination over the identity API.

The Management API list endpoints accept page and per_page and, with
include_totals=true, report the overall match count on every response:

    {"users": [...], "total": 150, "start": 0, "limit": 100, "length": 100}

fetch_all_pages() keeps requesting pages until the pages fetched cover the
reported total. Page 0 is always requested, so an empty result set costs one
call. An empty page also stops the loop.
"""

from typing import Any, Callable, Dict, List

DEFAULT_PAGE_SIZE = 100


def fetch_all_pages(
    fetch_page: Callable[[int, int], Dict[str, Any]],
    per_page: int = DEFAULT_PAGE_SIZE,
    items_key: str = "users",
) -> List[Dict[str, Any]]:
    """Fetch every page and concatenate the records in provider order.

    Args:
        fetch_page: Called as fetch_page(page, per_page); returns the decoded
                    response body containing items_key and "total".
        per_page: Page size.
        items_key: Response key holding the page's records.

    Returns:
        All records from all pages. No deduplication is performed.
    """
    if per_page <= 0:
        raise ValueError(f"per_page must be positive, got {per_page}")

    records = []
    page = 0
    total = 0

    while True:
        body = fetch_page(page, per_page)
        items = body.get(items_key) or []
        total = int(body.get("total") or 0)
        records.extend(items)
        page += 1

        if not items or page * per_page >= total:
            break

    return records
