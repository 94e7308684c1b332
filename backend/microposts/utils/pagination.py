"""
Microposts Backend - Pagination Calculator
============================================

What:  Turns (page, per_page, total_records) into a PageDescriptor.
How:   Pure arithmetic. No clamping: an out-of-range page passes through
       unchanged and simply gets a prev_page and no next_page. Validating
       the requested page is the caller's job.

Examples:
    paginate(1, 10, 50) → total_pages=5, prev_page=None, next_page=2
    paginate(5, 10, 50) → total_pages=5, prev_page=4,    next_page=None
    paginate(1, 10, 0)  → total_pages=0, prev_page=None, next_page=None
"""

import math

from microposts.schemas.micropost import PageDescriptor


def total_pages_for(per_page: int, total_records: int) -> int:
    """ceil(total / per_page); zero records means zero pages."""
    if total_records <= 0:
        return 0
    return math.ceil(total_records / per_page)


def paginate(page: int, per_page: int, total_records: int) -> PageDescriptor:
    """Build the page descriptor for `page` of a result set of `total_records` rows."""
    total_pages = total_pages_for(per_page, total_records)
    return PageDescriptor(
        page=page,
        per_page=per_page,
        total_records=total_records,
        total_pages=total_pages,
        prev_page=page - 1 if page > 1 else None,
        next_page=page + 1 if page < total_pages else None,
    )


def page_offset(page: int, per_page: int) -> int:
    """Rows to skip before `page`; pages below 1 read from the start."""
    return max(page - 1, 0) * per_page
