"""
Helpers for aggregate query results.

select(func.count()) comes back as a bare int from session.exec(...).one() on
SQLModel, but as a 1-tuple Row when executed through plain SQLAlchemy.
"""

from typing import Any


def scalar_int(value: Any) -> int:
    """Coerce a COUNT result (int, or 1-tuple/Row) to int; None counts as 0."""
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(value[0])
