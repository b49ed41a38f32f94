"""Search filtering over a record set."""

from __future__ import annotations

from typing import Iterable

from .data_models import User


def filter_users(records: Iterable[User], term: str) -> tuple[User, ...]:
    """
    Return records whose name contains term, ignoring case.

    Parameters
    ----------
    records:
        Record set in display order.
    term:
        Search text. An empty term matches every record.

    Returns
    -------
    tuple[User, ...]
        Matching records in their original order.

    Notes
    -----
    Only ``name`` is matched; username and email are not searched.
    """
    needle = term.casefold()
    if not needle:
        return tuple(records)
    return tuple(user for user in records if needle in user.name.casefold())
