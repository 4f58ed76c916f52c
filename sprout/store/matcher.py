# -*- coding: utf-8 -*-
"""Store — conjunctive equality filters."""

from __future__ import annotations

from typing import Any, Collection, Mapping

_MISSING = object()


def _equal(left: Any, right: Any) -> bool:
    # JSON keeps booleans and numbers apart; Python's True == 1 does not.
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def same_identifier(left: Any, right: Any) -> bool:
    """Equality for identifier-valued fields.

    Direct equality first, then the string forms of both sides, so ``42`` and
    ``"42"`` (or a UUID and its text) address the same record.
    """
    if _equal(left, right):
        return True
    if left is None or right is None:
        return False
    return str(left) == str(right)


def matches(
    query: Mapping[str, Any],
    doc: Mapping[str, Any],
    id_fields: Collection[str] = (),
) -> bool:
    """True when every field in ``query`` equals the document's value.

    An empty query matches every document. A field the document lacks never
    matches. Fields named in ``id_fields`` use :func:`same_identifier`.
    """
    for key, expected in query.items():
        actual = doc.get(key, _MISSING)
        if actual is _MISSING:
            return False
        if key in id_fields:
            if not same_identifier(actual, expected):
                return False
        elif not _equal(actual, expected):
            return False
    return True
