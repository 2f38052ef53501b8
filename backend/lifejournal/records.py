# lifejournal/records.py
import logging
from typing import Any, Iterable, Mapping

from .crypto import unseal
from .errors import UNREADABLE_ERRORS

logger = logging.getLogger(__name__)


def unseal_rows(
    rows: Iterable[Mapping[str, Any]],
    column: str,
    master_key: bytes,
    skip_unreadable: bool = False,
) -> list[tuple[Mapping[str, Any], Any]]:
    """
    Unseal one encrypted column across a batch of DB rows.

    Returns (row, value) pairs in input order. A row that cannot be read is
    logged and either paired with None or dropped when `skip_unreadable`.
    ConfigurationError and caller bugs are not caught.
    """
    out: list[tuple[Mapping[str, Any], Any]] = []
    for row in rows:
        try:
            value = unseal(row[column], master_key)
        except UNREADABLE_ERRORS as e:
            # Only the id and error class; never key, nonce or plaintext
            logger.warning("Unreadable %s in record %s: %s", column, row.get("id"), type(e).__name__)
            if skip_unreadable:
                continue
            value = None
        out.append((row, value))
    return out


__all__ = ["unseal_rows"]
