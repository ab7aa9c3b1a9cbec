# utils/helpers.py
from datetime import datetime
import logging
import math
from typing import Union, Optional

from ..constants import CURRENCY_SYMBOL

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def now_iso() -> str:
    """Return the current local timestamp as ISO string (seconds precision)."""
    return datetime.now().isoformat(timespec="seconds")


def round_half_up(x: float) -> int:
    """
    Round to the nearest whole currency unit, halves going up (2.5 -> 3,
    -2.5 -> -2). Python's round() would send 2.5 to 2.
    """
    return int(math.floor(x + 0.5))


def fmt_money(
    v: NumberLike,
    places: int = 0,
    *,
    symbol: bool = True,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators.

    Amounts are whole currency units, so `places` defaults to 0 and the value
    is rounded half-up in that case.

    Behavior on parse failure:
      - By default returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        # Log at debug level to aid troubleshooting without spamming user logs.
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    text = f"{round_half_up(x):,}" if places == 0 else f"{x:,.{places}f}"
    return f"{CURRENCY_SYMBOL}{text}" if symbol else text


def fmt_timestamp(iso: str | None) -> str:
    """'2026-03-01T14:05:09' -> '2026-03-01 14:05'; blanks stay blank."""
    if not iso:
        return ""
    try:
        return datetime.fromisoformat(iso).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return str(iso)
