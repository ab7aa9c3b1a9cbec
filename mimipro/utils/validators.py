# utils/validators.py

import math


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to a finite float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None.
    Blank strings, None, bools, inf and nan all count as failures.
    """
    if x is None or isinstance(x, bool):
        return False, None
    if isinstance(x, str) and not x.strip():
        return False, None
    try:
        val = float(x)
    except (TypeError, ValueError, OverflowError):
        return False, None
    if not math.isfinite(val):
        return False, None
    return True, val


def parse_float(x) -> float:
    """
    Strict parse to float; raises ValueError with a clear message on failure.
    """
    ok, val = try_parse_float(x)
    if not ok:
        raise ValueError(f"Could not parse '{x}' as a number.")
    return val  # type: ignore[return-value]


def parse_whole_number(x) -> int:
    """
    Strict parse to int for piece/carton/note counts.

    Accepts ints, integral floats (3.0) and numeric strings ("3").
    Raises ValueError for fractions, inf/nan and anything unparseable.
    """
    val = parse_float(x)
    if val != int(val):
        raise ValueError(f"'{x}' is not a whole number.")
    return int(val)


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)
