"""
Pennant literal grammars (text <-> python values).

Scope
- The exact textual forms accepted on the command line for every built-in
  value kind, and the canonical forms they render back to.
- Every parser raises CoercionError with a short, stable message; the registry
  wraps it with the offending flag and token before anyone sees it.

Grammars
- booleans:  1 t T TRUE true True / 0 f F FALSE false False (nothing else).
- integers:  optional sign (signed kinds only), then decimal, 0x/0X hex, or
             leading-zero octal. Range-checked against the kind's bit width.
- floats:    decimal or scientific notation, inf/infinity/nan (any case).
- durations: optional sign, then one or more <number><unit> pairs where unit is
             one of ns, us, µs, μs, ms, s, m, h ("1h30m", "1.5s", "-2m3.5s").
             A bare "0" is accepted without a unit.

Rendering
- render_float: shortest round-trip digits, %g-style exponent switch
  (exponent < -4 or >= 6), e.g. 3.0 -> "3", 1e6 -> "1e+06".
- render_duration: largest-unit-first, e.g. 1h30m0s, 2.5s, 1.5ms, 0s.
"""
import decimal
import json
import math
import re
from datetime import timedelta
from fractions import Fraction

from .faults import CoercionError

_BOOLEANS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}

_INTEGER = re.compile(r"(?P<sign>[+-]?)(?:0[xX](?P<hexadecimal>[0-9a-fA-F]+)|(?P<octal>0[0-7]*)|(?P<decimal>[1-9][0-9]*))")

_FLOAT = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE)

_SEGMENT = re.compile(r"(?P<number>[0-9]*(?:\.[0-9]*)?)(?P<unit>[^0-9.]*)")

# nanoseconds per unit
_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_SECOND = 1_000_000_000


def quote(text, /):
    """
    Double-quote a string with backslash escapes, e.g. quote('a"b') -> '"a\\"b"'.

    Used for every user-supplied text echoed in a message so that empty strings
    and whitespace stay visible.
    """
    return json.dumps(text, ensure_ascii=False)


def parse_bool(text, /):
    try:
        return _BOOLEANS[text]
    except KeyError:
        raise CoercionError("parsing %s: invalid syntax" % quote(text)) from None


def parse_integer(text, /, *, signed=True, bits=64):
    """
    Parse an integer literal with base auto-detection.

    Unsigned kinds reject any sign through the same syntax failure as any other
    malformed input; there is no dedicated "negative" message.

    Raises
    - CoercionError: 'parsing "<text>": invalid syntax' or 'parsing "<text>": value out of range'.
    """
    match = _INTEGER.fullmatch(text)
    if not match or (match["sign"] and not signed):
        raise CoercionError("parsing %s: invalid syntax" % quote(text))

    if match["hexadecimal"] is not None:
        number = int(match["hexadecimal"], 16)
    elif match["octal"] is not None:
        number = int(match["octal"], 8)
    else:
        number = int(match["decimal"], 10)

    if match["sign"] == "-":
        number = -number

    if signed:
        lower, upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        lower, upper = 0, (1 << bits) - 1
    if not lower <= number <= upper:
        raise CoercionError("parsing %s: value out of range" % quote(text))
    return number


def parse_float(text, /):
    if not _FLOAT.fullmatch(text):
        raise CoercionError("parsing %s: invalid syntax" % quote(text))
    number = float(text)
    # float() saturates silently; only an explicit "inf" may produce infinity
    if math.isinf(number) and "inf" not in text.lower():
        raise CoercionError("parsing %s: value out of range" % quote(text))
    return number


def render_float(number, /):
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"

    sign, digits, exponent = decimal.Decimal(repr(number)).normalize().as_tuple()
    digits = "".join(map(str, digits))
    prefix = "-" if sign else ""
    if digits == "0":
        return prefix + "0"

    # position of the decimal point, counted from the first significant digit
    point = len(digits) + exponent
    if point - 1 < -4 or point - 1 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return "%s%se%+03d" % (prefix, mantissa, point - 1)
    if point <= 0:
        return prefix + "0." + "0" * -point + digits
    if point >= len(digits):
        return prefix + digits + "0" * (point - len(digits))
    return prefix + digits[:point] + "." + digits[point:]


def parse_duration(text, /):
    """
    Parse a unit-suffixed duration expression into a timedelta.

    The expression is evaluated exactly in nanoseconds, then truncated towards
    zero to the microsecond resolution of timedelta.

    Raises
    - CoercionError: invalid duration / missing unit / unknown unit, or a total
      beyond the signed 64-bit nanosecond range.
    """
    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise CoercionError("invalid duration %s" % quote(text))

    total = Fraction(0)
    position = 0
    while position < len(rest):
        match = _SEGMENT.match(rest, position)
        number, unit = match["number"], match["unit"]
        if not number.strip("."):
            raise CoercionError("invalid duration %s" % quote(text))
        if not unit:
            raise CoercionError("missing unit in duration %s" % quote(text))
        try:
            total += Fraction(number) * _UNITS[unit]
        except KeyError:
            raise CoercionError("unknown unit %s in duration %s" % (quote(unit), quote(text))) from None
        if total > (1 << 63) - 1:
            raise CoercionError("invalid duration %s" % quote(text))
        position = match.end()

    microseconds = int(total) // 1000
    return timedelta(microseconds=-microseconds if negative else microseconds)


def _fraction(amount, unit):
    whole, remainder = divmod(amount, unit)
    if not remainder:
        return str(whole)
    width = len(str(unit)) - 1
    return "%d.%s" % (whole, str(remainder).rjust(width, "0").rstrip("0"))


def render_duration(duration, /):
    microseconds = duration // timedelta(microseconds=1)
    sign = "-" if microseconds < 0 else ""
    nanoseconds = abs(microseconds) * 1000

    if not nanoseconds:
        return "0s"

    if nanoseconds < _SECOND:
        for unit, size in (("ms", 1_000_000), ("µs", 1_000), ("ns", 1)):
            if nanoseconds >= size:
                return sign + _fraction(nanoseconds, size) + unit

    hours, rest = divmod(nanoseconds, _UNITS["h"])
    minutes, rest = divmod(rest, _UNITS["m"])
    text = _fraction(rest, _SECOND) + "s"
    if hours or minutes:
        text = "%dm%s" % (minutes, text)
    if hours:
        text = "%dh%s" % (hours, text)
    return sign + text


__all__ = (
    "quote",
    "parse_bool",
    "parse_integer",
    "parse_float",
    "render_float",
    "parse_duration",
    "render_duration",
)
