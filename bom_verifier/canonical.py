
import json
import math
from decimal import Decimal
from typing import Any

def _number(x: float) -> str:
    if not math.isfinite(x):
        raise ValueError(f"JCS: non-finite number {x!r}")
    if x == 0:
        return "0"
    sign = "-" if x < 0 else ""
    # repr() gives the shortest round-tripping digits, the same digits ECMAScript picks
    _, digits_t, exp = Decimal(repr(abs(x))).normalize().as_tuple()
    digits = "".join(str(d) for d in digits_t)
    k = len(digits)
    n = exp + k  # position of the decimal point relative to the digit string

    if k <= n <= 21:
        out = digits + "0" * (n - k)
    elif 0 < n <= 21:
        out = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        out = "0." + "0" * (-n) + digits
    else:
        e = n - 1
        mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
        out = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
    return sign + out

def _serialize(value: Any, parts: list) -> None:
    if value is None:
        parts.append("null")
    elif value is True:
        parts.append("true")
    elif value is False:
        parts.append("false")
    elif isinstance(value, str):
        parts.append(json.dumps(value, ensure_ascii=False))
    elif isinstance(value, int):
        # JSON numbers are IEEE doubles, so large integers lose precision
        try:
            parts.append(_number(float(value)))
        except OverflowError:
            raise ValueError(f"JCS: integer {value} is out of double range") from None
    elif isinstance(value, float):
        parts.append(_number(value))
    elif isinstance(value, (list, tuple)):
        parts.append("[")
        for i, item in enumerate(value):
            if i:
                parts.append(",")
            _serialize(item, parts)
        parts.append("]")
    elif isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise ValueError(f"JCS: object key must be a string, got {type(key).__name__}")
        parts.append("{")
        for i, key in enumerate(sorted(value, key=lambda k: k.encode("utf-16-be"))):
            if i:
                parts.append(",")
            parts.append(json.dumps(key, ensure_ascii=False))
            parts.append(":")
            _serialize(value[key], parts)
        parts.append("}")
    else:
        raise ValueError(f"JCS: unsupported type {type(value).__name__}")

def canonicalize(value: Any) -> bytes:
    """
    RFC 8785 (JCS) bytes of a decoded JSON value, the input a JSF signature covers.
    Members are ordered by the UTF-16 code units of their names and numbers use
    the ECMAScript Number-to-string form.
    """
    parts: list = []
    _serialize(value, parts)
    return "".join(parts).encode("utf-8")
