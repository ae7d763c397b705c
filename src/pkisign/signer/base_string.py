"""Canonical signature-base construction for PKI_SIGN authorization headers.

The base string is ``METHOD&URL&normalized-params`` where the parameters are
the default header fields merged with the request parameters, ordered by key
and serialized through the partner's encode-then-unescape step. Any byte
difference from what the receiving gateway computes invalidates the
signature, so every rule here is deliberately literal.
"""
from collections.abc import Mapping
from decimal import Decimal
from math import isfinite
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote, unquote

FORM_URLENCODED = "application/x-www-form-urlencoded"
SIGNATURE_METHOD = "RS256"

# Left untouched by the partner escaper besides ASCII letters and digits.
# Every other character is percent-encoded as UTF-8.
UNRESERVED_MARKS = "-_.!~*'()"


def stringify_value(value: Any) -> str:
    """Coerce a parameter value the way the partner query-string utility does."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return number_to_string(value)
    if isinstance(value, Mapping):
        return ""
    return str(value)


def number_to_string(value: float) -> str:
    """Render a float the way the partner runtime prints numbers.

    Shortest round-trip digits; plain notation while the decimal point
    position n satisfies -6 < n <= 21, exponent form (1e+21, 1.5e-7) outside.
    Non-finite values become "".
    """
    if not isfinite(value):
        return ""
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    dec = Decimal(repr(abs(value))).normalize()
    _, digit_tuple, exponent = dec.as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + exponent
    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits
    e = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def should_strip_params(method: str, content_type: Optional[str]) -> bool:
    """POST bodies only take part in the signature when form-encoded."""
    return method.upper() == "POST" and content_type != FORM_URLENCODED


def merge_params(defaults: Mapping, params: Optional[Mapping]) -> Dict[str, Any]:
    # last write wins: a request parameter overrides a default field
    merged: Dict[str, Any] = {str(k): v for k, v in defaults.items()}
    for k, v in (params or {}).items():
        merged[str(k)] = v
    return merged


def sort_params(params: Mapping) -> List[Tuple[str, Any]]:
    # case-sensitive, code point order
    return sorted(params.items(), key=lambda kv: kv[0])


def _pairs(items: Iterable[Tuple[str, Any]]) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    for key, value in items:
        if isinstance(value, (list, tuple)):
            # repeated key per element; an empty list contributes nothing
            out.extend((key, stringify_value(v)) for v in value)
        else:
            out.append((key, stringify_value(value)))
    return out


def escape_component(text: str) -> str:
    return quote(text, safe=UNRESERVED_MARKS)


def unescape_component(text: str) -> str:
    # The partner unescape reverses every percent escape; '+' stays literal.
    return unquote(text)


def encode_params(items: Iterable[Tuple[str, Any]]) -> str:
    return "&".join(f"{escape_component(k)}={escape_component(v)}" for k, v in _pairs(items))


def normalize_params(items: Iterable[Tuple[str, Any]]) -> str:
    """Serialize ordered parameters as a query string, then unescape it.

    The signature is computed over this partially decoded form, not the
    escaped one.
    """
    return unescape_component(encode_params(items))


def default_fields(app_id: str, nonce: str, timestamp: int) -> Dict[str, Any]:
    return {
        "app_id": app_id,
        "nonce": nonce,
        "signature_method": SIGNATURE_METHOD,
        "timestamp": timestamp,
    }


def build_base_string(
    method: str,
    url: str,
    params: Optional[Mapping],
    content_type: Optional[str],
    app_id: str,
    nonce: str,
    timestamp: int,
) -> str:
    if should_strip_params(method, content_type):
        params = {}
    merged = merge_params(default_fields(app_id, nonce, timestamp), params)
    base_params = normalize_params(sort_params(merged))
    return f"{method.upper()}&{url}&{base_params}"


__all__ = [
    "FORM_URLENCODED",
    "SIGNATURE_METHOD",
    "stringify_value",
    "number_to_string",
    "should_strip_params",
    "merge_params",
    "sort_params",
    "escape_component",
    "unescape_component",
    "encode_params",
    "normalize_params",
    "default_fields",
    "build_base_string",
]
