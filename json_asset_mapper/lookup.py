from __future__ import annotations

import logging
import math
import re
from decimal import Decimal
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

LookupKey = Tuple[str, Hashable]
LookupIndex = Dict[LookupKey, Dict[str, Any]]

_NUMERIC_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


def _shortest_digits(value: float) -> Tuple[str, int]:
    """Shortest round-trip digits and the exponent n with value == 0.DIGITS * 10**n."""
    _, digits, exponent = Decimal(repr(abs(value))).as_tuple()
    text = "".join(str(d) for d in digits).lstrip("0") or "0"
    stripped = text.rstrip("0")
    exponent += len(text) - len(stripped)
    return stripped, len(stripped) + exponent


def format_number(value) -> str:
    """Render a number the way a JavaScript runtime does (1.0 -> '1', 1e-7 -> '1e-7')."""
    if isinstance(value, int) and not isinstance(value, bool):
        if abs(value) < 10 ** 21:
            return str(value)
        value = float(value)
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        return '0'

    prefix = '-' if value < 0 else ''
    digits, n = _shortest_digits(value)
    k = len(digits)
    if k <= n <= 21:
        return prefix + digits + '0' * (n - k)
    if 0 < n <= 21:
        return prefix + digits[:n] + '.' + digits[n:]
    if -6 < n <= 0:
        return prefix + '0.' + '0' * -n + digits

    exp = n - 1
    exp_text = ('+' if exp > 0 else '-') + str(abs(exp))
    mantissa = digits if k == 1 else digits[0] + '.' + digits[1:]
    return prefix + mantissa + 'e' + exp_text


def stringify_value(value: Any) -> str:
    """String form of a value used for type-tolerant matching."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ','.join('' if v is None else stringify_value(v) for v in value)
    if isinstance(value, dict):
        return '[object Object]'
    return str(value)


def parse_numeric_string(value: str) -> Optional[float]:
    """Return the number a string spells out in base 10, or None."""
    text = value.strip()
    if not _NUMERIC_RE.match(text):
        return None
    number = float(text)
    if number.is_integer() and abs(number) < 1e21:
        return int(number)
    return number


def lookup_key(value: Any) -> Optional[LookupKey]:
    """Tag a raw value so that bools, numbers and strings never collide.

    Returns None for values that cannot be looked up by value (lists, dicts).
    """
    if value is None:
        return ('null', None)
    if isinstance(value, bool):
        return ('bool', value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return ('number', 'NaN')
        return ('number', value)
    if isinstance(value, str):
        return ('string', value)
    return None


def candidate_keys(value: Any) -> List[LookupKey]:
    """All keys an asset value is registered under: raw, string, numeric."""
    keys: List[LookupKey] = []
    raw = lookup_key(value)
    if raw is not None:
        keys.append(raw)
    keys.append(('string', stringify_value(value)))
    if isinstance(value, str):
        number = parse_numeric_string(value)
        if number is not None:
            keys.append(('number', number))
    return keys


def build_lookup_index(assets: Iterable[Dict[str, Any]], match_key: str) -> LookupIndex:
    """Index assets by `match_key`. The first asset registered under a key wins."""
    index: LookupIndex = {}
    for asset in assets:
        if match_key not in asset:
            continue
        for key in candidate_keys(asset[match_key]):
            index.setdefault(key, asset)
    return index


def build_lookup_indices(assets: List[Dict[str, Any]], match_keys: Iterable[str]) -> Dict[str, LookupIndex]:
    """Build one index per distinct match key, in first-seen order."""
    indices: Dict[str, LookupIndex] = {}
    for match_key in match_keys:
        if match_key in indices:
            continue
        indices[match_key] = build_lookup_index(assets, match_key)
        logger.debug("Indexed %d lookup keys for match key %r", len(indices[match_key]), match_key)
    return indices


def find_asset(index: LookupIndex, value: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(value)
    if key is None:
        return None
    return index.get(key)
