import math
import re
from datetime import datetime, timezone
from typing import Optional

EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

WEI_PER_NATIVE = 1e18

# Fractional seconds directly before the UTC offset or end of string
_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d\d:?\d\d$|$)")


def is_evm_address(address: str) -> bool:
    """0x + 40 hex chars."""
    return bool(EVM_ADDRESS_RE.match(address or ""))


# ── Numeric parsing (malformed values become 0) ──────────────────────────────


def parse_float(value) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0


def parse_int(value) -> int:
    """Integer amount from a decimal string such as a wei value."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return int(parse_float(value))


def raw_to_units(raw, decimals: Optional[int] = 18) -> float:
    """Convert an integer raw amount (e.g. wei) into human units."""
    if decimals is None or decimals < 0:
        decimals = 18
    try:
        return parse_int(raw) / 10**decimals
    except OverflowError:
        return 0.0


def wei_to_native(wei) -> float:
    return raw_to_units(wei, 18)


def gas_cost_native(gas_price, gas_spent) -> float:
    """gas price (wei) * gas spent (units), in native units."""
    try:
        return parse_int(gas_price) * parse_int(gas_spent) / WEI_PER_NATIVE
    except OverflowError:
        return 0.0


def round6(value: float) -> float:
    return round(value, 6)


# ── Time ─────────────────────────────────────────────────────────────────────


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat on 3.10 only takes 3 or 6 fraction digits
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Formatting ───────────────────────────────────────────────────────────────


def format_currency(amount: Optional[float], symbol: str = "$", decimals: int = 2) -> str:
    if amount is None:
        return "-"
    if abs(amount) >= 1_000_000:
        return f"{symbol}{amount / 1_000_000:,.{decimals}f}M"
    elif abs(amount) >= 1_000:
        return f"{symbol}{amount / 1_000:,.{decimals}f}K"
    return f"{symbol}{amount:,.{decimals}f}"
