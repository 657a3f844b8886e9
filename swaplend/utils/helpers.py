"""
Utility helper functions
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

# uint256 has 78 decimal digits; leave room for the fractional part
_AMOUNT_PRECISION = 100

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

HumanAmount = Union[Decimal, int, float, str]


def to_decimal(amount: HumanAmount) -> Decimal:
    """Convert a human-readable amount to Decimal without float noise"""
    if isinstance(amount, bool):
        raise ValueError("Amount must be numeric, not bool")
    if isinstance(amount, Decimal):
        value = amount
    else:
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation:
            raise ValueError(f"Amount is not a number: {amount!r}") from None
    if not value.is_finite():
        raise ValueError(f"Amount must be finite: {amount!r}")
    return value


def to_base_units(amount: HumanAmount, decimals: int) -> int:
    """
    Convert a human-readable amount into a smallest-unit integer

    Examples:
        to_base_units("1", 6) -> 1000000
        to_base_units("0.5", 18) -> 500000000000000000

    Raises ValueError for negative amounts and for amounts with more
    fractional digits than ``decimals``.
    """
    value = to_decimal(amount)
    if value < 0:
        raise ValueError(f"Amount must be non-negative: {amount!r}")

    with localcontext() as ctx:
        ctx.prec = _AMOUNT_PRECISION
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount {amount!r} has more than {decimals} decimal places")
        return int(scaled)


def from_base_units(raw: int, decimals: int) -> Decimal:
    """
    Convert a smallest-unit integer into an exact human-readable Decimal

    Examples:
        from_base_units(1000000, 6) -> Decimal('1.000000')
    """
    if raw < 0:
        raise ValueError(f"Raw amount must be non-negative: {raw}")
    with localcontext() as ctx:
        ctx.prec = _AMOUNT_PRECISION
        return Decimal(int(raw)).scaleb(-decimals)


def format_amount(raw: int, decimals: int, symbol: str = "") -> str:
    """Format a smallest-unit amount for display"""
    with localcontext() as ctx:
        ctx.prec = _AMOUNT_PRECISION
        value = from_base_units(raw, decimals).normalize()
    text = format(value, "f")
    return f"{text} {symbol}".strip()


def same_address(a: str, b: str) -> bool:
    """Case-insensitive address comparison"""
    return (a or "").lower() == (b or "").lower()


def is_zero_address(address: str) -> bool:
    """True for an empty value or the zero address"""
    if not address:
        return True
    try:
        return int(address, 16) == 0
    except ValueError:
        return False


def explorer_tx_link(base_url: str, tx_hash: str) -> str:
    """Build a block explorer link for a transaction"""
    return f"{base_url.rstrip('/')}/{tx_hash}"


def normalize_tx_hash(tx_hash) -> str:
    """Render a transaction hash as 0x-prefixed hex"""
    if isinstance(tx_hash, (bytes, bytearray)):
        text = bytes(tx_hash).hex()
    else:
        text = str(tx_hash)
    return text if text.startswith("0x") else f"0x{text}"


def new_run_id() -> str:
    """Identifier for a single pipeline run"""
    return uuid.uuid4().hex[:12]


def get_utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)
