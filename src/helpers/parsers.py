"""Parsing utilities for common data transformations."""

from decimal import Decimal

from typing import Any


WEI_PER_ETH = Decimal(10**18)


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def parse_quantity(value: Any) -> int | None:
    """Parse a JSON-RPC quantity that may be absent.

    Accepts hex strings ("0x1a"), plain integers and None. Used as a
    pydantic "before" validator for execution node payloads.

    Example:
        >>> parse_quantity("0x1a")
        26
        >>> parse_quantity(None) is None
        True
    """
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value.startswith(("0x", "0X")) else int(value)
    msg = f"Cannot parse quantity from {value!r}"
    raise ValueError(msg)


def normalize_address(address: str) -> str:
    """Lowercase a hex address and make sure it carries the 0x prefix.

    Example:
        >>> normalize_address("ABCDEF")
        '0xabcdef'
    """
    address = address.lower()
    return address if address.startswith("0x") else f"0x{address}"


def wei_to_eth(wei: int | str | None) -> Decimal | None:
    """Convert Wei to ETH without losing precision.

    Args:
        wei: Amount in Wei as an int or decimal string, or None

    Returns:
        Decimal | None: Amount in ETH, or None if input was None or empty

    Example:
        >>> wei_to_eth(1500000000000000000)
        Decimal('1.5')
        >>> wei_to_eth("") is None
        True
    """
    if wei is None or wei == "":
        return None
    return Decimal(int(wei)) / WEI_PER_ETH


__all__ = [
    "normalize_address",
    "parse_hex_int",
    "parse_quantity",
    "wei_to_eth",
]
