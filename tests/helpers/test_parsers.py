"""Unit tests for parsing helpers."""

from decimal import Decimal

import pytest

from src.helpers.parsers import (
    normalize_address,
    parse_hex_int,
    parse_quantity,
    wei_to_eth,
)


class TestParsers:
    """Test parsing utility functions."""

    def test_parse_hex_int_valid(self) -> None:
        """Test parsing valid hex integers."""
        assert parse_hex_int("0x10") == 16
        assert parse_hex_int("0x0") == 0
        assert parse_hex_int("0xFF") == 255

    def test_parse_hex_int_none(self) -> None:
        """Test parsing None returns default value."""
        assert parse_hex_int(None) == 0
        assert parse_hex_int(None, default=42) == 42

    def test_parse_quantity(self) -> None:
        """Test hex, decimal and int quantities."""
        assert parse_quantity("0x3b9aca00") == 1_000_000_000
        assert parse_quantity("12") == 12
        assert parse_quantity(7) == 7
        assert parse_quantity(None) is None

    def test_parse_quantity_keeps_full_precision(self) -> None:
        """Test values above 64 bits survive parsing."""
        big = 2**200 + 1
        assert parse_quantity(hex(big)) == big

    def test_parse_quantity_rejects_other_types(self) -> None:
        """Test unsupported types raise ValueError."""
        with pytest.raises(ValueError, match="Cannot parse quantity"):
            parse_quantity(1.5)

    def test_normalize_address(self) -> None:
        """Test addresses are lowercased and prefixed."""
        assert normalize_address("0xABCdef") == "0xabcdef"
        assert normalize_address("ABCDEF") == "0xabcdef"

    def test_wei_to_eth(self) -> None:
        """Test Wei to ETH conversion is exact."""
        assert wei_to_eth(1_000_000_000_000_000_000) == Decimal(1)
        assert wei_to_eth("500000000000000000") == Decimal("0.5")
        assert wei_to_eth(1) == Decimal("1E-18")

    def test_wei_to_eth_empty(self) -> None:
        """Test None and empty strings return None."""
        assert wei_to_eth(None) is None
        assert wei_to_eth("") is None
