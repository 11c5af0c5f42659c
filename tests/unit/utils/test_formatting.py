"""Unit tests for formatting utilities."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from datafile_store.utils.formatting import format_size


@pytest.mark.unit
class TestFormatSize:
    """Test format_size function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, "0 B"),
            (1, "1 B"),
            (1023, "1023 B"),
            (1024, "1.0 KiB"),
            (1536, "1.5 KiB"),
            (104_857_600, "100.0 MiB"),
            (1024**3, "1.0 GiB"),
            (2_748_779_069_440, "2.5 TiB"),
            (3 * 1024**5, "3.0 PiB"),
            (2048 * 1024**5, "2048.0 PiB"),
        ],
    )
    def test_units(self, value: int, expected: str) -> None:
        assert format_size(value) == expected

    def test_precision(self) -> None:
        assert format_size(1536, precision=2) == "1.50 KiB"
        assert format_size(1536, precision=0) == "2 KiB"

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            _ = format_size(-1)

    @given(st.integers(min_value=0, max_value=2**60))
    def test_always_ends_with_unit(self, value: int) -> None:
        """Every non-negative size renders as a number and a unit."""
        number, unit = format_size(value).split(" ")

        assert unit in {"B", "KiB", "MiB", "GiB", "TiB", "PiB"}
        assert float(number) >= 0
