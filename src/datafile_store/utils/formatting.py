"""Human-readable rendering of byte counts for logs and the command line."""

from typing import Final

_STEP: Final[int] = 1024
_UNITS: Final[tuple[str, ...]] = ("KiB", "MiB", "GiB", "TiB", "PiB")


def format_size(size: int, *, precision: int = 1) -> str:
    """Render a byte count with the largest fitting binary unit.

    Args:
        size: Byte count (must be non-negative)
        precision: Decimal places shown for KiB and above

    Returns:
        e.g. "512 B", "2.0 KiB", "2.5 TiB"

    Examples:
        >>> format_size(512)
        '512 B'
        >>> format_size(104857600)
        '100.0 MiB'
        >>> format_size(2748779069440)
        '2.5 TiB'
    """
    if size < 0:
        msg = f"size must be non-negative, got {size}"
        raise ValueError(msg)

    if size < _STEP:
        return f"{size} B"

    value = size / _STEP
    unit_index = 0
    while value >= _STEP and unit_index < len(_UNITS) - 1:
        value /= _STEP
        unit_index += 1
    return f"{value:.{precision}f} {_UNITS[unit_index]}"
