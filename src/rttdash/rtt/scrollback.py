"""
Scrollback windowing.

The scroll offset counts rows hidden below the bottom of the viewport,
0 meaning the newest row is visible. Both helpers are pure so they can be
re-applied after every append and every terminal resize.
"""


def clamp_offset(total: int, height: int, offset: int) -> int:
    """Largest valid offset not exceeding `offset` that still fills the window."""
    if total < height + offset:
        return max(0, total - height)
    return offset


def window(total: int, height: int, offset: int) -> slice:
    """
    Slice of rows visible for `total` rows, a viewport of `height` rows
    and a scroll `offset`.

    The offset is clamped first, so the slice never starts before row 0.

    >>> window(10, 3, 0)
    slice(7, 10, None)
    >>> window(10, 3, 20)
    slice(0, 3, None)
    >>> window(2, 5, 1)
    slice(0, 2, None)
    """
    offset = clamp_offset(total, height, offset)
    return slice(total - min(total, height + offset), total - offset)
