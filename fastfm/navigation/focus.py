from __future__ import annotations

from fastfm.models.enums import Region

LIST_REGIONS: tuple[Region, ...] = (Region.DRIVE, Region.FILE)


def clamp_index(index: int, length: int) -> int | None:
    if length <= 0:
        return None
    return max(0, min(length - 1, index))


class FocusTracker:
    """Which region owns the keyboard, and the focused row of each list.

    List lengths are supplied by the caller on every call because the lists
    are rendered elsewhere and can change size between calls.
    """

    __slots__ = ("_region", "_indices")

    def __init__(self, region: Region = Region.SEARCH) -> None:
        self._region = region
        self._indices: dict[Region, int | None] = {name: 0 for name in LIST_REGIONS}

    def current_region(self) -> Region:
        return self._region

    def set_region(self, region: Region) -> None:
        self._region = region

    def current_index(self, region: Region) -> int | None:
        return self._indices.get(region)

    def set_focused_index(self, region: Region, index: int, length: int) -> int | None:
        if region not in LIST_REGIONS:
            return None
        clamped = clamp_index(index, length)
        self._indices[region] = clamped
        return clamped

    def move(self, region: Region, delta: int, length: int) -> int | None:
        current = self._indices.get(region)
        start = 0 if current is None else current
        return self.set_focused_index(region, start + delta, length)

    def reclamp(self, region: Region, length: int) -> int | None:
        """Re-apply bounds after the list behind *region* changed size."""
        current = self._indices.get(region)
        return self.set_focused_index(region, 0 if current is None else current, length)
