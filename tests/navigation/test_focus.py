from __future__ import annotations

from fastfm.models.enums import Region
from fastfm.navigation.focus import FocusTracker, clamp_index


def test_starts_in_search_with_first_rows() -> None:
    tracker = FocusTracker()
    assert tracker.current_region() is Region.SEARCH
    assert tracker.current_index(Region.DRIVE) == 0
    assert tracker.current_index(Region.FILE) == 0


def test_clamp_index() -> None:
    assert clamp_index(-3, 5) == 0
    assert clamp_index(9, 5) == 4
    assert clamp_index(2, 5) == 2
    assert clamp_index(0, 0) is None


def test_move_stays_in_bounds() -> None:
    tracker = FocusTracker()
    assert tracker.move(Region.FILE, -1, 3) == 0
    assert tracker.move(Region.FILE, 1, 3) == 1
    assert tracker.move(Region.FILE, 10, 3) == 2


def test_empty_list_has_no_focus() -> None:
    tracker = FocusTracker()
    assert tracker.set_focused_index(Region.FILE, 4, 0) is None
    assert tracker.current_index(Region.FILE) is None
    assert tracker.move(Region.FILE, 1, 2) == 1


def test_search_region_has_no_index() -> None:
    tracker = FocusTracker()
    assert tracker.set_focused_index(Region.SEARCH, 3, 10) is None
    assert tracker.current_index(Region.SEARCH) is None


def test_indices_are_per_region() -> None:
    tracker = FocusTracker()
    tracker.set_focused_index(Region.DRIVE, 2, 5)
    tracker.set_focused_index(Region.FILE, 4, 5)
    tracker.set_region(Region.FILE)
    assert tracker.current_index(Region.DRIVE) == 2
    assert tracker.current_index(Region.FILE) == 4


def test_reclamp_after_shrink() -> None:
    tracker = FocusTracker()
    tracker.set_focused_index(Region.DRIVE, 4, 5)
    assert tracker.reclamp(Region.DRIVE, 2) == 1
