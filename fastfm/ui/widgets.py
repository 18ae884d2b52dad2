from __future__ import annotations

from textual.coordinate import Coordinate
from textual.message import Message
from textual.widgets import DataTable, Input

from fastfm.models.enums import Region


class EntryTable(DataTable[str]):
    """Row table for the drive and file lists.

    The table never takes keyboard focus; the app routes every key through
    the navigation machine and only mirrors the focused row here.
    """

    can_focus = False

    class Hovered(Message):
        def __init__(self, region: Region, row: int) -> None:
            super().__init__()
            self.region = region
            self.row = row

    def __init__(self, region: Region, *, id: str | None = None) -> None:  # noqa: A002
        super().__init__(id=id, cursor_type="row", zebra_stripes=True)
        self.region = region

    def watch_hover_coordinate(self, old: Coordinate, value: Coordinate) -> None:
        super().watch_hover_coordinate(old, value)
        if value.row != old.row and 0 <= value.row < self.row_count:
            self.post_message(self.Hovered(self.region, value.row))


class SearchInput(Input):
    class Entered(Message):
        """The search box received focus (keyboard or mouse)."""

    def on_focus(self) -> None:
        self.post_message(self.Entered())
