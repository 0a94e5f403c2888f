"""UI-local selection and contextual menu state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SelectionState:
    """Tracks the selected entry and the entry whose menu is open, by entry id.

    Nothing here is persisted. Selection and menu are independent: one entry
    may be both selected and showing its menu.
    """

    selected_id: str | None = None
    menu_id: str | None = None

    def select(self, entry_id: str) -> None:
        self.selected_id = entry_id

    def clear_selection(self) -> None:
        self.selected_id = None

    def open_menu(self, entry_id: str) -> None:
        self.menu_id = entry_id

    def toggle_menu(self, entry_id: str) -> None:
        self.menu_id = None if self.menu_id == entry_id else entry_id

    def close_menu(self) -> None:
        self.menu_id = None

    def reset(self) -> None:
        self.selected_id = None
        self.menu_id = None


def menu_region(entry_id: str) -> str:
    """Region identifier covering the rendered menu of an entry."""

    return f"menu:{entry_id}"
