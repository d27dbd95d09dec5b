"""One-line status footer: tab bar, loading progress, status message, hints."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.widgets import Static


@dataclass(frozen=True)
class FooterState:
    tab_bar: str = ""
    loading_rows: int | None = None  # None when nothing is streaming
    cancelled: bool = False
    status: str = ""
    hints: str = ""


def loading_label(state: FooterState) -> str:
    if state.loading_rows is None:
        return ""
    label = f"Loading... {state.loading_rows} rows"
    return f"{label} (cancelled)" if state.cancelled else label


class StatusFooter(Static):
    """Data-driven footer.

    // [LAW:single-enforcer] update_display() is the sole render entry.
    """

    ALLOW_SELECT = False

    DEFAULT_CSS = """
    StatusFooter {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__("", id=id)
        self.state = FooterState()

    def update_display(self, state: FooterState) -> None:
        self.state = state
        line = Text(no_wrap=True, overflow="ellipsis")
        if state.tab_bar:
            line.append(state.tab_bar, style="bold")
            line.append(" | ", style="dim")
        loading = loading_label(state)
        if loading:
            line.append(loading, style="yellow")
            line.append(" | ", style="dim")
        # A transient status message takes the hint slot.
        if state.status:
            line.append(state.status, style="bold green")
        else:
            line.append(state.hints, style="dim")
        self.update(line)

    @property
    def plain(self) -> str:
        """Current footer text without styling (tests, logging)."""
        tab_bar = f"{self.state.tab_bar} | " if self.state.tab_bar else ""
        loading = loading_label(self.state)
        loading = f"{loading} | " if loading else ""
        return f"{tab_bar}{loading}{self.state.status or self.state.hints}"
