"""Bottom prompt for the filter and export flows.

Not an Input widget. The app's on_key handles all text editing; this widget
only renders the current prompt state.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.widgets import Static

from table_explorer.tui.input_modes import InputMode

FORMAT_PROMPT = "Export format: [C]SV or [J]SON (Esc to cancel)"

_PREFIXES = {
    InputMode.FILTER_EDIT: ("/", "bold yellow"),
    InputMode.EXPORT_FILENAME: ("Save as: ", "bold green"),
}


@dataclass(frozen=True)
class PromptState:
    mode: InputMode = InputMode.NORMAL
    text: str = ""


class PromptBar(Static):
    """Single-line prompt, hidden in NORMAL mode."""

    DEFAULT_CSS = """
    PromptBar {
        height: auto;
        color: $text;
        display: none;
        padding: 0 1;
        border-top: solid $accent;
    }
    """

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__("", id=id)
        self.state = PromptState()

    def update_display(self, state: PromptState) -> None:
        """Render the prompt from current state."""
        self.state = state
        if state.mode == InputMode.NORMAL:
            self.display = False
            return

        self.display = True
        line = Text()
        if state.mode == InputMode.EXPORT_FORMAT:
            line.append(FORMAT_PROMPT, style="green")
        else:
            prefix, style = _PREFIXES[state.mode]
            line.append(prefix, style=style)
            line.append(state.text, style="bold")
            line.append("█", style="")  # Block cursor at end
        self.update(line)
