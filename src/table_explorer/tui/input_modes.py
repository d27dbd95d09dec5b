"""Pure mode system for key dispatch.

All keyboard input routes through on_key based on current mode.
Textual BINDINGS are not used - on_key is the sole dispatcher.
"""

from enum import Enum, auto


class InputMode(Enum):
    """Input modes; the prompt modes consume keys as text."""
    NORMAL = auto()
    FILTER_EDIT = auto()
    EXPORT_FORMAT = auto()
    EXPORT_FILENAME = auto()


# [LAW:one-source-of-truth] Key→action mapping per mode.
# NORMAL: all app functionality
# FILTER_EDIT / EXPORT_FILENAME: empty (all keys consumed for text input)
# EXPORT_FORMAT: format choice only
MODE_KEYMAP: dict[InputMode, dict[str, str]] = {
    InputMode.NORMAL: {
        # Rows
        "j": "move_row(1)",
        "down": "move_row(1)",
        "k": "move_row(-1)",
        "up": "move_row(-1)",
        "g": "go_top",
        "home": "go_top",
        "G": "go_bottom",
        "end": "go_bottom",
        "ctrl+d": "page_down",
        "pagedown": "page_down",
        "ctrl+u": "page_up",
        "pageup": "page_up",

        # Columns
        "h": "move_col(-1)",
        "left": "move_col(-1)",
        "l": "move_col(1)",
        "right": "move_col(1)",

        # Column widths (try both literal and descriptive names)
        "+": "widen_column",
        "plus": "widen_column",
        "=": "widen_column",
        "equals_sign": "widen_column",
        "-": "narrow_column",
        "minus": "narrow_column",
        "_": "narrow_column",
        "underscore": "narrow_column",
        "0": "reset_columns",

        # Column visibility / order
        "H": "hide_column",
        "S": "show_all_columns",
        "<": "move_column(-1)",
        "less_than_sign": "move_column(-1)",
        ",": "move_column(-1)",
        "comma": "move_column(-1)",
        ">": "move_column(1)",
        "greater_than_sign": "move_column(1)",
        ".": "move_column(1)",
        "full_stop": "move_column(1)",

        # Prompts
        "E": "start_export",
        "/": "start_filter",
        "slash": "start_filter",

        # Tabs
        "tab": "next_tab",
        "shift+tab": "prev_tab",
        "1": "switch_tab(0)",
        "2": "switch_tab(1)",
        "3": "switch_tab(2)",
        "4": "switch_tab(3)",
        "5": "switch_tab(4)",
        "6": "switch_tab(5)",
        "7": "switch_tab(6)",
        "8": "switch_tab(7)",
        "9": "switch_tab(8)",
        "W": "close_tab",
        "D": "duplicate_tab",

        # Split view
        "V": "toggle_split",
        "ctrl+w": "toggle_focus",
        "f6": "toggle_focus",

        # Streaming
        "x": "cancel_loading",

        "q": "quit",
        "ctrl+c": "quit",
    },

    InputMode.FILTER_EDIT: {
        # Empty - all keys handled specially for text input
    },

    InputMode.EXPORT_FORMAT: {
        "c": "choose_export('csv')",
        "C": "choose_export('csv')",
        "j": "choose_export('json')",
        "J": "choose_export('json')",
        "escape": "cancel_prompt",
    },

    InputMode.EXPORT_FILENAME: {
        # Empty - all keys handled specially for text input
    },
}


# [LAW:one-source-of-truth] Footer hint text per mode.
FOOTER_HINTS: dict[InputMode, str] = {
    InputMode.NORMAL: "+/-: width, H/S: hide/show, </>: move, E: export, 0: reset, q: quit",
    InputMode.FILTER_EDIT: "Enter: apply, Esc: cancel",
    InputMode.EXPORT_FORMAT: "c: CSV, j: JSON, Esc: cancel",
    InputMode.EXPORT_FILENAME: "Enter: save, Esc: cancel",
}

TAB_HINTS = "1-9: tab, W: close, "
SPLIT_HINTS = "Tab: switch pane, V: unsplit, "
UNSPLIT_HINTS = "V: split, "
STREAM_HINTS = "x: cancel load, "
