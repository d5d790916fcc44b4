"""
Flagset color schemes.

A ColorScheme maps the semantic roles of rendered output to rich style strings.
Every role defaults to "" (no styling), so ColorScheme() renders plain text and
DEFAULT_COLORS reproduces the stock palette:

- error_label          "Error: " prefix of fault reports
- error_message        the fault message itself
- header               "Usage: " and the section headers ("Options:", ...)
- command_name         the command path in the usage line
- usage                the usage synopsis after the command path
- command_description  the free-text description below the usage line
- option_name          item names in the help sections
- description          item descriptions in the help sections

Styles are only emitted when the target console supports them; rich strips them
for non-terminal outputs.
"""
from typing import NamedTuple

from rich.style import Style
from rich.text import Text


class ColorScheme(NamedTuple):
    error_label: str = ""
    error_message: str = ""
    header: str = ""
    command_name: str = ""
    usage: str = ""
    command_description: str = ""
    option_name: str = ""
    description: str = ""

    def styler(self, role, /):
        """Return the style of a role, validated through rich."""
        if not (style := getattr(self, role)):
            return ""
        Style.parse(style)
        return style

    def text(self, fragment, role, /):
        """Wrap a fragment in a Text carrying the style of the given role."""
        return Text(str(fragment), self.styler(role))

    @property
    def colorful(self):
        return any(self)


DEFAULT_COLORS = ColorScheme(
    error_label="bold red",
    header="bold bright_green",
    command_name="bold cyan",
    usage="cyan",
    option_name="bold cyan",
)

NO_COLORS = ColorScheme()


__all__ = (
    "ColorScheme",
    "DEFAULT_COLORS",
    "NO_COLORS",
)
