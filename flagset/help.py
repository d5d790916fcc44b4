"""
Flagset help and usage rendering.

Model
- Usage: the synopsis line ("Usage: git add [-f | --force] [-h | --help] <FILE>"),
  already wrapped to the line budget.
- Section: a titled listing ("Options:", "Arguments:", "Commands:") of (name, description)
  items; descriptions line up one space past the longest name of that section.
- Help: usage + optional description + sections.

Functions
- generate(schema, command) builds (and caches) the Help of a schema for a command path.
- render(schema, command, colors=...) returns the help as a rich Text: the custom
  __help__ text verbatim when the command declares one, otherwise the generated help.

Layout rules
- Usage items, in order: each flag ("-f | --name <placeholder>", bracketed unless the
  flag is required), "[-h | --help]", each positional ("<NAME>" or "[<NAME>]"),
  then "<command>" when subcommands exist.
- A usage item that would push the line past `width` columns starts a new line
  indented by len("Usage: ") + len(command), so items align under the first one.
  When that indent exceeds half of `width`, continuation lines are indented by
  len("Usage: ") instead and even the first item may move to the second line.
- Widths are measured on plain text; styles never affect wrapping.

The plain text of a rendering is identical for every ColorScheme.
"""
import functools

from rich.text import Text

from .colors import DEFAULT_COLORS
from .kinds import Choice, variant
from .schema import variant_descriptions

USAGE_LABEL = "Usage: "
HELP_ITEM = ("-h, --help", "Show this help and exit")


class Usage:
    """Wrapped usage synopsis of one command path."""
    __slots__ = ("command", "body")

    def __init__(self, command, body, /):
        self.command = command
        self.body = body

    @classmethod
    def generate(cls, schema, command, /, *, width=80):
        items = []
        for flag in schema.flags:
            item = f"-{flag.switch} | {flag.name}" if flag.switch else flag.name
            if not flag.boolean:
                item += f" <{flag.placeholder}>"
            items.append(item if flag.required else f"[{item}]")
        items.append("[-h | --help]")
        for positional in schema.positionals:
            items.append(positional.name if positional.required else f"[{positional.name}]")
        if schema.subcommands:
            items.append("<command>")

        offset = len(USAGE_LABEL) + len(command)
        # long command paths fall back to an indent under the command name
        indent = offset if offset <= width // 2 else len(USAGE_LABEL)
        lines, column = [""], offset
        for item in items:
            if column + 1 + len(item) > width and (lines[-1] or column > indent):
                lines.append("")
                column = indent
            lines[-1] += " " + item
            column += 1 + len(item)

        body = ("\n" + " " * indent).join(lines)
        return cls(command, body)

    def render(self, colors=DEFAULT_COLORS, /):
        return Text.assemble(
            colors.text(USAGE_LABEL, "header"),
            colors.text(self.command, "command_name"),
            colors.text(self.body, "usage"),
            "\n",
        )

    @property
    def plain(self):
        return self.render(DEFAULT_COLORS).plain

    def __rich__(self):
        return self.render(DEFAULT_COLORS)

    def __repr__(self):
        return f"Usage({self.command!r}, {self.body!r})"


class Section:
    """Titled listing of (name, description) items."""
    __slots__ = ("header", "items")

    def __init__(self, header, items=(), /):
        self.header = header
        self.items = tuple(items)

    @property
    def width(self):
        return max((len(name) for name, _ in self.items), default=0)

    def render(self, colors=DEFAULT_COLORS, /):
        text = colors.text(f"\n{self.header}\n\n", "header")
        for name, descr in self.items:
            text.append("  ").append_text(colors.text(name, "option_name"))
            if descr is not None:
                text.append(" " * (1 + self.width - len(name))).append_text(colors.text(descr, "description"))
            text.append("\n")
        return text

    def __repr__(self):
        return f"Section({self.header!r}, {self.items!r})"


class Help:
    """Generated help of one command path."""
    __slots__ = ("usage", "description", "sections")

    def __init__(self, usage, description=None, sections=(), /):
        self.usage = usage
        self.description = description
        self.sections = tuple(sections)

    def render(self, colors=DEFAULT_COLORS, /):
        text = self.usage.render(colors)
        if self.description is not None:
            text.append_text(colors.text(f"\n{self.description}\n", "command_description"))
        for section in self.sections:
            text.append_text(section.render(colors))
        return text

    @property
    def plain(self):
        return self.render(DEFAULT_COLORS).plain

    def __rich__(self):
        return self.render(DEFAULT_COLORS)

    def __repr__(self):
        return f"Help({self.usage!r}, {self.description!r}, {self.sections!r})"


def _options(schema, /):
    for flag in schema.flags:
        yield f"-{flag.switch}, {flag.name}" if flag.switch else flag.name, flag.descr
        if isinstance(flag.kind, Choice):
            descriptions = variant_descriptions(flag.kind.enum)
            for member in flag.kind.enum:
                yield "  " + variant(member), descriptions.get(member.name)
    yield HELP_ITEM


@functools.cache
def generate(schema, command, /, *, width=80):
    """Build the Help of a schema for the given command path (cached)."""
    sections = [Section("Options:", _options(schema))]
    if schema.positionals:
        sections.append(Section("Arguments:", ((positional.name, positional.descr) for positional in schema.positionals)))
    if schema.subcommands:
        sections.append(Section("Commands:", ((subcommand.name, subcommand.descr) for subcommand in schema.subcommands)))
    return Help(Usage.generate(schema, command, width=width), schema.description, sections)


def render(schema, command, /, *, colors=DEFAULT_COLORS, width=80):
    """Help text of a schema for the given command path, as a rich Text."""
    if schema.help is not None:
        return Text(schema.help)
    return generate(schema, command, width=width).render(colors)


__all__ = (
    "Usage",
    "Section",
    "Help",
    "generate",
    "render",
)
