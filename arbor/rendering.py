"""
Help and usage rendering (pure functions of a command's declaration).

Nothing here consults parse results: the same command always renders the
same text for a given width and palette.

Sections of a help page
- path header: every command from the root, joined with " ➜ ".
- description paragraph.
- usage line (ancestors contribute their name and required options).
- options: ungrouped options with "(required)" or "[default: ...]" and the
  reserved --help last.
- one block per option group, titled with the group name and its constraint.
- subcommands table.

Customization
- Define a mapping named __styles__ in __main__ to override palette entries.
- When colorful is False, styling is suppressed entirely.
"""
import io
from collections import defaultdict, deque

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.containers import Lines
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

_palette = {
    # === Head sections ===
    "path": "bold #FF4D94",  # MAGENTA-PINK → brand pop
    "path-separator": "#737373",
    "usage-label": "bold #00E6FF",  # CYAN → signature info color
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
    "description-section": "italic #A3A3A3",  # Neutral gray

    # === Groups / options ===
    "group-label": "bold #FFFFFF",  # Pure white headers
    "group-constraint": "italic #9CA3AF",
    "argument-description": "#9CA3AF",  # Muted gray
    "option-name": "bold #00E6FF",  # CYAN for options
    "flag-name": "bold #22C55E",  # GREEN for flags
    "metavar": "bold #FFD600",  # AMBER for parameters
    "required": "bold #EF4444",
    "default": "#36C5F0",

    # === Children table ===
    "children-title": "bold #FFFFFF",
    "children-table": "#4B5563",  # Slate border
    "children": "bold #36C5F0",  # Sky-blue subcommands
    "children-description": "#9CA3AF",

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",
}


def stylist(defaults, /, colorful=False):
    """
    Return (styler, text) helpers bound to a palette.

    - styler(key) → the style for key, or "" when colorful is False.
    - text(fragment, style) → a rich Text; plain when colorful is False.

    Entries of __main__.__styles__ override the given defaults.
    """
    styles = defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment.copy()
        return Text(str(fragment), style)

    return styler, text


def _label(option, styler, text):
    label = Text(", ").join(
        text(spelling, styler("flag-name" if option.flag else "option-name")) for spelling in option.spellings
    )
    if option.takes_value:
        label.append(" ").append(text(option.metavar, styler("metavar")))
    return label


def usage_renderable(command, /, *, colorful=False, width=80):
    """
    Build the usage line as a rich Text, wrapped with a hanging indent.

    Shape: usage: <ancestors...> <name> [OPTIONS] --req <REQ>... [SUBCOMMAND]
    """
    styler, text = stylist(_palette, colorful)

    def required(step):
        for option in step.options.values():
            if option.required:
                yield Text.assemble(
                    text(f"--{option.name}", styler("option-name")), " ", text(option.metavar, styler("metavar"))
                )

    inputs = deque()
    for ancestor in command.path[:-1]:
        inputs.append(text(ancestor.name, styler("program-name")))
        inputs.extend(required(ancestor))

    inputs.append(text(command.name, styler("program-name")))
    if any(not option.required for name, option in command.options.items() if name != "help"):
        inputs.append(text("[OPTIONS]", styler("usage-section")))
    inputs.extend(required(command))
    if command.children:
        inputs.append(text("[SUBCOMMAND]", styler("usage-section")))

    usage = Text()
    usage.append(text("usage", styler("usage-label"))).append(": ")
    offset = len(usage)

    lines = Lines([inputs.popleft()])
    while inputs:
        if len(lines[-1]) + 1 + len(input := inputs.popleft()) > width - offset:
            lines.append(input)
        else:
            lines[-1].append(Text(" ") + input)

    usage.append(lines.pop(0))
    for line in lines:
        usage.append("\n").append(" " * offset).append(line)
    return usage


def render_usage(command, /, *, width=80):
    """
    Return the plain usage line of a command, e.g.
    "usage: fcast --host <HOST> play [OPTIONS] --mime_type <MIME_TYPE>".
    """
    return usage_renderable(command, width=width).plain


def help_renderable(command, /, *, colorful=False, fancy=False, width=80):
    """
    Build the full help page of a command as a rich renderable.
    """
    styler, text = stylist(_palette, colorful)
    console = Console(width=width)
    width = width - 4 * fancy

    renders = []

    header = Text(" ➜ ", styler("path-separator")).join(
        text(step.name, styler("path")) for step in command.path
    )
    renders.append(header)

    if command.descr:
        renders.append(text(command.descr, styler("description-section")))

    renders.append(Text("\n").append(usage_renderable(command, colorful=colorful, width=width)))

    padding = 2
    sections = [("options", None, [
        option for name, option in command.options.items() if option.group is None and name != "help"
    ] + [command.options["help"]])]
    for group in command.groups.values():
        sections.append((group.name, group, list(group.options)))

    labels = [_label(option, styler, text) for _, _, options in sections for option in options]
    indent = min(max(map(len, labels)) + padding + 2, width // 2)

    for title, group, options in sections:
        block = Text("\n")
        block.append(text(title, styler("group-label")))
        if group is not None:
            block.append(" (").append(text(group.describe(), styler("group-constraint"))).append(")")
        block.append(":")
        if group is not None and group.descr:
            block.append("\n").append(" " * padding).append(text(group.descr, styler("argument-description")))

        for option in options:
            section = Text(" " * padding).append(_label(option, styler, text))

            descr = text(option.descr, styler("argument-description"))
            if option.required:
                descr.append(" " * bool(descr)).append(text("(required)", styler("required")))
            elif option.default is not None:
                descr.append(" " * bool(descr)).append("[default: ").append(
                    text(option.default or '""', styler("default"))
                ).append("]")

            if descr:
                if len(section) + 2 > indent:
                    section.append("\n").append(" " * indent)
                else:
                    section.append(" " * (indent - len(section)))
                wrapped = descr.wrap(console, max(width - indent, 16))
                section.append(wrapped.pop(0))
                for line in wrapped:
                    section.append("\n").append(" " * indent).append(line)

            block.append("\n").append(section)
        renders.append(block)

    if command.children:
        renders.append(Text(""))
        table = Table(
            "name", "help",
            title=text("subcommands", styler("children-title")),
            width=int(width * (2 / 3)),
            box=ROUNDED,
            style=styler("children-table"),
            header_style=styler("children-title"),
        )
        for name, child in command.children.items():
            if child.descr:
                help = text(child.descr, styler("children-description"))
            else:
                route = " ".join(step.name for step in child.path)
                help = text(f"no description, run '{route} --help' for details", styler("children-description"))
            table.add_row(text(name, styler("children")), help)
        renders.append(table)

    renderable = Group(*renders)

    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{" ".join(step.name for step in command.path)} HELP".upper(), " ", "]",
                                style=styler("panel-title")),
            title_align="left",
        )

    return renderable


def render_help(command, /, *, colorful=False, fancy=False, width=80):
    """
    Return the help page of a command as a string.

    With colorful=True the string carries ANSI styles; otherwise it is plain.
    """
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width,
        force_terminal=colorful,
        color_system="truecolor" if colorful else None,
        highlight=False,
    )
    console.print(help_renderable(command, colorful=colorful, fancy=fancy, width=width))
    return buffer.getvalue()


__all__ = (
    "stylist",
    "usage_renderable",
    "render_usage",
    "help_renderable",
    "render_help",
)
