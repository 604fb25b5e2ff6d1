"""
Helmsman help, usage and version renderers (rich based, color aware).

Renderers only read the command model and return rich renderables; printing
and exiting belong to Program.run().

- render_usage(command): one line, e.g.
    usage: git remote add [-h] [-f] [-t <branch>] <name> <url>
  Flags and options collapse into "[options]" when there are more than 8.
- render_help(command): header, usage, flags/options/arguments sections and
  a subcommand table grouped by topic label.
- render_version(program): "name — version" plus the authors.

Palette keys
- usage-label, program-name, summary, version
- group-label, flag-name, option-name, tag, argument-name, description, default, required
- children-title, children-table, children, children-description
- authors-label, authors-dot, author

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- colorful=False strips every style.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Group
from rich.table import Table
from rich.text import Text

from .utils import pluralize

PALETTE = {
    # === Head sections ===
    "usage-label": "bold #00E6FF",  # CYAN → signature info color
    "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
    "summary": "italic #A3A3A3",  # Neutral gray
    "version": "dim",

    # === Groups / entries ===
    "group-label": "bold #FFFFFF",  # Pure white headers
    "flag-name": "bold #22C55E",  # GREEN for flags
    "option-name": "bold #00E6FF",  # CYAN for options
    "tag": "bold #FFD600",  # AMBER for placeholders
    "argument-name": "bold #FFD600",
    "description": "#9CA3AF",  # Muted gray
    "default": "italic #9CA3AF",
    "required": "bold #EF4444",

    # === Children table ===
    "children-title": "bold #FFFFFF",
    "children-table": "#4B5563",  # Slate border
    "children": "bold #36C5F0",  # Sky-blue subcommands
    "children-description": "#9CA3AF",

    # === Version ===
    "authors-label": "bold #FFD600",
    "authors-dot": "#FFD600 dim",
    "author": "#E5E7EB",
}


def _palette(colorful):
    styles = defaultdict(str, PALETTE | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        return Text(str(fragment), styler(style))

    return styler, text


def _forms(entry, text, style):
    forms = []
    if entry.short is not None:
        forms.append(text("-" + entry.short, style))
    if entry.long is not None:
        forms.append(text("--" + entry.long, style))
    return forms


def render_usage(command, /, colorful=True):
    styler, text = _palette(colorful)

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(" ".join(command.chain), styler("program-name"))

    flags, options = command.flags.values(), command.options.values()
    inputs = []
    if len(flags) + len(options) > 8:
        inputs.append(Text("[options]"))
    else:
        for flag in flags:
            inputs.append(Text.assemble("[", _forms(flag, text, "flag-name")[0], "]"))
        for option in options:
            item = Text.assemble(_forms(option, text, "option-name")[0], " <", text(option.tag, "tag"), ">")
            inputs.append(item if option.is_required else Text.assemble("[", item, "]"))

    for argument in command.arguments.values():
        tag = text(argument.tag, "argument-name")
        item = Text.assemble("<", tag, ">") if argument.is_required else Text.assemble("[", tag, "]")
        if argument.is_repeating:
            item.append(" ...")
        inputs.append(item)

    if command.commands:
        inputs.append(Text("<command>" if command.default_command_name is None else "[command]"))

    for item in inputs:
        usage.append(" ").append(item)
    return usage


def render_help(command, /, colorful=True):
    styler, text = _palette(colorful)
    renders = []

    header = text(command.name, "program-name")
    if command.summary:
        header.append(": ").append(text(command.summary, "summary"))
    if command.version:
        header.append(" ").append(text(f"({command.version})", "version"))
    renders.append(header)
    renders.append(render_usage(command, colorful=colorful).append("\n"))

    sections = (
        ("flag", command.flags.values()),
        ("option", command.options.values()),
        ("argument", command.arguments.values()),
    )
    for kind, entries in sections:
        if not entries:
            continue
        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=True)
        table.add_column()
        for entry in entries:
            match kind:
                case "flag":
                    names = Text(", ").join(_forms(entry, text, "flag-name"))
                case "option":
                    names = Text.assemble(
                        Text(", ").join(_forms(entry, text, "option-name")), "=", text(entry.tag, "tag")
                    )
                case _:
                    names = text(entry.tag, "argument-name")
            description = text(entry.description or "", "description")
            if entry.is_required and kind == "option":
                description.append(" ").append(text("(required)", "required"))
            if entry.defaults:
                description.append(" ").append(text(f"(default: {', '.join(entry.defaults)})", "default"))
            table.add_row(Text.assemble("  ", names), description)
        renders.append(text(f"{pluralize(kind)}:", "group-label"))
        renders.append(table)
        renders.append(Text(""))

    if command.commands:
        groups = {}
        for name, child in command.commands.items():
            groups.setdefault(child.group, []).append((name, child))
        for label, children in groups.items():
            title = label or pluralize("subcommand" if command.parent else "command")
            table = Table(
                "name", "help",
                title=text(title, "children-title"),
                box=ROUNDED,
                style=styler("children-table"),
                header_style=styler("children-title"),
            )
            for name, child in children:
                marker = " (default)" if name == command.default_command_name else ""
                table.add_row(
                    text(name + marker, "children"),
                    text(child.summary or f"run '{' '.join(child.chain)} --help' for details", "children-description"),
                )
            renders.append(table)

    while renders and isinstance(renders[-1], Text) and not renders[-1].plain:
        renders.pop()
    return Group(*renders)


def render_version(program, /, colorful=True):
    styler, text = _palette(colorful)
    renders = [Text(" — ").join((
        text(program.name, "program-name"),
        text(program.version or "1.0", "version"),
    ))]

    if program.authors:
        authors = Text()
        authors.append(text("authors", "authors-label")).append(":")
        for author in program.authors:
            authors.append("\n").append(text(" • ", "authors-dot")).append(text(author, "author"))
        renders.append(authors)

    return Group(*renders)


__all__ = (
    "render_usage",
    "render_help",
    "render_version",
)
