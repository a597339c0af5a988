"""
Argscope renderers: help, usage, synopsis, options listing and version.

Every renderer reads the registry through its public views only and prints to
stdout with rich. Styling follows the registry's `colorful` and `fancy` flags:

- colorful: apply the palette below (plain text otherwise).
- fancy: wrap the output in a rich Panel.

Palette keys
- usage-label, program-name, subcommand-name, description-section
- group-label, flag-name, option-name, metavar, choice, default, argument-description
- children-title, children-table, children, children-description, name-column
- notes-label, notes-dot, note
- program-version, license-label, license-section
- panel-title, panel-subtitle

Define a mapping named __styles__ in __main__ to override any palette entry.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .declarations import Kind

_palette = {
    # === Head sections ===
    "usage-label": "bold #00E6FF",  # CYAN → signature info color
    "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
    "subcommand-name": "bold #36C5F0",  # SKY-BLUE → softer than cyan
    "description-section": "italic #A3A3A3",  # Neutral gray

    # === Groups / entries ===
    "group-label": "bold #FFFFFF",  # Pure white headers
    "flag-name": "bold #22C55E",  # GREEN for flags and bools
    "option-name": "bold #00E6FF",  # CYAN for valued parameters
    "metavar": "bold #FFD600",  # AMBER for placeholders
    "choice": "bold #FF4D94",  # MAGENTA → choices stand out
    "default": "dim #9CA3AF",
    "argument-description": "#9CA3AF",  # Muted gray

    # === Children table ===
    "children-title": "bold #FFFFFF",
    "children-table": "#4B5563",  # Slate border
    "children": "bold #36C5F0",  # Sky-blue subcommands
    "children-description": "#9CA3AF",
    "name-column": "",

    # === Notes ===
    "notes-label": "bold #00E6FF",
    "notes-dot": "#00E6FF dim",
    "note": "#D1D5DB",

    # === Version ===
    "program-version": "bold #00E6FF",
    "license-label": "bold #FFFFFF",
    "license-section": "#9CA3AF",

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",
    "panel-subtitle": "#9CA3AF",
}


def _toolkit(registry, /):
    """
    Internal: build the (styler, text) pair honouring the registry's colorful flag.
    """
    styles = defaultdict(str, _palette | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if registry.colorful else ""

    def text(fragment, style=""):
        # Normalize to Rich Text. In non-colorful mode, strip styles; preserve existing Text spans.
        if not fragment:
            return Text("")
        if not registry.colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    return styler, text


def _emit(registry, renders, title, /):
    console = Console()
    renderable = Group(*renders)
    if registry.fancy:
        styler, text = _toolkit(registry)
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", title.upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
            subtitle=text(registry.license, styler("panel-subtitle")) or None,
        )
    console.print(renderable)


def _choices(registry, parameter, /):
    styler, text = _toolkit(registry)
    return Text.assemble(
        "{",
        Text(",").join(text(value, styler("choice")) for value in registry.choices(parameter.scope, parameter.name)),
        "}"
    )


def _form(registry, parameter, /):
    """
    Internal: the command-line form of one entry ("-v", "--[no-]color",
    "--level <int>", "--mode {fast,slow}", "<path>").
    """
    styler, text = _toolkit(registry)

    if parameter.restricted:
        value = _choices(registry, parameter)
    else:
        value = text(parameter.metavar, styler("metavar"))

    if parameter.required:
        return value

    match parameter.kind:
        case Kind.FLAG:
            return text(f"-{parameter.name}", styler("flag-name"))
        case Kind.BOOL:
            return text(f"--[no-]{parameter.name}", styler("flag-name"))
        case _:
            return Text.assemble(text(f"--{parameter.name}", styler("option-name")), " ", value)


def render_usage(registry, scope, /):
    """
    Build the one-line usage of a scope as a rich Text (not printed).

    The line lists, in order: the program (and subcommand), --help, --version
    when a version exists, the scope's parameters, its arguments in consumption
    order, and "[...]" when unnamed trailing arguments are accepted.
    """
    styler, text = _toolkit(registry)

    usage = Text()
    usage.append(text("usage", styler("usage-label"))).append(":")
    usage.append(" ")
    usage.append(text(registry.program, styler("program-name")))
    if not scope.main:
        usage.append(" ").append(text(scope.name, styler("subcommand-name")))

    inputs = [Text.assemble("[", text("--help", styler("flag-name")), "]")]
    if registry.version:
        inputs.append(Text.assemble("[", text("--version", styler("flag-name")), "]"))
    for parameter in registry.entries(scope.id, required=False):
        inputs.append(Text.assemble("[", _form(registry, parameter), "]"))
    for argument in registry.entries(scope.id, required=True):
        inputs.append(_form(registry, argument))
    if scope.unnamed:
        inputs.append(Text("[...]"))

    for input in inputs:
        usage.append(" ").append(input)
    return usage


def _describe(registry, parameter, /):
    styler, text = _toolkit(registry)

    descr = text(parameter.descr, styler("argument-description"))
    extras = []
    if not parameter.required and (parameter.kind is Kind.INT or parameter.default not in (None, False)):
        extras.append(f"default: {parameter.default}")
    if parameter.restricted and not registry.choices(parameter.scope, parameter.name):
        extras.append("no value accepted")
    if extras:
        descr.append(" " * bool(descr)).append(text(f"({", ".join(extras)})", styler("default")))
    return descr


def _section(registry, label, parameters, /, indent=24):
    styler, text = _toolkit(registry)

    section = Text()
    section.append(text(label, styler("group-label"))).append(":")
    for parameter in parameters:
        form = _form(registry, parameter)
        section.append("\n").append("  ").append(form)
        if descr := _describe(registry, parameter):
            if len(form) + 2 >= indent:
                section.append("\n").append(" " * indent)
            else:
                section.append(" " * (indent - len(form) - 2))
            section.append(descr)
    return section.append("\n")


def render_help(registry, scope, /):
    """
    Print the help of one scope.

    Sections
    - usage line (see render_usage).
    - description.
    - subcommands table (main scope only).
    - parameters, with defaults and allowed values.
    - arguments, in consumption order.
    - a note on unnamed trailing arguments.
    """
    styler, text = _toolkit(registry)
    console = Console()
    width = console.width - 4 * registry.fancy

    renders = [render_usage(registry, scope).append("\n")]

    if scope.descr:
        renders.append(text(scope.descr, styler("description-section")).append("\n"))

    if scope.main and registry.subcommands:
        table = Table(
            "name", "help",
            title=text("subcommands", styler("children-title")),
            width=int(width * (2 / 3)),
            box=ROUNDED,
            style=styler("children-table"),
            header_style=styler("children-title"),
        )
        for child in registry.subcommands:
            if child.descr:
                help = text(child.descr, styler("children-description"))
            else:
                help = Text.assemble(
                    text("no description", styler("children-description")),
                    " — ",
                    text(f"run '{registry.program} {child.name} --help' for details", styler("note")),
                )
            table.add_row(text(child.name, styler("children")), help, style=styler("name-column"))
        renders.append(table)

    if parameters := registry.entries(scope.id, required=False):
        renders.append(_section(registry, "parameters", parameters))

    if arguments := registry.entries(scope.id, required=True):
        renders.append(_section(registry, "arguments", arguments))

    notes = Text()
    notes.append(text("notes", styler("notes-label"))).append(":").append("\n")
    notes.append(text(" • ", styler("notes-dot")))
    if scope.unnamed:
        notes.append(text("unnamed arguments are accepted after the ones above", styler("note")))
    else:
        notes.append(text("unnamed arguments are not accepted", styler("note")))
    renders.append(notes)

    title = f"{registry.program} HELP" if scope.main else f"{registry.program} {scope.name} HELP"
    _emit(registry, renders, title)


def render_version(registry, /):
    """
    Print "<program> — <version>", then the license on its own line when set.
    """
    styler, text = _toolkit(registry)

    renders = [Text(" — ").join((
        text(registry.program, styler("program-name")),
        text(registry.version, styler("program-version")),
    ))]

    if registry.license:
        license = Text()
        license.append(text("license", styler("license-label"))).append(":")
        license.append(" ")
        license.append(text(registry.license, styler("license-section")))
        renders.append(license)

    _emit(registry, renders, f"{registry.program} VERSION")


def render_synopsis(registry, /):
    """
    Print one usage line per scope: the main scope first, then every
    subcommand in declaration order.
    """
    renders = [render_usage(registry, scope) for scope in registry.scopes]
    _emit(registry, renders, f"{registry.program} SYNOPSIS")


def render_options(registry, /):
    """
    Print the full options listing, grouped by scope.
    """
    styler, text = _toolkit(registry)

    renders = []
    for scope in registry.scopes:
        heading = text(registry.program, styler("program-name"))
        if not scope.main:
            heading = Text.assemble(heading, " ", text(scope.name, styler("subcommand-name")))
        renders.append(heading)
        if scope.descr:
            renders.append(text(scope.descr, styler("description-section")))

        body = []
        if parameters := registry.entries(scope.id, required=False):
            body.append(_section(registry, "parameters", parameters))
        if arguments := registry.entries(scope.id, required=True):
            body.append(_section(registry, "arguments", arguments))
        if not body:
            body.append(text("no parameters or arguments\n", styler("note")))
        renders.extend(body)

    renders[-1].rstrip()
    _emit(registry, renders, f"{registry.program} OPTIONS")


__all__ = (
    "render_help",
    "render_usage",
    "render_version",
    "render_synopsis",
    "render_options",
)
