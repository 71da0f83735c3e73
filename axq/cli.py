"""
axq - query and drive the macOS accessibility tree.

    axq apps
    axq find --role AXButton --title OK --app Finder
    axq click ax://812/0.0.3.1
    axq menu --contains --case-insensitive "settings..."
    axq --fixture tree.json -j elements --depth 2

Exit codes: 0 ok, 1 not found, 2 app not found, 3 timeout,
4 accessibility permission denied, 5 invalid arguments.
"""

import argparse
import sys

from . import commands
from .commands import Context, Options
from .errors import AXQueryError, ExitCode, InvalidArguments
from .output import JSON, TEXT, emit_error, emit_ok, parse_format
from .query import Predicate
from .titles import MatchOptions


class ArgParser(argparse.ArgumentParser):
    """Reports usage errors as InvalidArguments instead of exiting."""

    def error(self, message):
        raise InvalidArguments(message)


def _format_arg(value):
    fmt = parse_format(value)
    if fmt is None:
        raise argparse.ArgumentTypeError("Invalid format")
    return fmt


def _add_global_options(parser, suppress=False):
    """Global options; on subcommands they default to SUPPRESS so values given before the command survive."""
    def default(value):
        return argparse.SUPPRESS if suppress else value

    g = parser.add_argument_group("global options")
    g.add_argument("--app", default=default(None), help="target app by name or bundle id")
    g.add_argument("--pid", type=int, default=default(None), help="target app by process id")
    g.add_argument("--bundle", default=default(None), help="target app by bundle id")
    g.add_argument("--timeout", type=float, default=default(commands.DEFAULT_TIMEOUT),
                   help="seconds for wait (default: 5)")
    g.add_argument("--verbose", action="store_true", default=default(False),
                   help="print diagnostics to stderr")
    g.add_argument("--quiet", action="store_true", default=default(False), help="print nothing")
    g.add_argument("--format", type=_format_arg, default=default(TEXT), help="text or json")
    g.add_argument("-j", dest="format", action="store_const", const=JSON, default=default(TEXT),
                   help="shorthand for --format json")
    g.add_argument("--fixture", default=default(None),
                   help="read the tree from a JSON dump instead of the live system")


def _add_query_options(parser):
    parser.add_argument("--role")
    parser.add_argument("--title")
    parser.add_argument("--text")
    parser.add_argument("--identifier")
    parser.add_argument("--window", help="restrict to the first window whose title contains this")


def _add_match_options(parser):
    parser.add_argument("--contains", action="store_true")
    parser.add_argument("--case-insensitive", action="store_true")
    parser.add_argument("--normalize-ellipsis", action="store_true")


def _predicate(args, role=None):
    return Predicate(
        role=args.role or role,
        title=args.title,
        identifier=args.identifier,
        text=args.text,
        text_descendants=getattr(args, "descendants", False),
    )


def _match_options(args):
    return MatchOptions(
        contains=args.contains,
        case_insensitive=args.case_insensitive,
        normalize_ellipsis=args.normalize_ellipsis,
    )


# ---------------- Handlers ----------------
def _find(ctx, args):
    role = args.role_positional if not (args.role or args.title or args.identifier or args.text) else None
    return commands.find(ctx, _predicate(args, role), window=args.window,
                         ancestor_role=args.ancestor_role, click=args.click)


def _click(ctx, args):
    target = args.target
    if target and not target.startswith("ax://"):
        return commands.click(ctx, predicate=_predicate(args, target), window=args.window)
    return commands.click(ctx, target=target, predicate=_predicate(args), window=args.window)


def _key(ctx, args):
    return commands.key(ctx, shortcut=args.shortcut, raw=args.raw, list_keys=args.list)


def _window(ctx, args):
    return commands.window(ctx, args.action, args.id, args.a, args.b)


def _menu(ctx, args):
    return commands.menu(ctx, args.path, _match_options(args), list_children=args.list)


def _statusbar(ctx, args):
    name = " ".join(args.item) if args.item else None
    return commands.statusbar(ctx, name, _match_options(args), list_all=args.list,
                              list_menu=args.menu)


def build_parser():
    parser = ArgParser(prog="axq", description="Query and drive the macOS accessibility tree.")
    _add_global_options(parser)
    common = ArgParser(add_help=False)
    _add_global_options(common, suppress=True)

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    def add(name, handler, help_text):
        p = sub.add_parser(name, parents=[common], help=help_text)
        p.set_defaults(handler=handler)
        return p

    add("apps", lambda ctx, a: commands.apps(ctx), "list running apps")

    p = add("elements", lambda ctx, a: commands.elements(ctx, a.depth, a.window), "dump the element tree")
    p.add_argument("--depth", type=int, default=commands.ELEMENT_DEPTH)
    p.add_argument("--window")

    p = add("outline-rows", lambda ctx, a: commands.outline_rows(ctx, a.outline, a.window),
            "list rows of an outline")
    p.add_argument("--outline")
    p.add_argument("--window")

    p = add("find", _find, "find elements")
    p.add_argument("role_positional", nargs="?", metavar="role")
    _add_query_options(p)
    p.add_argument("--ancestor-role")
    p.add_argument("--descendants", "--desc", action="store_true",
                   help="also match --text against descendants")
    p.add_argument("--click", action="store_true", help="click the first match")

    p = add("element-at", lambda ctx, a: commands.element_at(ctx, a.x, a.y), "element under a point")
    p.add_argument("x", type=float)
    p.add_argument("y", type=float)

    p = add("click", _click, "click an element by id or query")
    p.add_argument("target", nargs="?", help="ax:// id, or a role")
    _add_query_options(p)

    p = add("click-at", lambda ctx, a: commands.click_at(ctx, a.x, a.y, a.double, a.right),
            "click at a screen point")
    p.add_argument("x", type=float)
    p.add_argument("y", type=float)
    p.add_argument("--double", action="store_true")
    p.add_argument("--right", action="store_true")

    p = add("type", lambda ctx, a: commands.type_text(ctx, a.text, a.delay), "type text")
    p.add_argument("text")
    p.add_argument("--delay", type=int, default=0, help="milliseconds between characters")

    p = add("key", _key, "press a key chord")
    p.add_argument("shortcut", nargs="?", help="e.g. cmd+shift+p, f12, fn+f12")
    p.add_argument("--raw", type=int, help="virtual key code")
    p.add_argument("--list", action="store_true", help="list supported key names")

    add("keys", lambda ctx, a: commands.keys(ctx), "list supported key names")

    p = add("set-value", lambda ctx, a: commands.set_value(ctx, a.id, a.value), "set AXValue")
    p.add_argument("id")
    p.add_argument("value")

    p = add("scroll", lambda ctx, a: commands.scroll(ctx, a.direction, a.amount, a.element), "scroll")
    p.add_argument("direction", nargs="?", default="down", choices=("up", "down"))
    p.add_argument("--amount", type=int, default=1)
    p.add_argument("--element")

    p = add("exists", lambda ctx, a: commands.exists(ctx, _predicate(a), a.window),
            "succeed if an element matches")
    _add_query_options(p)

    p = add("wait", lambda ctx, a: commands.wait(ctx, _predicate(a), a.window, a.gone),
            "wait for an element to appear or disappear")
    _add_query_options(p)
    p.add_argument("--gone", action="store_true")

    p = add("assert", lambda ctx, a: commands.assert_element(ctx, _predicate(a), a.window, a.enabled,
                                                             a.checked, a.value),
            "check state of the first matching element")
    _add_query_options(p)
    p.add_argument("--enabled", action="store_true")
    p.add_argument("--checked", action="store_true")
    p.add_argument("--value")

    add("windows", lambda ctx, a: commands.windows(ctx), "list windows")

    p = add("window", _window, "focus, minimize, fullscreen, resize or move a window")
    p.add_argument("action", choices=commands.WINDOW_ACTIONS)
    p.add_argument("id")
    p.add_argument("a", nargs="?", type=float)
    p.add_argument("b", nargs="?", type=float)

    add("menus", lambda ctx, a: commands.menus(ctx), "dump the app menu bar")

    p = add("menu", _menu, "press or list a menu item by path")
    p.add_argument("path", nargs="*")
    _add_match_options(p)
    p.add_argument("--list", action="store_true", help="list the children at path")

    p = add("statusbar", _statusbar, "list, press or open status bar items")
    p.add_argument("item", nargs="*")
    _add_match_options(p)
    p.add_argument("--list", action="store_true")
    p.add_argument("--menu", action="store_true")

    return parser


def _sniff_output(argv):
    """Best-effort (format, quiet) from raw argv, for reporting parse errors."""
    fmt, quiet = TEXT, False
    for i, arg in enumerate(argv):
        if arg == "-j":
            fmt = JSON
        elif arg == "--quiet":
            quiet = True
        elif arg == "--format" and i + 1 < len(argv):
            fmt = parse_format(argv[i + 1]) or fmt
        elif arg.startswith("--format="):
            fmt = parse_format(arg.split("=", 1)[1]) or fmt
    return fmt, quiet


def build_context(options: Options) -> Context:
    if options.fixture:
        from .memory import RecordingActuator, load_fixture
        try:
            provider = load_fixture(options.fixture)
        except (OSError, ValueError, KeyError) as e:
            raise InvalidArguments(f"Cannot load fixture {options.fixture}: {e}") from e
        return Context(provider, RecordingActuator(), options)

    from .actuator import Actuator
    from .macos import MacProvider
    return Context(MacProvider(), Actuator(debug=options.verbose), options)


def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    if not argv or argv[0] == "help":
        print(parser.format_help())
        return ExitCode.SUCCESS

    fmt, quiet = _sniff_output(argv)
    try:
        args = parser.parse_args(argv)
        if args.command is None:
            print(parser.format_help())
            return ExitCode.SUCCESS
        options = Options(
            app=args.app, pid=args.pid, bundle=args.bundle, timeout=args.timeout,
            verbose=args.verbose, quiet=args.quiet, format=args.format, fixture=args.fixture,
        )
        fmt, quiet = options.format, options.quiet
        ctx = build_context(options)
        data = args.handler(ctx, args)
    except AXQueryError as e:
        emit_error(e.message, fmt, quiet)
        return e.exit_code
    emit_ok(data, fmt, quiet)
    return ExitCode.SUCCESS


if __name__ == "__main__":
    sys.exit(main())
