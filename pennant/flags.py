"""
Pennant flag sets: declare flags, parse argument lists, inspect the result.

What this module provides
- Flag: the record of one declared option (name, shortcut, usage, value, default text).
- ErrorHandling: what a flag set does once a parse fault has been reported
  (CONTINUE raises it to the caller, EXIT leaves the process, ABORT raises ParseAbort).
- FlagSet: the registry and parser.
- commandline() / parse(): the lazily-built, process-wide flag set for sys.argv.

Command-line grammar
    --name            boolean flags become true; other flags take the next token
    --name=value      inline value (split at the first '=' after the name's first char)
    --name value      non-boolean flags only
    -c  -cvalue  -c=value
    -abc              bundled shortcuts; booleans are set to true until a
                      non-boolean one swallows the rest of the cluster as its value
    --                ends flag parsing; everything after is positional
    -                 a bare dash is positional
Flags and positionals may be interleaved; positionals are collected in order.

Quick start
    from pennant import FlagSet

    flags = FlagSet("tool")
    verbose = flags.bool("verbose", False, "say more", shortcut="v")
    count = flags.int("count", 1, "how many times")
    flags.parse(["-v", "--count=3", "file.txt"])

    verbose.value, count.value, flags.args   # True, 3, ('file.txt',)

Concurrency
- A FlagSet is a plain mutable object without internal locking. Declaring or
  parsing against the same flag set from several threads must be serialised by
  the caller; this includes the process-wide commandline() flag set.
"""
import functools
import sys
from collections import defaultdict, deque
from collections.abc import Iterable
from enum import IntEnum

from rich.console import Console
from rich.text import Text

from .faults import *
from .faults import echo
from .literals import quote
from .utils import *
from .values import *


class ErrorHandling(IntEnum):
    """
    policy applied after a parse fault has been reported.

    - CONTINUE: the fault (ParseError or HelpRequested) propagates to the caller.
    - EXIT: the process exits with status 2 (status 0 for help requests).
    - ABORT: ParseAbort is raised, carrying the fault.
    """
    CONTINUE = 0
    EXIT = 1
    ABORT = 2


class Flag:
    """
    One declared flag.

    The default text is captured once, at declaration, from str(value) and
    never changes afterwards; it is what the defaults listing shows.
    """

    __introspectable__ = (
        "name",
        "shortcut",
        "usage",
        "value",
        "default",
    )

    def __init__(self, name, shortcut, usage, value, default):
        self._name = name
        self._shortcut = shortcut
        self._usage = usage
        self._value = value
        self._default = default

    name = mirror("name")
    shortcut = mirror("shortcut")
    usage = mirror("usage")
    value = mirror("value")
    default = mirror("default")

    def __repr__(self):
        return "flag(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


def _allocator(kind, method):
    """
    Build the allocating declaration method for a value kind.

    The generated method wraps a fresh Cell, registers it, and returns the
    Cell so the caller can read .value after parsing.
    """

    @rename(method)
    def allocate(self, name, default=kind.__zero__, usage="", *, shortcut=""):
        value = kind(default)
        self.var(value, name, usage, shortcut=shortcut)
        return value.target

    allocate.__doc__ = (
        f"Declare a {kind.__typename__} flag stored in a new Cell and return the Cell.\n\n"
        f"The Cell holds `default` until parsing or set() changes it."
    )
    return allocate


def _binder(kind, method):
    """
    Build the binding declaration method for a value kind.

    The generated method stores the flag value into caller-owned storage:
    target.<attribute> for objects, target[attribute] for mappings. The
    attribute defaults to "value" for a Cell and to the flag name with '-'
    replaced by '_' otherwise.
    """

    @rename(method)
    def bind(self, target, name, default=kind.__zero__, usage="", *, shortcut="", attribute=Unset):
        if not isinstance(name, str):
            raise TypeError("flag name must be a string")
        if attribute is Unset:
            attribute = "value" if isinstance(target, Cell) else name.replace("-", "_")
        return self.var(kind(default, target, attribute), name, usage, shortcut=shortcut)

    bind.__doc__ = (
        f"Declare a {kind.__typename__} flag stored into caller-owned storage.\n\n"
        f"`default` is written into the storage immediately. Returns the Flag."
    )
    return bind


class FlagSet:
    """
    A registry of flags and the parser that applies an argument list to them.

    State
    - name: used in the usage header and in declaration diagnostics.
    - error_handling: the ErrorHandling policy for parse faults.
    - flags by name and by one-character shortcut (independent namespaces).
    - args: positional arguments left over by the latest parse().
    - parsed: whether parse() has been called.
    - output: diagnostic stream; None means the current sys.stderr.
    - usage: optional zero-argument callable replacing the default usage text.
    - colorful: style diagnostics (palette overridable via __main__.__styles__).

    Faults
    - Declaration faults (duplicate name or shortcut, bad shortcut, empty name)
      write a diagnostic line and raise a DeclarationError right away.
    - Parse faults write one diagnostic line, call the usage callback, then
      follow error_handling. parse() stops at the first fault.
    """

    def __init__(self, name, error_handling=ErrorHandling.CONTINUE, /, *, output=None, colorful=False):
        if not isinstance(name, str):
            raise TypeError("flag set name must be a string")
        self._name = name
        self._error_handling = ErrorHandling(error_handling)
        self._formal = {}
        self._shortcuts = {}
        self._actual = {}
        self._args = []
        self._parsed = False
        self._output = output
        self.colorful = bool(colorful)
        self.usage = None

    name = mirror("name")
    error_handling = mirror("error_handling")
    parsed = mirror("parsed")
    args = mirror("args")

    @property
    def output(self):
        return sys.stderr if self._output is None else self._output

    @output.setter
    def output(self, output):
        self._output = output

    @property
    def narg(self):
        return len(self._args)

    @property
    def nflag(self):
        return len(self._actual)

    def arg(self, index, /):
        """
        The index-th positional argument, or "" when there is no such argument.
        """
        if not 0 <= index < len(self._args):
            return ""
        return self._args[index]

    def __repr__(self):
        return "flagset(name=%r, error_handling=%s, flags=%r)" % (
            self._name, self._error_handling.name, sorted(self._formal)
        )

    def _console(self):
        # one console per write so a replaced sys.stderr or output is honoured
        options = {"soft_wrap": True, "highlight": False, "markup": False, "emoji": False}
        if self._output is None:
            return Console(stderr=True, **options)
        return Console(file=self._output, **options)

    def _styler(self):
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "shortcut": "bold #22C55E",
            "flag-name": "bold #00E6FF",
            "default": "bold #FFD600",
            "flag-usage": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        return styler

    def trigger(self, fault, /, **options):
        """
        Surface a fault through this flag set's console and usage callback.

        Parse and declaration faults always end up raised from here; callers
        write `return self.trigger(...)` to make the exit point explicit.
        """
        return trigger(fault, flagset=self, console=self._console(), usage=self._call_usage, colorful=self.colorful, **options)

    # --- declarations ---------------------------------------------------------

    def var(self, value, name, usage="", *, shortcut=""):
        """
        Declare a flag backed by an external value (anything with set(text) and __str__).

        The default text shown in usage is str(value) at this moment.

        Raises
        - TypeError: value lacks set(), or name/usage/shortcut are not strings.
        - EmptyNameError, RedefinedFlagError, InvalidShortcutError, ReusedShortcutError.
        """
        if not callable(getattr(value, "set", None)):
            raise TypeError("var() value must provide a set() method")
        if not isinstance(name, str):
            raise TypeError("flag name must be a string")
        if not isinstance(usage, str):
            raise TypeError("flag usage must be a string")
        if not isinstance(shortcut, str):
            raise TypeError("flag shortcut must be a string")

        if not name:
            return self.trigger(EmptyNameError("%s flag name cannot be empty" % self._name))
        if name in self._formal:
            return self.trigger(RedefinedFlagError("%s flag redefined: %s" % (self._name, name), name=name))
        if shortcut:
            if len(shortcut) > 1 or not shortcut.isascii():
                return self.trigger(InvalidShortcutError(
                    "%s shorthand more than ASCII character: %s" % (self._name, shortcut),
                    name=name,
                    shortcut=shortcut,
                ))
            if previous := self._shortcuts.get(shortcut):
                return self.trigger(ReusedShortcutError(
                    "%s shorthand reused: %r for %s and %s" % (self._name, shortcut, name, previous.name),
                    name=name,
                    shortcut=shortcut,
                    previous=previous,
                ))

        flag = Flag(name, shortcut, usage, value, str(value))
        self._formal[name] = flag
        if shortcut:
            self._shortcuts[shortcut] = flag
        return flag

    # --- inspection -----------------------------------------------------------

    def lookup(self, name, /):
        """
        The Flag declared under name, or None.
        """
        return self._formal.get(name)

    def visit_all(self, callback, /):
        """
        Call callback(flag) for every declared flag, in name order.
        """
        for name in sorted(self._formal):
            callback(self._formal[name])

    def visit(self, callback, /):
        """
        Call callback(flag) for every flag set by the latest parse() or by set(), in name order.
        """
        for name in sorted(self._actual):
            callback(self._actual[name])

    def set(self, name, text, /):
        """
        Set a flag by name as if it had been given on the command line.

        Raises
        - UnknownFlagError: no flag has this name.
        - InvalidValueError: the value rejected the text (the original error is chained).
        """
        if (flag := self._formal.get(name)) is None:
            raise UnknownFlagError("no such flag -%s" % name, name=name)
        try:
            flag.value.set(text)
        except ValueError as error:
            raise InvalidValueError("invalid value %s for --%s: %s" % (quote(text), name, error), flag=flag, text=text) from error
        self._actual[name] = flag

    # --- usage ----------------------------------------------------------------

    def print_defaults(self):
        """
        Write one line per flag, in name order:

            -c, --count=1: how many times
            --name="anonymous": who to greet

        String defaults are quoted; flags without a shortcut omit the "-c, " part.
        Usage text is written as given, tabs included.
        """
        console = self._console()
        styler = self._styler()

        def line(flag):
            default = quote(flag.default) if isinstance(flag.value, String) else flag.default
            echo(console, Text.assemble(
                "  ",
                ("-%s, " % flag.shortcut, styler("shortcut")) if flag.shortcut else "",
                ("--" + flag.name, styler("flag-name")),
                "=",
                (default, styler("default")),
                ": ",
                (flag.usage, styler("flag-usage")),
            ))

        self.visit_all(line)

    def print_usage(self):
        """
        The default usage text: a "Usage of <name>:" header and the defaults listing.
        """
        styler = self._styler()
        echo(self._console(), Text.assemble(
            ("Usage of ", styler("usage-label")),
            (self._name, styler("program-name")),
            ":",
        ))
        self.print_defaults()

    def _call_usage(self):
        if self.usage is None:
            self.print_usage()
        else:
            self.usage()

    # --- parsing --------------------------------------------------------------

    def parse(self, arguments, /):
        """
        Parse an argument list (without the program name) into the declared flags.

        Resets the positional arguments and the record of set flags, then walks
        the tokens once. The first fault stops parsing and is handled according
        to error_handling; returns None on success.

        Raises (under ErrorHandling.CONTINUE)
        - ParseError subclasses for user mistakes.
        - HelpRequested for --help / -h when no such flag is declared.
        """
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = deque(arguments)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        self._parsed = True
        self._args = []
        self._actual = {}

        try:
            self._parseargs(tokens)
        except (ParseError, HelpRequested) as fault:
            match self._error_handling:
                case ErrorHandling.CONTINUE:
                    raise
                case ErrorHandling.EXIT:
                    sys.exit(0 if isinstance(fault, HelpRequested) else 2)
                case ErrorHandling.ABORT:
                    raise ParseAbort(fault) from fault

    def _parseargs(self, tokens):
        while tokens:
            token = tokens.popleft()

            if not token or token[0] != "-" or len(token) == 1:
                self._args.append(token)
                continue

            if token[1] == "-":
                if len(token) == 2:
                    # "--" terminates the flags
                    self._args.extend(tokens)
                    return
                flag, value = self._resolve_long(token)
            else:
                flag, value = self._resolve_cluster(token)

            if isboolean(flag.value):
                self._coerce(flag, token, coalesce(value, "true"))
                continue

            if value is Unset:
                if not tokens:
                    return self.trigger(MissingArgumentError("flag needs an argument: %s" % token, flag=flag, token=token))
                value = tokens.popleft()
            self._coerce(flag, token, value)

    def _resolve_long(self, token):
        """
        Resolve '--name' / '--name=value' into (flag, inline value or Unset).
        """
        name = token[2:]
        if name[0] in "-=":
            return self.trigger(BadSyntaxError("bad flag syntax: %s" % token, token=token))

        # name[0] is not '=', so the first '=' can only split after it
        name, separator, value = name.partition("=")
        if (flag := self._formal.get(name)) is None:
            if name == "help":
                return self.trigger(HelpRequested("help requested", token=token))
            return self.trigger(UndefinedFlagError("flag provided but not defined: --%s" % name, name=name, token=token))
        return flag, value if separator else Unset

    def _resolve_cluster(self, token):
        """
        Resolve a '-abc' cluster into (last flag, inline value or Unset).

        Booleans met before the end of the cluster are set to true on the way;
        the first non-boolean takes the remainder of the cluster as its value,
        and "c=value" gives value to c whatever its kind.
        """
        cluster = token[1:]
        value = Unset
        for index, shortcut in enumerate(cluster):
            if (flag := self._shortcuts.get(shortcut)) is None:
                if shortcut == "h":
                    return self.trigger(HelpRequested("help requested", token=token))
                return self.trigger(UndefinedFlagError(
                    "flag provided but not defined: %r in -%s" % (shortcut, cluster),
                    shortcut=shortcut,
                    token=token,
                ))
            if index == len(cluster) - 1:
                break
            if cluster[index + 1] == "=":
                value = cluster[index + 2:]
                break
            if not isboolean(flag.value):
                value = cluster[index + 1:]
                break
            self._coerce(flag, token, "true")
        return flag, value

    def _coerce(self, flag, token, text):
        try:
            flag.value.set(text)
        except ValueError as error:
            if isboolean(flag.value):
                fault = InvalidBooleanError("invalid boolean value %s for %s: %s" % (quote(text), token, error), flag=flag, token=token, text=text)
            else:
                fault = InvalidValueError("invalid value %s for %s: %s" % (quote(text), token, error), flag=flag, token=token, text=text)
            fault.__cause__ = error
            return self.trigger(fault)
        self._actual[flag.name] = flag

    # --- declarations by kind -------------------------------------------------
    # defined last: these names shadow builtins inside the class body

    bool = _allocator(Bool, "bool")
    bool_var = _binder(Bool, "bool_var")
    int = _allocator(Int, "int")
    int_var = _binder(Int, "int_var")
    int64 = _allocator(Int64, "int64")
    int64_var = _binder(Int64, "int64_var")
    uint = _allocator(Uint, "uint")
    uint_var = _binder(Uint, "uint_var")
    uint64 = _allocator(Uint64, "uint64")
    uint64_var = _binder(Uint64, "uint64_var")
    str = _allocator(String, "str")
    str_var = _binder(String, "str_var")
    float = _allocator(Float, "float")
    float_var = _binder(Float, "float_var")
    duration = _allocator(Duration, "duration")
    duration_var = _binder(Duration, "duration_var")


@functools.cache
def commandline():
    """
    The process-wide flag set for sys.argv, built once on first use.

    Named after __main__.__prog__ when the host defines it, else sys.argv[0];
    uses ErrorHandling.EXIT like a conventional command-line tool.
    """
    main = __import__("__main__")
    name = getattr(main, "__prog__", sys.argv[0] if sys.argv else "pennant")
    return FlagSet(name, ErrorHandling.EXIT)


def parse(arguments=Unset, /):
    """
    Parse sys.argv[1:] (or the given list) into the commandline() flag set.
    """
    commandline().parse(coalesce(arguments, sys.argv[1:]))


__all__ = (
    "ErrorHandling",
    "Flag",
    "FlagSet",
    "commandline",
    "parse",
)
