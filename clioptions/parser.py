"""
clioptions parser layer: register option definitions and parse command lines.

What this module provides
- ArgumentParser: an ordered registry of OptionDefinitions with
  • parse(tokens): the GNU-getopt-like state machine producing a ParseResult,
  • render()/help(): the rich-based option listing (forms, defaults, help text),
  • trigger(fault): the single place where parse faults surface (raise or print).
- ParseResult: read-only mapping from canonical keys to values, plus the
  positional arguments under the reserved "_" key.
- ParserState: the transient token queue of one parse() call.
- parse(definitions, tokens): convenience runner for one-off parsers.

Token grammar (applied to each token taken from the front of the queue)
- "--"            ends option processing; every later token is positional.
- "--name"        long option; "--name=value" attaches a value; any unique
                  prefix of a registered long name is accepted ("--verb").
- "-x"            short option; "-xVALUE" attaches a value when x takes one,
                  otherwise "-xyz" is a cluster read as "-x -yz".
- anything else   positional, including a lone "-".

Values
- required values may be attached or taken from the next token, whatever it
  looks like ("--name -v" gives name="-v").
- optional values must be attached; "--color" and "-c" alone leave the value
  absent, recorded as `present`.

Quick start
    from clioptions import ArgumentParser, Arity

    parser = (
        ArgumentParser(prog="tool")
        .add("v", "verbose", Arity.COUNTING, helptext="say more")
        .add("o", "output", Arity.REQUIRED_VALUE)
        .add(None, "tag", Arity.MULTI_VALUE)
    )
    result = parser.parse(["-vv", "--out=a.txt", "--tag", "x", "file"])
    # result["verbose"] == 2, result["output"] == "a.txt"
    # result["tag"] == ["x"], result.positionals == ["file"]
"""
import copy
import difflib
import logging
import os.path
import shlex
import sys
from collections import defaultdict, deque
from collections.abc import Iterable, Mapping

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .faults import *
from .options import Arity, OptionDefinition
from .present import present
from .utils import *

logger = logging.getLogger(__name__)

POSITIONALS = "_"
"""
Reserved result key holding the positional arguments (never a valid option name).
"""


def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth") for nicer phrasing in messages.
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class ParseResult(Mapping):
    """
    Read-only result of one parse() call.

    Every registered definition has exactly one entry under its canonical key
    (long name, else short name), seeded with its default; "_" holds the
    positional arguments in command-line order.

    Value shapes by arity
    - NO_VALUE: bool
    - COUNTING: int
    - REQUIRED_VALUE: str, or None when never given and no default
    - OPTIONAL_VALUE: the default (False unless configured), `present`, or str
    - MULTI_VALUE: list[str], defaults first then command-line order

    Lists are handed out as copies, so results cannot be altered through
    lookups. Two results are equal when their entries are equal.
    """
    __slots__ = ("_values",)

    def __init__(self, definitions=(), /):
        self._values = {POSITIONALS: []}
        for definition in definitions:
            default = definition.default
            self._values[definition.key] = list(default) if definition.arity is Arity.MULTI_VALUE else default

    @property
    def positionals(self):
        return self[POSITIONALS]

    def __getitem__(self, key, /):
        value = self._values[key]
        return list(value) if isinstance(value, list) else value

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"parse-result({self._values!r})"

    def __rich_repr__(self):
        yield from self._values.items()


class ParserState:
    """
    Transient state of a single parse() call.

    - tokens: deque of (position, token) pairs; position is 1-based and survives
      the push-back of a short-option cluster remainder.
    - terminated: True once "--" has been consumed.
    - result: the ParseResult being filled.
    """
    __slots__ = ("tokens", "terminated", "result")

    def __init__(self, tokens, definitions, /):
        self.tokens = deque(enumerate(tokens, start=1))
        self.terminated = False
        self.result = ParseResult(definitions)

    def take(self):
        return self.tokens.popleft()

    def push(self, index, token, /):
        self.tokens.appendleft((index, token))


def _sanitize_tokens(tokens):
    """
    Normalize the parse() input into a list[str].

    - Unset: read tokens from sys.argv[1:] (the program name is dropped).
    - str: shell-like string; split via shlex.split.
    - Iterable[str]: used as-is; empty strings are kept (they are valid values).
    """
    if tokens is Unset:
        return sys.argv[1:]
    if isinstance(tokens, str):
        return shlex.split(tokens)
    if isinstance(tokens, Iterable):
        tokens = list(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class ArgumentParser:
    """
    Ordered registry of option definitions and the parser that applies them.

    Responsibilities
    - Registration: add() builds or accepts OptionDefinitions, in order.
    - Parsing: parse() runs the token state machine and returns a ParseResult.
    - Rendering: render()/help() list every option via rich.
    - Fault surfacing: trigger() raises faults, or in shell mode prints the
      option listing plus the fault on stderr and exits with status 1.

    Sharing
    - parse() snapshots the registry, keeps all per-run state in a ParserState
      and never mutates the definitions, so one parser can serve any number of
      parse() calls, including after a failed one.
    """

    definitions = mirror("definitions")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, *definitions, prog=Unset, shell=False, fancy=False, colorful=True):
        """
        Parameters
        - definitions: OptionDefinition
          Registered in the given order (same as calling add() for each).
        - prog: Unset | str
          Program name for help and fault headers. Defaults to __prog__ in
          __main__, then to the basename of sys.argv[0].
        - shell: bool
          Print faults (with the option listing) and exit instead of raising.
        - fancy: bool
          Box help and faults in rich panels.
        - colorful: bool
          Style help and faults; palette overridable via __styles__ in __main__.
        """
        if not isinstance(prog, str | Unset):
            raise TypeError("argument-parser 'prog' must be a string")
        elif isinstance(prog, str) and not (prog := prog.strip()):
            raise ValueError("argument-parser 'prog' cannot be empty")

        self._prog = prog
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._definitions = []

        for definition in definitions:
            self.add(definition)

    @property
    def prog(self):
        if self._prog is not Unset:
            return self._prog
        try:
            return __import__("__main__").__prog__
        except AttributeError:
            return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "clioptions"

    def __repr__(self):
        return f"argument-parser(prog={self.prog!r}, definitions={self.definitions!r})"

    def add(self, *args, **kwargs):
        """
        Register an option and return the parser (calls can be chained).

        Forms
        - add(definition): register an existing OptionDefinition.
        - add(short, long, arity, default, helptext): build one with the
          OptionDefinition constructor arguments.

        Name collisions are not checked here; looking up a name registered
        more than once fails during parse() with an AmbiguousAbbreviationError.
        """
        if len(args) == 1 and not kwargs and isinstance(args[0], OptionDefinition):
            definition = args[0]
        else:
            definition = OptionDefinition(*args, **kwargs)
        self._definitions.append(definition)
        logger.debug("registered option %s (%s)", " | ".join(definition.forms), definition.arity.name)
        return self

    def trigger(self, fault, /, **options):
        """
        Surface a parse fault with this parser's context.

        In non-shell mode the fault is raised; in shell mode the option listing
        and the fault are printed on stderr and the process exits. Either way
        this method does not return.
        """
        fault = copy.replace(
            fault,
            **options,
            parser=self,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful,
        )
        logger.debug("parse fault %s: %s", fault.options["code"].name, fault.message)
        if self.shell:
            self.help(console=Console(stderr=True))
        trigger(fault)

    def _ambiguous(self, input, index, matches, names):
        """
        fail on a name matching several definitions.

        names are the distinct matched names in registration order; a single
        name means the same option is registered more than once.
        """
        if len(names) > 1:
            message = "option %r at %s position is ambiguous; it abbreviates %s" % (
                input,
                _ordinal(index),
                ", ".join(repr("--" + name) for name in names),
            )
            hint = "type more of the name, for example %r" % ("--" + names[0])
        else:
            message = "option %r at %s position is ambiguous; it is defined %d times" % (
                input,
                _ordinal(index),
                len(matches),
            )
            hint = "keep a single definition for each short and long name"
        self.trigger(AmbiguousAbbreviationError(
            message,
            title="ambiguous option",
            code=FaultCode.AMBIGUOUS_ABBREVIATION,
            input=input,
            index=index,
            candidates=names,
            definitions=tuple(matches),
            hint=hint,
            docs=getdoc(FaultCode.AMBIGUOUS_ABBREVIATION),
        ))

    def _not_found(self, definitions, input, index):
        forms = [form for definition in definitions for form in definition.forms]
        suggestions = difflib.get_close_matches(input, forms, 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "check the available options with '%s --help'" % self.prog
        self.trigger(OptionNotFoundError(
            "unknown option %r at %s position" % (input, _ordinal(index)),
            title="unknown option",
            code=FaultCode.OPTION_NOT_FOUND,
            input=input,
            index=index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.OPTION_NOT_FOUND),
        ))

    def _resolve_long(self, definitions, key, index):
        """
        Resolve a long option key (text after "--", before any "=").

        - exact match on a long name wins;
        - otherwise the key must be a non-empty prefix of exactly one long name;
        - no candidate → OptionNotFoundError, several → AmbiguousAbbreviationError
          listing the distinct full names in registration order.

        A long name registered twice is ambiguous too, whether it is spelled
        out or abbreviated.
        """
        if not (matches := [definition for definition in definitions if definition.long == key]):
            matches = [
                definition for definition in definitions
                if key and definition.long is not None and definition.long.startswith(key)
            ]
            if not matches:
                return self._not_found(definitions, "--" + key, index)

        if len(matches) == 1:
            if matches[0].long != key:
                logger.debug("abbreviation %r resolved to %r", "--" + key, "--" + matches[0].long)
            return matches[0]

        names = tuple(dict.fromkeys(definition.long for definition in matches))
        self._ambiguous("--" + key, index, matches, names)

    def _resolve_short(self, definitions, letter, index):
        """
        Resolve a short option letter by exact match (short names are never abbreviated).
        """
        matches = [definition for definition in definitions if definition.short == letter]
        if not matches:
            return self._not_found(definitions, "-" + letter, index)
        if len(matches) > 1:
            self._ambiguous("-" + letter, index, matches, (letter,))
        return matches[0]

    def _missing(self, definition, input, index):
        self.trigger(MissingArgumentError(
            "option %r at %s position requires a value" % (input, _ordinal(index)),
            title="missing value",
            code=FaultCode.MISSING_ARGUMENT,
            input=input,
            index=index,
            definition=definition,
            hint="pass a value, for example %s" % (
                "%s=<value> or %s <value>" % (input, input) if input.startswith("--") else "%s<value> or %s <value>" % (input, input)
            ),
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        ))

    def _parse_long(self, state, definitions, index, token):
        """
        long-option path: "--key" or "--key=value".

        returns (definition, value) where value is Unset when none was obtained.
        """
        key, separator, value = token[2:].partition("=")
        value = value if separator else Unset

        definition = self._resolve_long(definitions, key, index)
        input = "--" + definition.long

        if value is not Unset and not definition.can_take_value:
            self.trigger(UnexpectedArgumentError(
                "option %r at %s position cannot take a value" % (input, _ordinal(index)),
                title="unexpected value",
                code=FaultCode.UNEXPECTED_ARGUMENT,
                input=input,
                value=value,
                index=index,
                definition=definition,
                hint="remove everything from '=' (for example: %s)" % input,
                docs=getdoc(FaultCode.UNEXPECTED_ARGUMENT),
            ))

        if value is Unset and definition.must_take_value:
            if not state.tokens:
                self._missing(definition, input, index)
            _, value = state.take()

        return definition, value

    def _parse_short(self, state, definitions, index, token):
        """
        short-option path: "-x", "-xVALUE" or a cluster "-xyz".

        the first letter is authoritative: when it can take a value, the rest
        of the token is that value; otherwise the rest is pushed back as "-yz".
        """
        definition = self._resolve_short(definitions, token[1], index)
        input = "-" + definition.short
        remainder = token[2:]
        value = Unset

        if remainder:
            if definition.can_take_value:
                value = remainder
            else:
                logger.debug("cluster remainder %r re-queued at position %d", "-" + remainder, index)
                state.push(index, "-" + remainder)
        elif definition.must_take_value:
            if not state.tokens:
                self._missing(definition, input, index)
            _, value = state.take()

        return definition, value

    @staticmethod
    def _apply(result, definition, value):
        """
        store an occurrence of definition in the result, according to its arity.
        """
        values = result._values
        match definition.arity:
            case Arity.NO_VALUE:
                values[definition.key] = True
            case Arity.COUNTING:
                values[definition.key] += 1
            case Arity.REQUIRED_VALUE | Arity.OPTIONAL_VALUE:
                values[definition.key] = coalesce(value, present)
            case Arity.MULTI_VALUE:
                values[definition.key].append(value)

    def parse(self, tokens=Unset, /):
        """
        Parse command-line tokens into a ParseResult.

        Parameters
        - tokens:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, program name excluded.

        Returns
        - ParseResult with every registered option (default or parsed value)
          and the positional arguments under "_".

        Raises
        - OptionNotFoundError, AmbiguousAbbreviationError,
          UnexpectedArgumentError, MissingArgumentError: malformed input; the
          first one found stops parsing. A name registered twice is reported
          as ambiguous.
        - TypeError: tokens is not a string or an iterable of strings.
        """
        definitions = tuple(self._definitions)
        state = ParserState(_sanitize_tokens(tokens), definitions)
        logger.debug("parsing %d token(s) against %d option(s)", len(state.tokens), len(definitions))

        while state.tokens:
            index, token = state.take()

            if token == "--" and not state.terminated:
                logger.debug("terminator at position %d", index)
                state.terminated = True
                continue

            if state.terminated:
                state.result._values[POSITIONALS].append(token)
                continue

            if token.startswith("--"):
                definition, value = self._parse_long(state, definitions, index, token)
            elif token.startswith("-") and len(token) > 1:
                definition, value = self._parse_short(state, definitions, index, token)
            else:
                state.result._values[POSITIONALS].append(token)
                continue

            self._apply(state.result, definition, value)

        return state.result

    def _forms(self, definition, styler):
        """
        Yield the styled command-line spellings of a definition.
        """
        placeholder = "<ARG>"
        if definition.short is not None:
            name = "-" + definition.short
            if definition.must_take_value:
                yield Text.assemble((name, styler("option-name")), (placeholder, styler("metavar")))
                yield Text.assemble((name, styler("option-name")), " ", (placeholder, styler("metavar")))
            elif definition.can_take_value:
                yield Text.assemble((name, styler("option-name")), "[", (placeholder, styler("metavar")), "]")
            else:
                yield Text(name, styler("option-name"))
        if definition.long is not None:
            name = "--" + definition.long
            if definition.must_take_value:
                yield Text.assemble((name, styler("option-name")), "=", (placeholder, styler("metavar")))
                yield Text.assemble((name, styler("option-name")), " ", (placeholder, styler("metavar")))
            elif definition.can_take_value:
                yield Text.assemble((name, styler("option-name")), "[=", (placeholder, styler("metavar")), "]")
            else:
                yield Text(name, styler("option-name"))

    @staticmethod
    def _describe(definition):
        """
        Describe the kind and default of a definition in one line.
        """
        default = definition.default
        match definition.arity:
            case Arity.NO_VALUE:
                return "switch; default value is %s" % ("true" if default else "false")
            case Arity.COUNTING:
                return "accumulating switch; default value is %d" % default
            case Arity.REQUIRED_VALUE:
                return "option requiring a value; %s" % (
                    "no default value" if default is None else "default value is '%s'" % default
                )
            case Arity.OPTIONAL_VALUE:
                return "option with an optional value; default value is %s" % (
                    "unset" if default is False else "set" if default is present else "'%s'" % default
                )
            case Arity.MULTI_VALUE:
                return "requires a value and can be used multiple times; %s" % (
                    "default values are %s" % ", ".join("'%s'" % value for value in default) if default else "no default values"
                )

    def render(self):
        """
        Build the option listing as a rich renderable.

        Layout
        - usage line: "usage: <prog> [options] [--] [arguments]"
        - per option, in registration order: its spellings (with <ARG>,
          [<ARG>] or [=<ARG>] placeholders by arity), a line describing its
          kind and default, and its help text when present.

        Palette keys
        - usage-label, program-name, usage-section, group-label
        - option-name, metavar, option-description, option-help
        - panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
            "group-label": "bold #FFFFFF",  # Pure white headers

            "option-name": "bold #00E6FF",  # CYAN for options
            "metavar": "bold #FFD600",  # AMBER for parameters
            "option-description": "#9CA3AF",  # Muted gray
            "option-help": "#D1D5DB",

            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not self.colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        usage = Text()
        usage.append("usage", styler("usage-label")).append(": ")
        usage.append(self.prog, styler("program-name"))
        if self._definitions:
            usage.append(" [options]", styler("usage-section"))
        usage.append(" [--] [arguments]", styler("usage-section"))

        renders = [usage]

        if self._definitions:
            renders.append(Text())
            renders.append(Text.assemble(("options", styler("group-label")), ":"))

        for definition in self._definitions:
            for form in self._forms(definition, styler):
                renders.append(Text.assemble("  ", form))
            renders.append(Text.assemble("      ", text(self._describe(definition), styler("option-description"))))
            if definition.helptext is not None:
                renders.append(Text.assemble("      ", text(definition.helptext, styler("option-help"))))

        if self.fancy:
            return Panel(Group(*renders[1:]), title=usage, title_align="left")
        return Group(*renders)

    def help(self, console=Unset):
        """
        Print the option listing (stdout unless a console is given).
        """
        coalesce(console, Console()).print(self.render())


def parse(definitions, tokens=Unset, /, **options):
    """
    Convenience runner: build a parser from definitions and parse tokens once.

    Parameters
    - definitions: Iterable[OptionDefinition]
    - tokens: see ArgumentParser.parse.
    - options: forwarded to ArgumentParser (prog, shell, fancy, colorful).
    """
    return ArgumentParser(*definitions, **options).parse(tokens)


__all__ = (
    "POSITIONALS",
    "ArgumentParser",
    "ParseResult",
    "ParserState",
    "parse",
)
