from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Iterator, Sequence, Union

from hookrun.core.errors import OptionSyntaxError
from hookrun.options.table import OPTIONS, OptionSpec


class MatchKind(Enum):
    NOT_FOUND = auto()
    FLAG = auto()
    VALUE = auto()


@dataclass(frozen=True)
class NotFound:
    kind: ClassVar[MatchKind] = MatchKind.NOT_FOUND


@dataclass(frozen=True)
class FlagMatch:
    spec: OptionSpec
    kind: ClassVar[MatchKind] = MatchKind.FLAG


@dataclass(frozen=True)
class ValueMatch:
    spec: OptionSpec
    # Text after "=" for ``--name=value`` tokens.
    inline_value: str | None = None
    kind: ClassVar[MatchKind] = MatchKind.VALUE


OptionMatch = Union[NotFound, FlagMatch, ValueMatch]

NOT_FOUND = NotFound()


@dataclass(frozen=True)
class ResolvedOption:
    name: str
    value: str | None = None


def _found(spec: OptionSpec, inline_value: str | None = None) -> OptionMatch:
    if spec.takes_value:
        return ValueMatch(spec, inline_value)
    return FlagMatch(spec)


def match_short(letter: str, options: Sequence[OptionSpec] = OPTIONS) -> OptionMatch:
    for spec in options:
        if spec.short == letter:
            return _found(spec)
    return NOT_FOUND


def match_long(name: str, options: Sequence[OptionSpec] = OPTIONS) -> OptionMatch:
    """Match ``name`` (the token without ``--``) against the long names.

    Flags match on exact equality only; value options also accept
    ``name=value``.
    """
    for spec in options:
        if name == spec.long:
            return _found(spec)
        if spec.takes_value and name.startswith(spec.long + "="):
            return _found(spec, name[len(spec.long) + 1 :])
    return NOT_FOUND


def unknown_option(option: str) -> OptionSyntaxError:
    return OptionSyntaxError(
        code="option.unknown",
        message=f"Unknown option: {option}",
        option=option,
    )


def missing_value(option: str, spec: OptionSpec) -> OptionSyntaxError:
    return OptionSyntaxError(
        code="option.missing_value",
        message=f"{option} option requires a value ({spec.placeholder}).",
        option=option,
    )


class OptionParser:
    """Scan an argument vector against the option table.

    Iterating yields one ResolvedOption per recognised option, lazily, so
    a consumer can stop early. After a full iteration ``index`` is the
    position of the first positional argument (``len(args)`` if none).
    """

    def __init__(self, args: Sequence[str], options: Sequence[OptionSpec] = OPTIONS) -> None:
        self.args = list(args)
        self.options = tuple(options)
        self.index = 0

    def __iter__(self) -> Iterator[ResolvedOption]:
        args = self.args
        while self.index < len(args):
            token = args[self.index]
            if token == "-" or not token.startswith("-"):
                return
            next_arg = args[self.index + 1] if self.index + 1 < len(args) else None
            if token.startswith("--"):
                resolved, consumed = self._parse_long(token[2:], next_arg)
                yield resolved
            else:
                consumed = 0
                for resolved, used_next in self._parse_short(token[1:], next_arg):
                    consumed = used_next
                    yield resolved
            self.index += 1 + consumed

    def parse(self) -> list[ResolvedOption]:
        return list(self)

    def _parse_short(self, cluster: str, next_arg: str | None) -> Iterator[tuple[ResolvedOption, int]]:
        for position, letter in enumerate(cluster):
            match match_short(letter, self.options):
                case FlagMatch(spec=spec):
                    yield ResolvedOption(spec.long), 0
                case ValueMatch(spec=spec):
                    # A value option ends the cluster: the rest is its value,
                    # or the next argument when it is the last letter.
                    remainder = cluster[position + 1 :]
                    if remainder:
                        yield ResolvedOption(spec.long, remainder), 0
                        return
                    if next_arg is None:
                        raise missing_value(f"-{spec.short}", spec)
                    yield ResolvedOption(spec.long, next_arg), 1
                    return
                case _:
                    raise unknown_option(f"-{letter}")

    def _parse_long(self, name: str, next_arg: str | None) -> tuple[ResolvedOption, int]:
        match match_long(name, self.options):
            case FlagMatch(spec=spec):
                return ResolvedOption(spec.long), 0
            case ValueMatch(spec=spec, inline_value=inline) if inline is not None:
                return ResolvedOption(spec.long, inline), 0
            case ValueMatch(spec=spec):
                if next_arg is None:
                    raise missing_value(f"--{spec.long}", spec)
                return ResolvedOption(spec.long, next_arg), 1
            case _:
                raise unknown_option(f"--{name}")
