"""Parser turning scanned tokens into session scripts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from parrot.errors import InvalidArgument, ParseError, UnknownCommand, UnknownFilterKey
from parrot.session.predicates import ByName, ByStatus, BySubstring, ByTag, Predicate
from parrot.session.scanner import Token, TokenKind
from parrot.storage.models import SnapshotStatus


class Target(Enum):
    ALL = "all"
    SELECTED = "selected"


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Edit:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Filter:
    predicates: tuple[Predicate, ...]


@dataclass(frozen=True)
class Run:
    target: Target = Target.SELECTED


@dataclass(frozen=True)
class Show:
    target: Target = Target.SELECTED


@dataclass(frozen=True)
class Update:
    target: Target = Target.SELECTED


Script = Union[Quit, Help, Edit, Clear, Filter, Run, Show, Update]

TARGETS: dict[str, Target] = {
    "all": Target.ALL,
    "sel": Target.SELECTED,
    "selected": Target.SELECTED,
}

STATUSES: dict[str, SnapshotStatus] = {status.value: status for status in SnapshotStatus}

FILTER_KEYS: dict[str, Callable[[str], Predicate]] = {
    "tag": ByTag,
    "name": ByName,
    "status": lambda value: ByStatus(_parse_status(value)),
}


def _parse_status(value: str) -> SnapshotStatus:
    try:
        return STATUSES[value.lower()]
    except KeyError:
        raise InvalidArgument(
            f"Invalid status '{value}'. Expected one of: {', '.join(STATUSES)}."
        ) from None


def _no_arguments(script: Script) -> Callable[[str, list[Token]], Script]:
    def build(keyword: str, args: list[Token]) -> Script:
        if args:
            raise InvalidArgument(f"'{keyword}' takes no arguments.")
        return script

    return build


def _targeted(factory: Callable[[Target], Script]) -> Callable[[str, list[Token]], Script]:
    def build(keyword: str, args: list[Token]) -> Script:
        if not args:
            return factory(Target.SELECTED)
        if len(args) > 1:
            raise InvalidArgument(f"'{keyword}' takes at most one target (all, sel).")
        token = args[0]
        target = TARGETS.get(token.text.lower()) if token.kind is not TokenKind.FLAG else None
        if target is None:
            raise InvalidArgument(f"Invalid target '{token.text}' for '{keyword}'. Expected 'all' or 'sel'.")
        return factory(target)

    return build


def parse_predicate(token: Token) -> Predicate:
    """Parse a single ``key:value`` or bare-substring filter argument."""
    if token.kind is TokenKind.QUOTED:
        return BySubstring(token.text)
    key, sep, value = token.text.partition(":")
    if not sep:
        return BySubstring(token.text)
    return _keyed_predicate(key, value)


def _keyed_predicate(key: str, value: str) -> Predicate:
    factory = FILTER_KEYS.get(key.lower())
    if factory is None:
        raise UnknownFilterKey(key)
    if not value:
        raise InvalidArgument(f"Missing value for filter key '{key}'.")
    return factory(value)


def parse_predicates(tokens: list[Token]) -> list[Predicate]:
    """Parse filter arguments; ``--key value`` is accepted as ``key:value``."""
    predicates: list[Predicate] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.kind is TokenKind.FLAG:
            if i + 1 >= len(tokens) or tokens[i + 1].kind is TokenKind.FLAG:
                raise InvalidArgument(f"Flag '--{token.text}' expects a value.")
            predicates.append(_keyed_predicate(token.text, tokens[i + 1].text))
            i += 2
        else:
            predicates.append(parse_predicate(token))
            i += 1
    return predicates


def _filter(keyword: str, args: list[Token]) -> Script:
    predicates = parse_predicates(args)
    if not predicates:
        raise InvalidArgument("'filter' expects at least one predicate (e.g. tag:smoke, status:failed).")
    return Filter(tuple(predicates))


# Exact keywords only: abbreviations are listed explicitly, never prefix-matched.
COMMANDS: dict[str, Callable[[str, list[Token]], Script]] = {
    "quit": _no_arguments(Quit()),
    "q": _no_arguments(Quit()),
    "help": _no_arguments(Help()),
    "h": _no_arguments(Help()),
    "edit": _no_arguments(Edit()),
    "e": _no_arguments(Edit()),
    "clear": _no_arguments(Clear()),
    "filter": _filter,
    "run": _targeted(Run),
    "show": _targeted(Show),
    "update": _targeted(Update),
}


def parse(tokens: list[Token]) -> Script:
    """Build a script from tokens, raising ParseError on invalid input."""
    if not tokens:
        raise ParseError("Empty command.")
    head, *args = tokens
    build = COMMANDS.get(head.text.lower()) if head.kind is TokenKind.WORD else None
    if build is None:
        raise UnknownCommand(head.text)
    return build(head.text.lower(), args)
