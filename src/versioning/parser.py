"""Parsing utilities for versions, version ranges and dependencies.

``parse_version`` and ``parse_dependency`` are permissive: they return None
on malformed input so callers can skip it. ``parse_version_range`` is strict
and raises ``VersionParseError``.
"""

import re
from typing import List, Optional, Tuple

from .models import (
    AnyVersion,
    Dependency,
    EarlierVersion,
    LaterVersion,
    OrEarlierVersion,
    OrLaterVersion,
    ThisVersion,
    Version,
    VersionRange,
    WildcardVersion,
)

_VERSION_RE = re.compile(r"^\d+(?:\.\d+)*(?:-[A-Za-z0-9]+)*$")
_PACKAGE_NAME_RE = re.compile(r"^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*")
_TOKEN_RE = re.compile(
    r"\s*(?:(?P<op>==|>=|<=|>|<|&&|\|\||\(|\))|(?P<any>-any)|(?P<none>-none)"
    r"|(?P<ver>\d+(?:\.\d+)*(?:\.\*)?(?:-[A-Za-z0-9]+)*))"
)


class VersionParseError(ValueError):
    """Raised when a version range expression cannot be parsed."""


def parse_version(text: str) -> Optional[Version]:
    """Parse ``1.2.3`` or ``1.2.3-tag1-tag2``; return None when malformed."""
    text = text.strip()
    if not _VERSION_RE.match(text):
        return None
    numeric, *tags = text.split("-")
    return Version(tuple(int(part) for part in numeric.split(".")), tuple(tags))


def _tokenize(text: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match or match.end() == pos:
            raise VersionParseError(f"Unexpected input at {text[pos:]!r}")
        kind = match.lastgroup or ""
        tokens.append((kind, match.group(kind).strip()))
        pos = match.end()
    return tokens


class _RangeParser:
    """Recursive-descent parser: union := inter ('||' inter)*, inter := atom ('&&' atom)*."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def _peek(self) -> Optional[Tuple[str, str]]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> Tuple[str, str]:
        token = self._peek()
        if token is None:
            raise VersionParseError(f"Unexpected end of range {self.text!r}")
        self.pos += 1
        return token

    def parse(self) -> VersionRange:
        result = self._union()
        if self._peek() is not None:
            raise VersionParseError(f"Trailing input in range {self.text!r}")
        return result

    def _union(self) -> VersionRange:
        result = self._intersection()
        while self._peek() == ("op", "||"):
            self._next()
            result = result.union(self._intersection())
        return result

    def _intersection(self) -> VersionRange:
        result = self._atom()
        while self._peek() == ("op", "&&"):
            self._next()
            result = result.intersect(self._atom())
        return result

    def _atom(self) -> VersionRange:
        kind, value = self._next()
        if kind == "any":
            return AnyVersion()
        if kind == "none":
            # Cabal spells the empty range as "<0"
            return EarlierVersion(Version((0,)))
        if (kind, value) == ("op", "("):
            inner = self._union()
            if self._next() != ("op", ")"):
                raise VersionParseError(f"Unbalanced parentheses in {self.text!r}")
            return inner
        if kind != "op":
            raise VersionParseError(f"Expected an operator before {value!r} in {self.text!r}")
        ver_kind, ver_text = self._next()
        if ver_kind != "ver":
            raise VersionParseError(f"Expected a version after {value!r} in {self.text!r}")
        if ver_text.endswith(".*"):
            if value != "==":
                raise VersionParseError(f"Wildcard only allowed with '==' in {self.text!r}")
            return WildcardVersion(_require_version(ver_text[:-2]))
        version = _require_version(ver_text)
        constructors = {
            "==": ThisVersion,
            ">": LaterVersion,
            "<": EarlierVersion,
            ">=": OrLaterVersion,
            "<=": OrEarlierVersion,
        }
        if value not in constructors:
            raise VersionParseError(f"Unexpected {value!r} in {self.text!r}")
        return constructors[value](version)


def _require_version(text: str) -> Version:
    version = parse_version(text)
    if version is None:
        raise VersionParseError(f"Invalid version {text!r}")
    return version


def parse_version_range(text: str) -> VersionRange:
    """Parse a range expression such as ``>=1.0 && <2`` or ``==1.2.*``.

    An empty string is the unconstrained range.
    """
    if not text.strip():
        return AnyVersion()
    return _RangeParser(text).parse()


def parse_dependency(text: str) -> Optional[Dependency]:
    """Parse ``name [range]``; return None when malformed."""
    text = text.strip()
    match = _PACKAGE_NAME_RE.match(text)
    if not match:
        return None
    name = match.group(0)
    if all(part.isdigit() for part in name.split("-")):
        return None
    try:
        version_range = parse_version_range(text[match.end():])
    except VersionParseError:
        return None
    return Dependency(name, version_range)


def parse_preferred_versions(text: str) -> List[Dependency]:
    """Parse a ``preferred-versions`` file.

    One dependency per line; lines starting with ``--`` are comments and
    lines that fail to parse are dropped.
    """
    deps: List[Dependency] = []
    for line in text.splitlines():
        if line.startswith("--"):
            continue
        dep = parse_dependency(line)
        if dep is not None:
            deps.append(dep)
    return deps
