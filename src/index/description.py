"""Parser for ``.cabal`` style package descriptions.

The format is a list of ``field: value`` lines. Indented lines continue the
previous field, and unindented keywords such as ``library`` or
``executable foo`` open sections whose indented body holds more fields.
Only name and version are interpreted; every other field is kept verbatim.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from versioning.models import Dependency, PackageIdentifier, Version
from versioning.parser import parse_dependency, parse_version

from .errors import DescriptionParseError

_FIELD_RE = re.compile(r"^(?P<name>[A-Za-z][A-Za-z0-9_-]*)\s*:(?P<value>.*)$")

SECTION_KEYWORDS = frozenset({
    "library",
    "executable",
    "test-suite",
    "benchmark",
    "foreign-library",
    "flag",
    "source-repository",
    "custom-setup",
    "common",
})


@dataclass
class Field:
    """A parsed field; continuation lines are joined with newlines."""
    name: str
    value: str
    line: int
    indent: int = 0

    def append(self, text: str) -> None:
        self.value = f"{self.value}\n{text}" if self.value else text


@dataclass
class Section:
    """A ``library``/``executable``/... block and its fields."""
    kind: str
    args: str
    line: int
    fields: List[Field] = field(default_factory=list)

    def get(self, name: str) -> List[str]:
        return [f.value for f in self.fields if f.name == name.lower()]


@dataclass(frozen=True)
class PackageDescription:
    """A parsed package description."""
    name: str
    version: Version
    fields: Dict[str, str]
    sections: Tuple[Section, ...] = ()

    @property
    def package_id(self) -> PackageIdentifier:
        return PackageIdentifier(self.name, self.version)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Top-level field value by case-insensitive name."""
        return self.fields.get(name.lower(), default)

    @property
    def build_depends(self) -> List[Dependency]:
        """Dependencies from every ``build-depends`` field, in file order."""
        raw = []
        if "build-depends" in self.fields:
            raw.append(self.fields["build-depends"])
        for section in self.sections:
            raw.extend(section.get("build-depends"))
        deps: List[Dependency] = []
        for value in raw:
            for item in value.replace("\n", " ").split(","):
                dep = parse_dependency(item)
                if dep is not None:
                    deps.append(dep)
        return deps


def _decode(content: bytes) -> str:
    text = content.decode("utf-8", errors="replace")
    return text[1:] if text.startswith("\ufeff") else text


def _layout(text: str, allow_sections: bool = True) -> Tuple[List[Field], List[Section]]:
    """Split text into top-level fields and sections.

    Raises DescriptionParseError on lines that fit neither.
    """
    fields: List[Field] = []
    sections: List[Section] = []
    current: Optional[Field] = None
    section: Optional[Section] = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        stripped = line.strip()
        if not stripped or stripped.startswith("--") or stripped in ("{", "}"):
            continue
        indent = len(line) - len(line.lstrip())
        match = _FIELD_RE.match(stripped)

        if indent == 0:
            if match:
                section = None
                current = Field(match.group("name").lower(), match.group("value").strip(), lineno)
                fields.append(current)
                continue
            keyword, _, args = stripped.rstrip("{").strip().partition(" ")
            if allow_sections and keyword.lower() in SECTION_KEYWORDS:
                section = Section(keyword.lower(), args.strip(), lineno)
                sections.append(section)
                current = None
                continue
            raise DescriptionParseError(f"unrecognised top-level line {stripped!r}", lineno)

        if section is not None:
            if current is not None and indent > current.indent:
                current.append(stripped)
            elif match:
                current = Field(match.group("name").lower(), match.group("value").strip(), lineno, indent)
                section.fields.append(current)
            else:
                # conditionals such as "if flag(foo)" or "else"
                current = None
            continue

        if current is None:
            raise DescriptionParseError(f"indented line outside a field {stripped!r}", lineno)
        current.append(stripped)

    return fields, sections


def parse_fields(content: bytes) -> List[Field]:
    """Parse flat ``field: value`` text with no sections."""
    fields, _ = _layout(_decode(content), allow_sections=False)
    return fields


def parse_package_description(content: bytes) -> PackageDescription:
    """Parse the bytes of a ``.cabal`` file.

    Raises DescriptionParseError when the layout is malformed or the
    ``name``/``version`` fields are missing or invalid.
    """
    fields, sections = _layout(_decode(content))
    values: Dict[str, str] = {}
    for f in fields:
        values.setdefault(f.name, f.value)

    name = values.get("name", "").strip()
    if not name:
        raise DescriptionParseError("missing required field 'name'")
    version_text = values.get("version", "").strip()
    if not version_text:
        raise DescriptionParseError("missing required field 'version'")
    version = parse_version(version_text)
    if version is None:
        raise DescriptionParseError(f"invalid version {version_text!r}")

    return PackageDescription(name, version, values, tuple(sections))
