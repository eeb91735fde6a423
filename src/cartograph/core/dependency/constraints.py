"""Semantic versions and version specifiers.

This module provides the constraint model used throughout resolution: a
totally ordered ``SemanticVersion`` and a ``VersionSpecifier`` that supports
intersection and a satisfaction predicate.

Every specifier is one half-open interval ``[lower, upper)`` over version
triples. Supported syntax:

- Any version: ``*``
- Exact match: ``==1.0.0``
- Minimum (inclusive): ``>=1.0.0``
- Minimum (exclusive): ``>1.0.0``
- Maximum (inclusive): ``<=2.0.0``
- Maximum (exclusive): ``<2.0.0``
- Compatible with: ``~>1.2.0`` or ``^1.2.0`` (same major; same minor when
  major is 0)
- Tilde: ``~1.2.0`` (same major.minor)
- Compound (comma-separated, all must hold): ``>=1.0.0,<2.0.0``

Because intervals are closed under intersection, a version satisfies
``intersection(a, b)`` exactly when it satisfies both ``a`` and ``b``.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cartograph.exceptions import ManifestError


# ---------------------------------------------------------------------------
# SemanticVersion
# ---------------------------------------------------------------------------

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)"
    r"(?:\.(?P<minor>0|[1-9]\d*))?"
    r"(?:\.(?P<patch>0|[1-9]\d*))?"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?$"
)


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """A ``major.minor.patch`` version, ordered lexicographically by that triple."""

    major: int
    minor: int = 0
    patch: int = 0

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"Version components must be non-negative: {self!r}")

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse a version string such as ``"1.2.3"``, ``"v2.0"`` or ``"3"``.

        Missing minor and patch components default to zero. Pre-release and
        build metadata are stripped: ordering is defined on the numeric
        triple alone.

        Raises:
            ManifestError: If the text is not a version number.
        """
        m = _SEMVER_RE.match(text.strip())
        if not m:
            raise ManifestError(f"Invalid semantic version: {text!r}")
        return cls(
            int(m.group("major")),
            int(m.group("minor") or 0),
            int(m.group("patch") or 0),
        )

    def next_patch(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor, self.patch + 1)

    def next_minor(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor + 1, 0)

    def next_major(self) -> SemanticVersion:
        return SemanticVersion(self.major + 1, 0, 0)

    def compatible_upper(self) -> SemanticVersion:
        """Exclusive upper bound of ``~> self``."""
        if self.major == 0:
            return self.next_minor()
        return self.next_major()

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


ZERO = SemanticVersion(0, 0, 0)


# ---------------------------------------------------------------------------
# VersionSpecifier
# ---------------------------------------------------------------------------

_ATOM_RE = re.compile(r"^\s*(?P<op>==|!=|>=|<=|~>|>|<|\^|~|=)?\s*(?P<ver>\S+)\s*$")


@dataclass(frozen=True)
class VersionSpecifier:
    """A range constraint over semantic versions.

    Attributes:
        lower: Smallest satisfying version (inclusive).
        upper: First version past the range (exclusive), or None when the
            range is unbounded above.
    """

    lower: SemanticVersion = ZERO
    upper: SemanticVersion | None = None

    def __post_init__(self) -> None:
        if self.upper is not None and self.upper <= self.lower:
            raise ValueError(
                f"Empty version range: [{self.lower}, {self.upper})"
            )

    # -- constructors -------------------------------------------------------

    @classmethod
    def any(cls) -> VersionSpecifier:
        return cls()

    @classmethod
    def exactly(cls, version: SemanticVersion) -> VersionSpecifier:
        return cls(version, version.next_patch())

    @classmethod
    def at_least(cls, version: SemanticVersion) -> VersionSpecifier:
        return cls(version)

    @classmethod
    def compatible_with(cls, version: SemanticVersion) -> VersionSpecifier:
        return cls(version, version.compatible_upper())

    @classmethod
    def parse(cls, text: str) -> VersionSpecifier:
        """Parse specifier text such as ``"~> 1.2"`` or ``">=1.0.0,<2.0.0"``.

        An empty string or ``*`` means any version.

        Raises:
            ManifestError: On unknown operators, invalid versions, ``!=``
                (not expressible as a single range), or compound text
                that no version can satisfy.
        """
        stripped = text.strip()
        if stripped in ("", "*"):
            return cls.any()

        result = cls.any()
        for atom in (a for a in stripped.split(",") if a.strip()):
            narrowed = intersection(result, cls._parse_atom(atom))
            if narrowed is None:
                raise ManifestError(f"Unsatisfiable version specifier: {text!r}")
            result = narrowed
        return result

    @classmethod
    def _parse_atom(cls, atom: str) -> VersionSpecifier:
        m = _ATOM_RE.match(atom)
        if not m:
            raise ManifestError(f"Invalid specifier atom: {atom!r}")

        op = m.group("op") or "=="
        version = SemanticVersion.parse(m.group("ver"))

        if op in ("==", "="):
            return cls.exactly(version)
        if op == ">=":
            return cls.at_least(version)
        if op == ">":
            return cls.at_least(version.next_patch())
        if op in ("~>", "^"):
            return cls.compatible_with(version)
        if op == "~":
            return cls(version, version.next_minor())
        if op == "<=":
            return cls(ZERO, version.next_patch())
        if op == "<":
            if version == ZERO:
                raise ManifestError(f"Unsatisfiable version specifier: {atom!r}")
            return cls(ZERO, version)
        raise ManifestError(f"Unsupported specifier operator {op!r} in {atom!r}")

    # -- algebra ------------------------------------------------------------

    def satisfied_by(self, version: SemanticVersion) -> bool:
        """Check whether *version* lies inside this range."""
        if version < self.lower:
            return False
        return self.upper is None or version < self.upper

    def intersection(self, other: VersionSpecifier) -> VersionSpecifier | None:
        """Return the most restrictive specifier satisfying both, or None."""
        return intersection(self, other)

    @property
    def is_any(self) -> bool:
        return self.lower == ZERO and self.upper is None

    def __str__(self) -> str:
        lower, upper = self.lower, self.upper
        if upper is None:
            return "*" if lower == ZERO else f">= {lower}"
        if upper == lower.next_patch():
            return f"== {lower}"
        if upper == lower.compatible_upper():
            return f"~> {lower}"
        if lower == ZERO:
            return f"< {upper}"
        return f">= {lower}, < {upper}"


def intersection(
    a: VersionSpecifier, b: VersionSpecifier
) -> VersionSpecifier | None:
    """Intersect two specifiers.

    Commutative. Returns None when the two ranges are mutually exclusive;
    that outcome is a normal reason to reject a candidate, not an error.
    """
    lower = max(a.lower, b.lower)
    if a.upper is None:
        upper = b.upper
    elif b.upper is None:
        upper = a.upper
    else:
        upper = min(a.upper, b.upper)

    if upper is not None and upper <= lower:
        return None
    return VersionSpecifier(lower, upper)
