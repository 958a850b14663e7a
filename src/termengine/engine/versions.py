"""Version floor checks for processor registration.

Processors declare the host versions they need as npm-style ranges
(``"1.2.0"``, ``">=1.2"``, ``"^1.2.0"``, ``"~1.2.0"``). They are
translated to PEP 440 specifiers and evaluated with ``packaging``.
"""

from __future__ import annotations

import logging

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)


def to_specifier(requirement: str) -> SpecifierSet:
    """Translate an npm-style range into a :class:`SpecifierSet`.

    A bare version is a floor. ``^1.2.3`` allows changes that keep the
    leftmost non-zero component and ``~1.2.3`` allows patch changes.
    Space-separated comparators are combined with AND.
    """
    clauses: list[str] = []
    for part in requirement.replace(",", " ").split():
        if part.startswith("^"):
            base = Version(part[1:])
            upper = _caret_upper(base)
            clauses += [f">={base}", f"<{upper}"]
        elif part.startswith("~"):
            base = Version(part[1:])
            clauses += [f">={base}", f"<{base.major}.{base.minor + 1}.0"]
        elif part[0].isdigit():
            clauses.append(f">={part}")
        else:
            clauses.append(part)
    return SpecifierSet(",".join(clauses))


def _caret_upper(base: Version) -> str:
    if base.major > 0:
        return f"{base.major + 1}.0.0"
    if base.minor > 0:
        return f"0.{base.minor + 1}.0"
    return f"0.0.{base.micro + 1}"


def satisfies(actual: str, requirement: str | None) -> bool:
    """Whether the running ``actual`` version meets ``requirement``.

    An empty requirement is always met. A malformed requirement or
    version is treated as unmet.
    """
    if not requirement:
        return True
    try:
        return Version(actual) in to_specifier(requirement)
    except (InvalidSpecifier, InvalidVersion) as e:
        logger.warning("Cannot compare version %r against %r: %s", actual, requirement, e)
        return False
