"""Syntax check for target binary version ranges.

Accepts the npm-style range grammar clients evaluate against their binary
version: exact versions ("1.2.3"), partials and wildcards ("1.2", "1.x",
"*"), comparators (">=1.0.0 <2.0.0"), caret/tilde ranges ("^1.2.3",
"~1.2"), hyphen ranges ("1.0.0 - 2.0.0") and unions joined by "||".
Only syntax is checked here; matching a range against a version is the
client's job.
"""

from __future__ import annotations

import re

_NUM = r"(?:0|[1-9]\d*)"
_PART = rf"(?:{_NUM}|[xX*])"
_IDENT = r"[0-9A-Za-z-]+"
_PRERELEASE = rf"(?:-{_IDENT}(?:\.{_IDENT})*)"
_BUILD = rf"(?:\+{_IDENT}(?:\.{_IDENT})*)"

# A possibly-partial version: "1", "1.2", "1.2.3-beta.1+build.5", "v1.x".
_PARTIAL = rf"[v=]?{_PART}(?:\.{_PART}(?:\.{_PART}{_PRERELEASE}?{_BUILD}?)?)?"

_COMPARATOR_RE = re.compile(rf"^(?:<=|>=|<|>|=|~>|~|\^)?{_PARTIAL}$")
_HYPHEN_RE = re.compile(rf"^({_PARTIAL})\s+-\s+({_PARTIAL})$")
# "> 1.0.0" is the same comparator as ">1.0.0".
_OPERATOR_GAP_RE = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")


def _is_valid_comparator_set(text: str) -> bool:
    text = text.strip()
    if not text:
        # An empty alternative in "1.x || " matches any version.
        return True

    if _HYPHEN_RE.match(text):
        return True

    collapsed = _OPERATOR_GAP_RE.sub(r"\1", text)
    return all(_COMPARATOR_RE.match(part) for part in collapsed.split())


def is_valid_range(value: str) -> bool:
    """Return True if ``value`` is a syntactically valid semver range.

    A blank string is rejected: a release must name the binaries it targets,
    use "*" to target all of them.
    """
    if not value.strip():
        return False
    return all(_is_valid_comparator_set(alt) for alt in value.split("||"))
