"""Spec parsing utilities: ``crate[@version]`` into a crate name and VersionSpec."""

import re
from typing import Optional, Tuple

import semantic_version

from constants import Constants
from errors import InvalidVersionSpec
from .models import Latest, Requirement, Target, Unspecified, VersionSpec

_WHITESPACE = re.compile(r"\s+")
_WILDCARDS = frozenset("*xX")


def tokenize_first_at(s: str) -> Tuple[str, Optional[str]]:
    """Return (crate_name, version text or None) split on the first '@'.

    Crate names never contain '@', so everything after the first one belongs
    to the version text.
    """
    s = s.strip()
    if '@' not in s:
        return s, None
    name, version = s.split('@', 1)
    version = version.strip()
    return name.strip(), (version if version else None)


def _normalize_block(block: str) -> str:
    """Collapse whitespace in one comparator and apply Cargo's default caret."""
    block = _WHITESPACE.sub('', block)
    core = block.split('-', 1)[0].split('+', 1)[0]
    if block and block[0].isdigit() and not _WILDCARDS.intersection(core):
        return '^' + block
    return block


def parse_requirement(raw: str) -> Requirement:
    """Parse a Cargo-style requirement expression.

    Comparators are comma separated; a bare version means caret, as in
    Cargo.toml. Matching uses npm range rules, which agree with Cargo on
    caret and tilde bounds for 0.x versions and only admit a pre-release
    when a comparator names a pre-release of the same major.minor.patch.

    Raises:
        InvalidVersionSpec: If the expression is not a valid requirement.
    """
    text = raw.strip()
    blocks = text.split(',')
    if not text or '|' in text or any(not b.strip() for b in blocks):
        raise InvalidVersionSpec(f"invalid version requirement '{raw}'", raw)

    normalized = ' '.join(_normalize_block(b) for b in blocks)
    try:
        spec = semantic_version.NpmSpec(normalized)
    except ValueError as exc:
        raise InvalidVersionSpec(f"invalid version requirement '{raw}'", raw) from exc
    return Requirement(raw=text, spec=spec)


def parse_version_spec(raw: Optional[str]) -> VersionSpec:
    """Map raw version text to a VersionSpec.

    Empty or missing text is Unspecified; ``latest`` in any letter case is
    Latest; anything else must be a valid requirement.
    """
    if raw is None or raw.strip() == '':
        return Unspecified()
    if raw.strip().lower() == Constants.LATEST_TOKEN:
        return Latest()
    return parse_requirement(raw)


def parse_spec(spec: str) -> Tuple[str, VersionSpec]:
    """Parse ``crate`` or ``crate@constraint``.

    Raises:
        InvalidVersionSpec: On an empty crate name or a malformed constraint.
    """
    crate_name, version = tokenize_first_at(spec)
    if not crate_name:
        raise InvalidVersionSpec(f"missing crate name in '{spec}'", spec)
    return crate_name, parse_version_spec(version)


def build_target(spec: str, binary: Optional[str] = None) -> Target:
    """Build a Target from a spec string and optional explicit binary name."""
    crate_name, version = parse_spec(spec)
    return Target(crate_name=crate_name, version=version, binary=binary or crate_name)
