"""CSP directive sets and Content-Security-Policy serialization.

A directive set is an ordered mapping from directive name to an ordered,
duplicate-free list of source expressions. Insertion order is emission
order, so output is deterministic.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping, Sequence

from ..constants import (
    DEFAULT_CSP_DIRECTIVES,
    STYLE_SRC,
    UNSAFE_INLINE,
    UPGRADE_INSECURE_REQUESTS,
)
from ..profiles import SecurityProfile, parse_profile


def deduplicate(tokens: Iterable[str]) -> list[str]:
    """Drop repeated tokens, keeping the first occurrence of each."""
    seen: dict[str, None] = {}
    for token in tokens:
        if token not in seen:
            seen[token] = None
    return list(seen)


class CSPDirectiveSet(MutableMapping[str, list[str]]):
    """Ordered directive -> token list mapping with merge semantics."""

    def __init__(self, initial: Mapping[str, Iterable[str]] | None = None):
        self._directives: dict[str, list[str]] = {}
        if initial:
            for name, tokens in initial.items():
                self[name] = tokens  # type: ignore[assignment]

    # -- Mapping protocol ----------------------------------------------------

    def __getitem__(self, directive: str) -> list[str]:
        """Return a copy of the tokens; mutate through the set, not the list."""
        return list(self._directives[directive])

    def __setitem__(self, directive: str, tokens: Iterable[str]) -> None:
        self._directives[directive] = deduplicate(tokens)

    def __delitem__(self, directive: str) -> None:
        del self._directives[directive]

    def __iter__(self) -> Iterator[str]:
        return iter(self._directives)

    def __len__(self) -> int:
        return len(self._directives)

    def __repr__(self) -> str:
        return f"CSPDirectiveSet({self._directives!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CSPDirectiveSet):
            return self._directives == other._directives
        if isinstance(other, Mapping):
            return self._directives == {k: list(v) for k, v in other.items()}
        return NotImplemented

    # -- Mutation helpers ----------------------------------------------------

    def merge(self, directive: str, tokens: Iterable[str]) -> None:
        """Union ``tokens`` into ``directive``, preserving first-seen order."""
        existing = self._directives.get(directive, [])
        self._directives[directive] = deduplicate([*existing, *tokens])

    def append(self, directive: str, token: str) -> None:
        """Append a single token unless already present."""
        self.merge(directive, [token])

    def replace(self, directive: str, tokens: Iterable[str]) -> None:
        """Overwrite ``directive`` wholesale."""
        self[directive] = tokens

    def copy(self) -> CSPDirectiveSet:
        return CSPDirectiveSet(self._directives)

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(tokens) for name, tokens in self._directives.items()}


def default_csp_policies(profile: SecurityProfile | str) -> CSPDirectiveSet:
    """Build the default directive set for a security profile.

    Basic relaxes ``style-src`` with ``'unsafe-inline'``; Strict adds a bare
    ``upgrade-insecure-requests``.
    """
    profile = parse_profile(profile)
    policies = CSPDirectiveSet(DEFAULT_CSP_DIRECTIVES)

    if profile is SecurityProfile.BASIC:
        policies.append(STYLE_SRC, UNSAFE_INLINE)

    if profile is SecurityProfile.STRICT:
        policies[UPGRADE_INSECURE_REQUESTS] = []

    return policies


def build_csp_string(policies: Mapping[str, Sequence[str]]) -> str:
    """Serialize directives into a Content-Security-Policy header value.

    Empty directives are omitted, except ``upgrade-insecure-requests``
    which renders as its bare name.
    """
    parts: list[str] = []
    for directive, sources in policies.items():
        if not sources:
            if directive == UPGRADE_INSECURE_REQUESTS:
                parts.append(directive)
            continue
        parts.append(f"{directive} {' '.join(sources)}")
    return "; ".join(parts)
