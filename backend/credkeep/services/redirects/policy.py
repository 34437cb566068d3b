"""Allow-list checks for client-supplied redirect URLs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from credkeep.services._shared.errors import RedirectNotAllowedError

WILDCARD = "*"


def _entry_matches(url: str, entry: str) -> bool:
    # Only a trailing "*" is a wildcard; anywhere else it is a literal character.
    if entry.endswith(WILDCARD):
        return url.startswith(entry[: -len(WILDCARD)])
    return url == entry


def is_allowed(url: str, allow_list: Iterable[str] | None) -> bool:
    """
    Return whether ``url`` may be used as a redirect target.

    An empty or missing ``allow_list`` is an open policy. Otherwise ``url``
    must equal an entry exactly, or start with the literal prefix of an entry
    ending in ``*``. Matching is case-sensitive.

    :param url: Redirect URL supplied by the client.
    :param allow_list: Exact URLs and ``prefix*`` patterns.
    """
    entries = [entry for entry in (allow_list or ()) if entry]
    if not entries:
        return True
    return any(_entry_matches(url, entry) for entry in entries)


class RedirectPolicy:
    """
    Redirect allow-list bound at construction time.

    :param allow_list: Exact URLs and ``prefix*`` patterns. Empty allows all.
    """

    def __init__(self, allow_list: Iterable[str] | None = None) -> None:
        self.allow_list: tuple[str, ...] = tuple(allow_list or ())

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> RedirectPolicy:
        """Build the policy from the ``REDIRECT_ALLOW_LIST`` config key."""
        raw = config.get("REDIRECT_ALLOW_LIST") or ()
        if isinstance(raw, str):
            raw = [item.strip() for item in raw.split(",")]
        return cls(raw)

    def is_allowed(self, url: str) -> bool:
        return is_allowed(url, self.allow_list)

    def ensure_allowed(self, url: str) -> str:
        """
        Return ``url`` unchanged when allowed.

        :raises RedirectNotAllowedError: If the allow-list rejects it.
        """
        if not self.is_allowed(url):
            raise RedirectNotAllowedError(url)
        return url
