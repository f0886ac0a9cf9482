"""Locale tags and the two filename patterns they are extracted from.

A remote repository stores one ``strings.xml`` per ``res/values[-<tag>]``
directory, while the local cache flattens them into
``strings[-<tag>].xml``.  Both patterns treat a missing suffix as the
``default`` locale through the same helper so they cannot drift apart.
"""

from __future__ import annotations

import re

from locale_sync.domain.exceptions import InvalidLocaleError

DEFAULT_LOCALE = "default"

_TAG = r"[\w+-]+"
_TAG_RE = re.compile(_TAG)

DEFAULT_FILENAME = "strings.xml"


def tag_from_suffix(suffix: str | None) -> str:
    """Map an optional ``-<tag>`` capture to a locale, ``None`` → ``default``."""
    return DEFAULT_LOCALE if suffix is None else suffix


def validate_locale(locale: str) -> str:
    """Return *locale* unchanged, or raise :class:`InvalidLocaleError`."""
    if not isinstance(locale, str) or not _TAG_RE.fullmatch(locale):
        raise InvalidLocaleError(f"Invalid locale tag: {locale!r}")
    return locale


def locale_filename(locale: str) -> str:
    """Return the local cache filename for *locale*."""
    if validate_locale(locale) == DEFAULT_LOCALE:
        return DEFAULT_FILENAME
    return f"strings-{locale}.xml"


class LocalePattern:
    """A named regex whose optional ``tag`` group yields a locale."""

    def __init__(self, name: str, pattern: str, *, full: bool = False) -> None:
        self.name = name
        self._regex = re.compile(pattern)
        self._full = full

    def extract(self, text: str) -> str | None:
        """Return the locale encoded in *text*, or ``None`` if it does not match.

        Only a missing suffix means ``default``; a literal ``-default`` suffix
        would alias the base file and is not a locale.
        """
        match = self._regex.fullmatch(text) if self._full else self._regex.search(text)
        if match is None or match.group("tag") == DEFAULT_LOCALE:
            return None
        return tag_from_suffix(match.group("tag"))

    def __repr__(self) -> str:
        return f"LocalePattern({self.name!r}, {self._regex.pattern!r})"


# "app/src/main/res/values-es/strings.xml" → "es"
REMOTE_PATTERN = LocalePattern(
    "remote", rf"(?:^|/)res/values(?:-(?P<tag>{_TAG}))?/strings\.xml$"
)

# "strings-es.xml" → "es", "strings.xml" → "default"
LOCAL_PATTERN = LocalePattern(
    "local", rf"strings(?:-(?P<tag>{_TAG}))?\.xml", full=True
)
