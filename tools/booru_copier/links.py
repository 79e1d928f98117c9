"""Description rewriting – turn board-relative links into absolute ones."""

from __future__ import annotations

import re
from dataclasses import dataclass

# >>1234, >>1234t, >>1234p
IN_SITE_LINK_RE = re.compile(r">>([0-9]+)([tp]?)")
# "label":/path  (protocol-relative "//host" links are left alone)
RELATIVE_LINK_RE = re.compile(r'"([^"\n]+)":(/(?!/)\S*)')


def import_tag(host: str) -> str:
    """Tag marking images imported from *host*: ``derpibooru.org`` → ``derpibooru import``."""
    name, dot, _tld = host.rpartition(".")
    return f"{name if dot else host} import"


@dataclass(frozen=True)
class LinkRewriter:
    """Rewrites descriptions so their links point back at the source board."""
    host: str
    in_site_pattern: re.Pattern[str] = IN_SITE_LINK_RE
    relative_pattern: re.Pattern[str] = RELATIVE_LINK_RE

    def _in_site(self, match: re.Match[str]) -> str:
        image_id, suffix = match.group(1), match.group(2)
        return f'">> {image_id}{suffix}":https://{self.host}/images/{image_id} '

    def _relative(self, match: re.Match[str]) -> str:
        return f'"{match.group(1)}":https://{self.host}{match.group(2)}'

    def rewrite(self, text: str) -> str:
        text = self.in_site_pattern.sub(self._in_site, text)
        return self.relative_pattern.sub(self._relative, text)

    __call__ = rewrite
