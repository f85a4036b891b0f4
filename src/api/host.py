"""Addressing for a single Pi-hole instance."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from config.sync_config import HostConfig

_PATH_EXTRACTOR = re.compile(r"^(https?://[^/\s]+)(/[^?#]*)?")


@dataclass(frozen=True)
class Host:
    """A reachable Pi-hole instance: base URL, password and optional sub-path.

    A path embedded in ``base_url`` is split off and placed in front of
    ``path``; trailing slashes are dropped from both parts. ``full_url`` is
    the identity used when logging and attributing errors.
    """

    base_url: str
    password: str = field(repr=False)
    path: str = ""
    full_url: str = field(init=False)

    def __post_init__(self):
        base_url = self.base_url.strip()
        path = (self.path or "").strip()

        match = _PATH_EXTRACTOR.match(base_url)
        if match is None:
            raise ValueError(f"Invalid Pi-hole base URL: {self.base_url!r}")
        base_url, included_path = match.group(1), match.group(2)
        if included_path:
            path = included_path.rstrip("/") + "/" + path.lstrip("/")

        path = path.rstrip("/")
        if path and not path.startswith("/"):
            path = "/" + path

        object.__setattr__(self, "base_url", base_url)
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "full_url", base_url + path)

    @classmethod
    def from_config(cls, config: HostConfig) -> "Host":
        return cls(base_url=config.base_url, password=config.password, path=config.path)

    def url_for(self, endpoint: str) -> str:
        return f"{self.full_url}{endpoint}"

    def __str__(self) -> str:
        return self.full_url
