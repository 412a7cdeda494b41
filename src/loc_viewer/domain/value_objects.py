"""Value objects — self-validating domain primitives."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote, urlsplit

from loc_viewer.domain.exceptions import (
    InvalidRepositoryUrlError,
    InvalidRepositoryUrlReason,
)

DEFAULT_HOST = "github.com"


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """Canonical identity of a hosted repository.

    Parsed from a public URL such as ``https://github.com/psf/requests`` or
    built directly with :meth:`new`.  Owner and name are stored
    percent-decoded; :meth:`to_url` re-encodes them.
    """

    host: str
    owner: str
    name: str

    @classmethod
    def new(cls, owner: str, name: str, host: str = DEFAULT_HOST) -> RepositoryRef:
        """Build a ref directly.

        *owner* and *name* must be non-empty; this is the caller's
        responsibility and is not checked here.
        """
        return cls(host=host, owner=owner, name=name)

    @classmethod
    def parse(cls, url: str, host: str = DEFAULT_HOST) -> RepositoryRef:
        """Parse a repository URL on *host*.

        Anything after the second path segment (``/tree/main/src``) and a
        trailing slash are ignored.
        """
        url = url.strip()
        parts = urlsplit(url)
        try:
            origin_ok = (
                parts.scheme.lower() == "https"
                and parts.hostname is not None
                and parts.hostname == host.lower()
                and parts.port is None
                and parts.username is None
            )
        except ValueError:  # malformed port
            origin_ok = False
        if not origin_ok:
            raise InvalidRepositoryUrlError(InvalidRepositoryUrlReason.CANNOT_BE_BASE, url)

        segments = parts.path.split("/")[1:]
        owner = unquote(segments[0]) if segments else ""
        if not owner:
            raise InvalidRepositoryUrlError(InvalidRepositoryUrlReason.CANNOT_FIND_OWNER, url)
        name = unquote(segments[1]) if len(segments) > 1 else ""
        if not name:
            raise InvalidRepositoryUrlError(InvalidRepositoryUrlReason.CANNOT_FIND_REPO, url)

        return cls(host=host, owner=owner, name=name)

    @property
    def origin(self) -> str:
        return f"https://{self.host}"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def to_url(self) -> str:
        """Inverse of :meth:`parse` for well-formed refs."""
        return f"{self.origin}/{quote(self.owner, safe='')}/{quote(self.name, safe='')}"

    def __str__(self) -> str:
        return self.full_name
