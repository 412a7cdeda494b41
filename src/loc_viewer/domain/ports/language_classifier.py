"""Port: language classifier — line counting is delegated to an implementation."""

from __future__ import annotations

from typing import Protocol

from loc_viewer.domain.entities import LanguageId, LineCounts


class LanguageClassifier(Protocol):
    """Maps paths to languages and counts code/comment/blank lines."""

    def classify_path(self, path: str) -> LanguageId | None:
        """Return the language of *path*, or ``None`` if it is not tracked."""
        ...

    def analyze(self, language: LanguageId, content: str) -> LineCounts:
        """Classify every line of *content* written in *language*."""
        ...
