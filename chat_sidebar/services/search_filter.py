"""Case-insensitive search over chat history entries."""

from __future__ import annotations

from collections.abc import Iterable

from chat_sidebar.core.models import ChatEntry


def filter_entries(entries: Iterable[ChatEntry], query: str) -> list[ChatEntry]:
    """Return entries whose query or response contains the search text, in order."""

    needle = query.lower()
    if not needle:
        return list(entries)

    return [entry for entry in entries if matches(entry, needle)]


def matches(entry: ChatEntry, needle: str) -> bool:
    if needle in entry.query.lower():
        return True
    response = entry.response
    return response is not None and needle in response.lower()
