"""Opt-in cache for parsed data file metadata."""

from __future__ import annotations

from collections.abc import Collection, Mapping


class MetadataCache:
    """Cache of parsed metadata documents keyed by file identity.

    Entries are validated against the file's modification time so that a
    data file rewritten under the same name is re-read. Only successful
    reads are stored. Entries for files removed outside this process are
    dropped when the repository lists the data directory (see ``retain``).
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[int, Mapping[str, object]]] = {}  # (mtime_ns, document)
        self._hits: int = 0
        self._misses: int = 0

    def get(self, file_id: str, mtime_ns: int) -> Mapping[str, object] | None:
        """Return the cached document if it was read at the same mtime.

        Args:
            file_id: Identity of the data file
            mtime_ns: Current modification time in nanoseconds

        Returns:
            Cached document or None on a miss
        """
        entry = self._entries.get(file_id)
        if entry is not None and entry[0] == mtime_ns:
            self._hits += 1
            return entry[1]

        self._misses += 1
        return None

    def put(self, file_id: str, mtime_ns: int, document: Mapping[str, object]) -> None:
        self._entries[file_id] = (mtime_ns, document)

    def invalidate(self, file_id: str | None = None) -> None:
        """Invalidate cache entries.

        Args:
            file_id: Specific identity to invalidate (None for all)
        """
        if file_id is None:
            self._entries.clear()
        else:
            _ = self._entries.pop(file_id, None)

    def retain(self, file_ids: Collection[str]) -> None:
        """Drop entries for files no longer present.

        Args:
            file_ids: Identities of the data files currently on disk
        """
        for file_id in self._entries.keys() - set(file_ids):
            del self._entries[file_id]

    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with entry, hit and miss counts
        """
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
        }
