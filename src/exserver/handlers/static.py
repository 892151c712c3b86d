"""
=============================================================================
STATIC RESOURCE
=============================================================================

Supplies the bytes that follow the header block in every response.

=============================================================================
BOUNDED READS
=============================================================================

The resource is read into a buffer of fixed capacity (``limit`` bytes,
4096 by default). A larger file is truncated to its first ``limit`` bytes.
It is never padded, duplicated or cut mid-way through a read.

    file on disk (10 KB)   ──read(4096)──►   first 4096 bytes

=============================================================================
CACHING STRATEGY
=============================================================================

By default the file is re-read on every request, so edits show up
immediately. With ``cache=True`` the bytes are kept in memory and the
file is only re-read when its modification time or size changes:

    1. stat() the file
    2. (mtime_ns, size) unchanged? → return cached bytes
    3. otherwise read again and remember the new stamp

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Tuple


logger = logging.getLogger(__name__)


class StaticResource:
    """
    A file whose contents are sent back to every client.

    Usage:
        resource = StaticResource("misc/index.html", limit=4096)
        body = resource.read()

    Raises OSError from read() when the file cannot be opened or read.
    """

    def __init__(self, path: str, limit: int = 4096, cache: bool = False):
        self.path = Path(path)
        self.limit = limit
        self.cache = cache

        self._cached: Optional[bytes] = None
        self._stamp: Optional[Tuple[int, int]] = None

    def read(self, limit: Optional[int] = None) -> bytes:
        """
        Return at most ``limit`` bytes of the file.

        Args:
            limit: Override the configured capacity for this read.
        """
        limit = self.limit if limit is None else limit

        if not self.cache:
            return self._read_file(limit)

        stat = self.path.stat()
        stamp = (stat.st_mtime_ns, stat.st_size)
        if self._cached is None or stamp != self._stamp:
            logger.debug(f"Loading {self.path} into cache")
            self._cached = self._read_file(self.limit)
            self._stamp = stamp

        return self._cached[:limit]

    def _read_file(self, limit: int) -> bytes:
        with self.path.open("rb") as f:
            data = f.read(limit)
            truncated = bool(f.read(1))

        if truncated:
            logger.debug(f"{self.path} is larger than {limit} bytes, truncated")

        return data

    def invalidate(self) -> None:
        """Drop the cached copy."""
        self._cached = None
        self._stamp = None
