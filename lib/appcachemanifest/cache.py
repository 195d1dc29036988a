#!/usr/bin/env python
#
# Copyright (c) 2024-2025, Ryan Galloway (ryan@rsgalloway.com)
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#  - Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
#  - Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
#  - Neither the name of the software nor the names of its contributors
#    may be used to endorse or promote products derived from this software
#    without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.
#

__doc__ = """
Contains the manifest generator and the in-memory manifest cache.

Generated manifests are cached per source file until the source file changes
or the cache timeout expires, whichever comes first. Changes to the files
listed in the manifest are only noticed after the timeout.
"""

import os
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime
from typing import Callable, Optional, Sequence, Tuple

from appcachemanifest import config, parser, resolver, util
from appcachemanifest.logger import log
from appcachemanifest.parser import Manifest
from appcachemanifest.resolver import PathLike


@dataclass(frozen=True)
class CacheEntry:
    """A generated manifest and the state it was generated from."""

    mtime: float
    computed_at: float
    last_modified: datetime
    output: str


def http_date(value: datetime) -> str:
    """Formats a datetime as an HTTP date, e.g. Sun, 06 Nov 1994 08:49:37 GMT."""
    return format_datetime(value, usegmt=True)


def generate(manifest: Manifest, last_modified: datetime) -> str:
    """Generates a clean manifest with a single comment holding the last
    modification time. Sections are always written in the order CACHE,
    FALLBACK, SETTINGS, NETWORK.

    :param manifest: parsed manifest.
    :param last_modified: last modification time.
    :return: manifest text with a trailing newline.
    """
    output = [config.MANIFEST_HEADER, "# " + http_date(last_modified)]

    # cache entries are implicit when fallback follows
    if manifest.cache:
        if not manifest.fallback:
            output.append(config.SECTION_CACHE + ":")
        output.extend(manifest.cache)

    if manifest.fallback:
        output.append(config.SECTION_FALLBACK + ":")
        output.extend(" ".join(pair) for pair in manifest.fallback)

    for name in (config.SECTION_SETTINGS, config.SECTION_NETWORK):
        if manifest.get(name):
            output.append(name + ":")
            output.extend(manifest[name])

    return "\n".join(output) + "\n"


class ManifestCache(object):
    """Caches generated manifests by source file path.

    An entry is used while the source file is not newer than when the entry
    was generated and the timeout has not expired. A timeout of 0 disables
    caching. Concurrent misses for the same path may generate the manifest
    more than once, the last one is kept.
    """

    def __init__(
        self,
        timeout: float = config.TIMEOUT,
        max_entries: Optional[int] = config.MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        :param timeout: default seconds before entries are checked again.
        :param max_entries: max number of entries, None or 0 for unbounded.
        :param clock: returns the current time in seconds.
        """
        self.timeout = timeout
        self.max_entries = max_entries or None
        self.clock = clock
        self._entries = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._entries)

    def __contains__(self, path: PathLike):
        return os.fspath(path) in self._entries

    def get(self, path: PathLike) -> Optional[CacheEntry]:
        """Returns the current entry for path, fresh or not."""
        with self._lock:
            return self._entries.get(os.fspath(path))

    def put(self, path: PathLike, entry: CacheEntry) -> None:
        """Installs entry for path, replacing any previous entry."""
        key = os.fspath(path)
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while self.max_entries and len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("evicted %s", evicted)

    def invalidate(self, path: Optional[PathLike] = None) -> None:
        """Removes the entry for path, or all entries if path is None."""
        with self._lock:
            if path is None:
                self._entries.clear()
            else:
                self._entries.pop(os.fspath(path), None)

    def is_fresh(
        self, entry: Optional[CacheEntry], mtime: float, now: float, timeout: float
    ) -> bool:
        """Returns True if entry can be used for a file with mtime at now.

        :param entry: cached entry or None.
        :param mtime: current modification time of the source file.
        :param now: current time.
        :param timeout: seconds an entry stays valid.
        """
        return (
            entry is not None
            and entry.mtime >= mtime
            and entry.computed_at + timeout > now
        )

    def process(
        self,
        text,
        path: PathLike,
        roots: Sequence[PathLike],
        timeout: Optional[float] = None,
    ) -> Tuple[str, datetime]:
        """Returns the generated manifest for text read from path, along with
        its last modification time. Uses the cached result while it is fresh.

        :param text: manifest text or bytes.
        :param path: manifest source file path.
        :param roots: ordered list of root directories for listed files.
        :param timeout: seconds the result stays valid, defaults to the
            cache timeout.
        :raises ParseError: if text is not a manifest.
        :return: tuple of (manifest text, last modified).
        """
        if timeout is None:
            timeout = self.timeout
        mtime = util.get_mtime(os.fspath(path)) or 0
        now = self.clock()

        entry = self.get(path)
        if self.is_fresh(entry, mtime, now, timeout):
            log.debug("using cached manifest: %s", path)
            return entry.output, entry.last_modified

        manifest = parser.parse(text)
        last_modified = resolver.find_last_modified(manifest, roots, floor=mtime)
        output = generate(manifest, last_modified)

        if timeout > 0:
            self.put(path, CacheEntry(mtime, now, last_modified, output))
        log.debug("generated manifest: %s (%s)", path, http_date(last_modified))

        return output, last_modified

