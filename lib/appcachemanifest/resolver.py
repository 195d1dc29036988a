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
Contains functions to find the last modification time of a manifest and the
files it lists in its CACHE section.
"""

import os
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple, Union

from appcachemanifest import util
from appcachemanifest.logger import log
from appcachemanifest.parser import Manifest

PathLike = Union[str, os.PathLike]


def find_file(
    reference: str, roots: Sequence[PathLike]
) -> Optional[Tuple[str, float]]:
    """Finds a referenced file in the first root directory it exists in.
    References pointing above the root are never looked up.

    :param reference: relative or absolute url.
    :param roots: ordered list of root directories.
    :return: tuple of (path, mtime), or None if not found.
    """
    return find_path(util.reference_parts(reference), roots)


def find_path(
    parts: Sequence[str], roots: Sequence[PathLike]
) -> Optional[Tuple[str, float]]:
    """Finds canonical path segments in the first root directory they exist
    in. Segments pointing above the root are never looked up.

    :param parts: canonical path segments.
    :param roots: ordered list of root directories.
    :return: tuple of (path, mtime), or None if not found.
    """
    if not parts:
        return None
    if util.is_traversal(parts):
        log.debug("ignoring path outside of root: %s", "/".join(parts))
        return None

    relpath = "/".join(parts)
    for root in roots:
        path = os.path.join(os.fspath(root), relpath)
        mtime = util.get_mtime(path)
        if mtime is not None:
            return path, mtime

    return None


def to_datetime(mtime: float) -> datetime:
    """Returns an aware UTC datetime for mtime, truncated to seconds."""
    return datetime.fromtimestamp(int(mtime), tz=timezone.utc)


def find_last_modified(
    manifest: Manifest,
    roots: Sequence[PathLike],
    floor: Optional[float] = None,
    source_path: Optional[PathLike] = None,
) -> datetime:
    """Returns the latest modification time of the files listed in the CACHE
    section of the manifest, or floor if that is later. Files are searched in
    each root in order, files not found anywhere are skipped.

    :param manifest: parsed manifest.
    :param roots: ordered list of root directories.
    :param floor: minimum modification time, defaults to the modification
        time of source_path.
    :param source_path: path of the manifest file.
    :return: last modification time as UTC datetime.
    """
    if floor is None and source_path is not None:
        floor = util.get_mtime(os.fspath(source_path))
    last_modified = floor or 0
    for reference in manifest.cache:
        found = find_file(reference, roots)
        if found is None:
            continue
        path, mtime = found
        if mtime > last_modified:
            log.debug("%s modified at %s", path, mtime)
            last_modified = mtime

    return to_datetime(last_modified)
