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
Contains utility functions.
"""

import fnmatch
import os
import re
from typing import Generator, Iterable, List, Optional, Sequence
from urllib.parse import unquote, urlsplit

from appcachemanifest import config
from appcachemanifest.logger import log

# Precompiled regex for ignorable paths
IGNORABLE_PATHS = re.compile(
    "(" + ")|(".join([fnmatch.translate(i) for i in config.IGNORABLE]) + ")"
)


def sanitize_path(path: str) -> str:
    """Sanitizes a path by changing separators to forward slashes and removing
    trailing slashes.

    :param path: file system path.
    :returns: sanitized path.
    """
    return path.replace("\\", "/").rstrip("/") if path else path


def canonicalize(path: str) -> List[str]:
    """Splits a url path into its canonical segments. Empty and "." segments
    are dropped and ".." removes the previous segment, unless there is none
    left, in which case it is kept:

        /a/./b/../c.js   => ["a", "c.js"]
        ../../etc/passwd => ["..", "..", "etc", "passwd"]

    :param path: url path.
    :return: list of path segments.
    """
    parts = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == ".." and parts and parts[-1] != "..":
            parts.pop()
        else:
            parts.append(part)
    return parts


def reference_parts(reference: str) -> List[str]:
    """Returns the canonical, unescaped path segments of a manifest entry,
    ignoring scheme, host, query and fragment.

    :param reference: relative or absolute url.
    :return: list of path segments.
    """
    return canonicalize(unquote(urlsplit(reference).path))


def is_traversal(parts: Sequence[str]) -> bool:
    """Returns True if canonical path segments point above their root.

    :param parts: canonical path segments.
    """
    return bool(parts) and parts[0] == ".."


def get_mtime(path: str) -> Optional[float]:
    """Returns the modification time of a path, or None when it cannot be
    stat'ed for any reason.

    :param path: file system path.
    :return: modification time in seconds or None.
    """
    try:
        return os.stat(path).st_mtime
    except (OSError, ValueError) as err:
        log.debug("cannot stat %s: %s", path, err)
        return None


def has_extension(path: str, extensions: Iterable[str]) -> bool:
    """Returns True if the file name of path ends with one of the extensions.

    :param path: file system or url path.
    :param extensions: extensions without leading dot.
    """
    name = os.path.basename(sanitize_path(path))
    return any(name.endswith("." + ext.lstrip(".")) for ext in extensions)


def is_ignorable(filepath: str) -> bool:
    """Returns True if filepath matches an ignorable pattern.

    :param filepath: file system path.
    """
    return IGNORABLE_PATHS.match(os.path.basename(filepath)) is not None


def walk(path: str, followlinks: bool = False) -> Generator[str, None, None]:
    """Generator that yields file paths below path that are not ignorable.

    :param path: file system path.
    :param followlinks: follow symbolic links.
    :return: generator of file paths.
    """
    if os.path.isfile(path):
        yield path
        return
    for dirname, dirs, files in os.walk(path, topdown=True, followlinks=followlinks):
        dirs[:] = sorted(d for d in dirs if not is_ignorable(d))
        for name in sorted(files):
            if not is_ignorable(name):
                yield os.path.join(dirname, name)


def find_manifests(
    paths: Iterable[str], extensions: Iterable[str] = config.EXTENSIONS
) -> List[str]:
    """Returns the manifest files found in the given files and directories.
    Files passed explicitly are kept regardless of their extension.

    :param paths: files or directories.
    :param extensions: manifest extensions to look for in directories.
    :return: list of unique file paths, in order found.
    """
    extensions = list(extensions)
    found = []
    for path in paths:
        if os.path.isfile(path):
            candidates = [path]
        else:
            candidates = [f for f in walk(path) if has_extension(f, extensions)]
        for filepath in candidates:
            if filepath not in found:
                found.append(filepath)
    return found
