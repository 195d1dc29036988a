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
Contains the cache manifest parser.

A manifest starts with the "CACHE MANIFEST" header, followed by sections of
one entry per line:

    CACHE MANIFEST
    # comment
    index.html
    FALLBACK:
    / /offline.html
    NETWORK:
    *

Entries before the first section header belong to the CACHE section.
"""

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterator, List, Tuple, Union

from appcachemanifest import config
from appcachemanifest.logger import log

# manifest header, must be followed by whitespace
HEADER = re.compile(r"\A" + re.escape(config.MANIFEST_HEADER) + r"[ \t\r\n]\s*")

# a known section name with an optional colon, or any name with a colon
SECTION_HEADER = re.compile(
    r"\A(?:(%s)\s*:?|(\S+?)\s*:)\Z" % "|".join(config.SECTIONS), re.IGNORECASE
)

Entry = Union[str, Tuple[str, str]]


class ParseError(Exception):
    """Raised when text is not a cache manifest."""

    pass


class Manifest(Mapping):
    """Read-only mapping of section name to a tuple of unique entries, in
    the order they were found. Sections without entries are not present.

    FALLBACK entries are (pattern, target) pairs, all other entries are
    strings.
    """

    def __init__(self, sections: Dict[str, List[Entry]] = None):
        sections = sections or {}
        self._sections = MappingProxyType(
            {name: tuple(entries) for name, entries in sections.items() if entries}
        )

    def __getitem__(self, name: str) -> Tuple[Entry, ...]:
        return self._sections[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __repr__(self):
        return "<Manifest %s>" % dict(self._sections)

    @property
    def cache(self) -> Tuple[str, ...]:
        return self.get(config.SECTION_CACHE, ())

    @property
    def fallback(self) -> Tuple[Tuple[str, str], ...]:
        return self.get(config.SECTION_FALLBACK, ())

    @property
    def network(self) -> Tuple[str, ...]:
        return self.get(config.SECTION_NETWORK, ())

    @property
    def settings(self) -> Tuple[str, ...]:
        return self.get(config.SECTION_SETTINGS, ())


def section_name(line: str):
    """Returns the upper case section name if line is a section header, or
    None if it is not.

    :param line: stripped line.
    :return: section name, or None.
    """
    match = SECTION_HEADER.match(line)
    if not match:
        return None
    return (match.group(1) or match.group(2)).upper()


def parse_entry(section: str, line: str):
    """Returns the entry for a stripped data line, or None if the line is not
    valid in the given section.

    :param section: section name.
    :param line: stripped data line.
    :return: string, pair of strings, or None.
    """
    tokens = line.split()
    if section == config.SECTION_FALLBACK:
        if len(tokens) != 2:
            log.debug("dropping fallback line: %r", line)
            return None
        return tuple(tokens)
    # a lone header-like token would be read back as a section header
    if section_name(tokens[0]) is not None:
        log.debug("dropping header-like entry: %r", line)
        return None
    return tokens[0]


def parse(text: Union[str, bytes]) -> Manifest:
    """Parses manifest text into a Manifest. Comments, blank lines, invalid
    fallback lines, unknown sections and duplicate entries are dropped.

    :param text: manifest text or utf-8 bytes.
    :raises ParseError: if text does not start with the manifest header.
    :return: Manifest.
    """
    if isinstance(text, bytes):
        text = text.decode(config.ENCODING, errors="replace")
    text = text.lstrip("\ufeff")

    match = HEADER.match(text)
    if not match:
        raise ParseError("missing %r header" % config.MANIFEST_HEADER)

    sections = {name: [] for name in config.SECTIONS}
    seen = set()
    current = config.SECTION_CACHE

    for line in text[match.end() :].splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        name = section_name(line)
        if name is not None:
            # unknown sections are skipped up to the next header
            current = name if name in sections else None
            if current is None:
                log.debug("skipping unknown section: %s", name)
            continue

        if current is None:
            continue

        entry = parse_entry(current, line)
        if entry is None or (current, entry) in seen:
            continue
        seen.add((current, entry))
        sections[current].append(entry)

    return Manifest(sections)
