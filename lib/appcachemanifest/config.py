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
Contains default config and settings.
"""

import os

# manifest file settings
MANIFEST_HEADER = "CACHE MANIFEST"
SECTION_CACHE = "CACHE"
SECTION_FALLBACK = "FALLBACK"
SECTION_NETWORK = "NETWORK"
SECTION_SETTINGS = "SETTINGS"
SECTIONS = (SECTION_CACHE, SECTION_FALLBACK, SECTION_NETWORK, SECTION_SETTINGS)
CONTENT_TYPE = "text/cache-manifest"
ENCODING = "utf-8"

# served manifest file extensions, comma separated in the environment
EXTENSIONS = [
    ext.strip().lstrip(".")
    for ext in os.getenv("APPCACHE_EXTENSIONS", "appcache").split(",")
    if ext.strip()
]

# seconds before a cached manifest gets fully checked again (0 disables)
TIMEOUT = int(os.getenv("APPCACHE_TIMEOUT", 60 * 5))

# max number of cached manifests (0 means unbounded)
MAX_ENTRIES = int(os.getenv("APPCACHE_MAX_ENTRIES", 0))

# exit code when a manifest is stale
STALE_EXIT = 10

# logging settings
LOG_NAME = "appcachemanifest"
LOG_DIR = os.getenv("LOG_DIR", os.path.expanduser("~/log/appcachemanifest"))
LOG_LEVEL_DEFAULT = "INFO"
LOG_LEVEL = os.getenv("LOG_LEVEL", LOG_LEVEL_DEFAULT)
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 5
DRYRUN_MESSAGE = "NOTICE: Dry run (no changes will be made)"

# ignorable files and directories when searching for manifests
IGNORABLE = [
    "*~",
    ".git*",
    ".env",
    ".venv",
    "*.bak",
    "*.orig",
    "*.swp",
    "*.tmp",
    "venv*",
    "node_modules",
    "__pycache__",
    "Thumbs.db",
    ".DS_Store",
    ".idea",
    ".vscode",
]
