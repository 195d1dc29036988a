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
Contains tests for the util module.
"""

import os

from appcachemanifest import util


def test_sanitize_path():
    assert util.sanitize_path("foo\\bar\\") == "foo/bar"
    assert util.sanitize_path("foo/bar/") == "foo/bar"
    assert util.sanitize_path("") == ""


def test_canonicalize():
    assert util.canonicalize("/a/./b/../c.js") == ["a", "c.js"]
    assert util.canonicalize("a//b/") == ["a", "b"]
    assert util.canonicalize("../../etc/passwd") == ["..", "..", "etc", "passwd"]
    assert util.canonicalize("a/../../b") == ["..", "b"]
    assert util.canonicalize("/") == []


def test_reference_parts():
    assert util.reference_parts("http://host/a/b.js?x=1#y") == ["a", "b.js"]
    assert util.reference_parts("a%20b.js") == ["a b.js"]
    assert util.reference_parts("%2e%2e/x") == ["..", "x"]


def test_is_traversal():
    assert util.is_traversal(["..", "etc"]) is True
    assert util.is_traversal(["etc", ".."]) is False
    assert util.is_traversal([]) is False


def test_get_mtime(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("x")
    os.utime(path, (100, 100))
    assert util.get_mtime(str(path)) == 100
    assert util.get_mtime(str(tmp_path / "missing")) is None
    assert util.get_mtime("bad\0path") is None


def test_has_extension():
    assert util.has_extension("a/app.appcache", ["appcache"])
    assert util.has_extension("app.mf", [".mf"])
    assert not util.has_extension("appcache", ["appcache"])
    assert not util.has_extension("app.appcache.bak", ["appcache"])


def test_find_manifests(tmp_path):
    (tmp_path / "a.appcache").write_text("")
    (tmp_path / "b.txt").write_text("")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "c.appcache").write_text("")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "d.appcache").write_text("")

    found = util.find_manifests([str(tmp_path), str(tmp_path / "b.txt")], ["appcache"])
    assert found == [
        os.path.join(str(tmp_path), "a.appcache"),
        os.path.join(str(tmp_path), "sub", "d.appcache"),
        str(tmp_path / "b.txt"),
    ]
