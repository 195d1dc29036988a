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
Contains tests for the cli module.
"""

import os

import pytest

from appcachemanifest import cli, config

T0 = 784111777
T1 = T0 + 100

TEXT = "CACHE MANIFEST\n# v1\na.js\nNETWORK:\n*\n"
EXPECTED = (
    "CACHE MANIFEST\n"
    "# Sun, 06 Nov 1994 08:51:17 GMT\n"
    "CACHE:\n"
    "a.js\n"
    "NETWORK:\n"
    "*\n"
)


@pytest.fixture
def public(tmp_path):
    root = tmp_path / "public"
    root.mkdir()
    manifest = root / "app.appcache"
    manifest.write_text(TEXT)
    os.utime(manifest, (T0, T0))
    script = root / "a.js"
    script.write_text("x")
    os.utime(script, (T1, T1))
    return root


def run(*argv):
    return cli.run(cli.parse_args(list(argv)))


def test_print(public, capsys):
    rc = run(str(public / "app.appcache"), "-r", str(public))
    assert rc == 0
    assert capsys.readouterr().out == EXPECTED
    assert (public / "app.appcache").read_text() == TEXT


def test_directory_search(public, capsys):
    (public / "sub").mkdir()
    (public / "sub" / "other.appcache").write_text("CACHE MANIFEST\n")
    (public / "sub" / "ignored.txt").write_text("CACHE MANIFEST\n")

    rc = run(str(public), "-r", str(public))
    assert rc == 0
    assert capsys.readouterr().out.count("CACHE MANIFEST\n") == 2


def test_write(public):
    manifest = public / "app.appcache"
    assert run(str(manifest), "-r", str(public), "--write") == 0
    assert manifest.read_text() == EXPECTED
    assert os.stat(manifest).st_mtime == T1

    # written manifests are up to date
    assert run(str(manifest), "-r", str(public), "--check") == 0


def test_write_dryrun(public):
    manifest = public / "app.appcache"
    assert run(str(manifest), "-r", str(public), "--write", "--dryrun") == 0
    assert manifest.read_text() == TEXT


def test_check_stale(public, capsys):
    rc = run(str(public / "app.appcache"), "-r", str(public), "--check")
    assert rc == config.STALE_EXIT
    assert capsys.readouterr().out == ""


def test_parse_error(public):
    (public / "bad.appcache").write_text("not a manifest\n")
    assert run(str(public / "bad.appcache"), "-r", str(public)) == 1


def test_missing_path(tmp_path):
    assert run(str(tmp_path / "missing")) == 1


def test_no_manifests(tmp_path):
    assert run(str(tmp_path)) == 1


def test_extension_option(public, capsys):
    (public / "app.mf").write_text("CACHE MANIFEST\n")
    rc = run(str(public), "-r", str(public), "-e", "mf")
    assert rc == 0
    assert capsys.readouterr().out.splitlines()[0] == "CACHE MANIFEST"


def test_default_root_is_cwd(public, monkeypatch, capsys):
    monkeypatch.chdir(public)
    assert run("app.appcache") == 0
    assert capsys.readouterr().out == EXPECTED
