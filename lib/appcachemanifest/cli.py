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
Command line interface for appcachemanifest: regenerates offline web
application cache manifests with a timestamp of their latest change.

Usage:

    $ appcache [PATH ...] [OPTIONS]
"""

import argparse
import os
import sys
from typing import List, Optional, Sequence

from tqdm import tqdm

from appcachemanifest import config, util
from appcachemanifest.cache import ManifestCache
from appcachemanifest.logger import log, setup_logging
from appcachemanifest.parser import ParseError


def build_parser(prog: str = "appcache") -> argparse.ArgumentParser:
    """Builds the command line argument parser."""
    from appcachemanifest import __version__

    parser = argparse.ArgumentParser(
        prog=prog,
        description=__doc__,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "paths",
        metavar="PATH",
        nargs="*",
        default=["."],
        help="manifest files or directories to search (default is cwd)",
    )
    parser.add_argument(
        "-r",
        "--root",
        metavar="DIR",
        dest="roots",
        action="append",
        help="static file directory listed files are found in, in order\n"
        "(repeatable, default is cwd)",
    )
    parser.add_argument(
        "-e",
        "--extension",
        metavar="EXT",
        dest="extensions",
        action="append",
        help="manifest file extension to search directories for\n"
        "(repeatable, default is %s)" % ",".join(config.EXTENSIONS),
    )
    parser.add_argument(
        "-w",
        "--write",
        action="store_true",
        help="rewrite manifests in place instead of printing them",
    )
    parser.add_argument(
        "-c",
        "--check",
        action="store_true",
        help="exit with code %d when a manifest is out of date" % config.STALE_EXIT,
    )
    parser.add_argument(
        "-d",
        "--dryrun",
        action="store_true",
        help="do a dry run, no files will be written",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="show verbose information",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"appcache {__version__}",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = build_parser()
    return parser.parse_args(list(argv) if argv is not None else None)


def read_text(path: str) -> str:
    """Returns the contents of a text file."""
    with open(path, "r", encoding=config.ENCODING, newline="") as f:
        return f.read()


def write_manifest(path: str, output: str, mtime: float) -> None:
    """Writes a manifest and sets its modification time, so the file is not
    newer than the timestamp it contains.

    :param path: manifest file path.
    :param output: manifest text.
    :param mtime: modification time to set.
    """
    with open(path, "w", encoding=config.ENCODING, newline="\n") as f:
        f.write(output)
    os.utime(path, (mtime, mtime))


def run(args: argparse.Namespace) -> int:
    """Runs the command based on parsed arguments."""

    roots = args.roots or [os.getcwd()]
    extensions = args.extensions or config.EXTENSIONS

    for path in args.paths:
        if not os.path.exists(path):
            log.error(f"path does not exist: {path}")
            return 1

    manifests = util.find_manifests(args.paths, extensions)
    if not manifests:
        log.error("no manifests found")
        return 1

    if args.dryrun:
        log.info(config.DRYRUN_MESSAGE)

    # every file is generated once, no need to keep results
    cache = ManifestCache(timeout=0)
    errors = 0
    stale = 0

    for path in tqdm(
        manifests,
        desc="manifests",
        unit="file",
        disable=len(manifests) < 2 or not (args.write or args.check),
    ):
        try:
            text = read_text(path)
            output, last_modified = cache.process(text, path, roots)
        except (OSError, UnicodeDecodeError, ParseError) as err:
            log.error(f"{path}: {err}")
            errors += 1
            continue

        is_stale = text != output
        if is_stale:
            stale += 1

        if args.check:
            if is_stale:
                log.info(f"{path} is stale")
        elif args.write:
            if not is_stale:
                log.debug(f"{path} is up to date")
            elif args.dryrun:
                log.info(f"would write: {path}")
            else:
                write_manifest(path, output, last_modified.timestamp())
                log.info(f"wrote: {path}")
        else:
            sys.stdout.write(output)

    if errors:
        return 1
    if args.check and stale:
        return config.STALE_EXIT
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the appcache command."""

    args = parse_args(argv)

    # set up logging handlers
    setup_logging(dryrun=args.dryrun or not args.write, verbose=args.verbose)

    try:
        return run(args)
    except KeyboardInterrupt:
        log.error("canceled")
        return 2


if __name__ == "__main__":
    sys.exit(main())
