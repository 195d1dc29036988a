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
Contains tests for the logger module.
"""

import logging

from appcachemanifest import config, logger


def test_get_log_level():
    assert logger.get_log_level(10) == "DEBUG"
    assert logger.get_log_level("30") == "WARNING"
    assert logger.get_log_level("error") == "ERROR"
    assert logger.get_log_level("bogus") == config.LOG_LEVEL_DEFAULT
    assert logger.get_log_level(99) == config.LOG_LEVEL_DEFAULT


def test_setup_stream_handler_replaces_previous():
    first = logger.setup_stream_handler()
    second = logger.setup_stream_handler()
    try:
        assert first not in logger.log.handlers
        assert second in logger.log.handlers
    finally:
        logger.log.removeHandler(second)


def test_setup_file_handler(tmp_path):
    handler = logger.setup_file_handler(logdir=str(tmp_path), dryrun=True)
    try:
        assert (tmp_path / "appcachemanifest.log").exists()
        record = logging.LogRecord("x", logging.INFO, "", 0, "msg", None, None)
        assert handler.filter(record) is False
    finally:
        logger.log.removeHandler(handler)
        handler.close()
