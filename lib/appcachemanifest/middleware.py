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
Contains WSGI middleware that rewrites served cache manifests:

    from appcachemanifest.middleware import AppCacheMiddleware

    app = AppCacheMiddleware(app, roots=["public"])
    app = AppCacheMiddleware(app, roots=["public"], extensions=["appcache", "mf"])
    app = AppCacheMiddleware(app, roots=["public"], timeout=0)

Responses for paths ending in a manifest extension and served with the
text/cache-manifest content type get a regenerated body and a Last-Modified
header. Manifests that fail to parse are served unchanged.
"""

import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from appcachemanifest import config, resolver, util
from appcachemanifest.cache import ManifestCache, http_date
from appcachemanifest.logger import log
from appcachemanifest.parser import ParseError
from appcachemanifest.resolver import PathLike

CONTENT_TYPE = re.compile(r"\A" + re.escape(config.CONTENT_TYPE) + r"\b", re.IGNORECASE)

Headers = List[Tuple[str, str]]


def path_pattern(extensions: Union[str, Iterable[str]]):
    """Returns a regex matching url paths of files with one of the extensions.

    :param extensions: extension or list of extensions.
    :return: compiled regex.
    """
    if isinstance(extensions, str):
        extensions = [extensions]
    names = "|".join(re.escape(ext.lstrip(".")) for ext in extensions)
    return re.compile(r"\A(.*?)/+[^/]+\.(?:%s)\Z" % names)


def get_header(headers: Headers, name: str) -> Optional[str]:
    """Returns the first value of a header, ignoring case of the name."""
    name = name.lower()
    for key, value in headers:
        if key.lower() == name:
            return value
    return None


def set_header(headers: Headers, name: str, value: str) -> Headers:
    """Returns headers with all values of name replaced by value."""
    lower = name.lower()
    return [(k, v) for k, v in headers if k.lower() != lower] + [(name, value)]


class AppCacheMiddleware(object):
    """WSGI middleware that serves regenerated cache manifests."""

    def __init__(
        self,
        app: Callable,
        roots: Sequence[PathLike],
        extensions: Union[str, Iterable[str]] = config.EXTENSIONS,
        timeout: Optional[float] = None,
        cache: Optional[ManifestCache] = None,
    ):
        """Initialize the middleware.

        :param app: wrapped WSGI application.
        :param roots: ordered list of static file directories.
        :param extensions: manifest extension or list of extensions.
        :param timeout: seconds before manifests are fully checked again,
            0 disables caching, defaults to the cache timeout.
        :param cache: manifest cache, created when not given.
        """
        self.app = app
        self.roots = list(roots)
        self.timeout = timeout
        self.path_re = path_pattern(extensions)
        if cache is None:
            cache = ManifestCache(
                timeout=config.TIMEOUT if timeout is None else timeout
            )
        self.cache = cache

    def __call__(self, environ: dict, start_response: Callable):
        path = environ.get("PATH_INFO", "")
        if not self.path_re.match(path):
            return self.app(environ, start_response)

        response = []
        chunks = []

        def _start_response(status, headers, exc_info=None):
            response[:] = [status, headers, exc_info]
            return chunks.append

        result = self.app(environ, _start_response)
        try:
            for chunk in result:
                chunks.append(chunk)
        finally:
            if hasattr(result, "close"):
                result.close()

        status, headers, exc_info = response
        body = b"".join(chunks)
        if status.startswith("200"):
            body, headers = self.rewrite(path, headers, body)

        start_response(status, headers, exc_info)
        return [body]

    def rewrite(
        self, path: str, headers: Headers, body: bytes
    ) -> Tuple[bytes, Headers]:
        """Returns the regenerated manifest body and updated headers for a
        response, or the response unchanged if it is not a manifest.

        :param path: request url path.
        :param headers: response headers.
        :param body: response body.
        :return: tuple of (body, headers).
        """
        if not CONTENT_TYPE.match(get_header(headers, "Content-Type") or ""):
            return body, headers

        # PATH_INFO is already unescaped
        found = resolver.find_path(util.canonicalize(path), self.roots)
        if found is None:
            log.debug("no manifest file found for %s", path)
            return body, headers
        source, _ = found

        try:
            output, last_modified = self.cache.process(
                body, source, self.roots, timeout=self.timeout
            )
        except ParseError as err:
            log.warning("%s: %s", path, err)
            return body, headers

        body = output.encode(config.ENCODING)
        headers = set_header(headers, "Content-Length", str(len(body)))
        headers = set_header(headers, "Last-Modified", http_date(last_modified))
        return body, headers
