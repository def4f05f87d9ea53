"""
Development HTTP server for the generated blog.
"""

import logging
import os
import posixpath
from functools import partial
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

from .errors import ConfigError

logger = logging.getLogger('blgo.server')

ASSETS_PREFIX = '/assets'


class BlogRequestHandler(SimpleHTTPRequestHandler):
    """
    Serve the output directory with pretty URLs and ``/assets/`` from the
    assets directory. Directory listings are never produced.
    """

    default_ext = '.html'
    forbidden_suffix = '/post/'

    def __init__(self, *args, output_dir, assets_dir=None, **kwargs):
        self.output_dir = output_dir
        self.assets_dir = assets_dir
        super().__init__(*args, directory=output_dir, **kwargs)

    def send_head(self):
        path = urlsplit(self.path).path

        if path == ASSETS_PREFIX or path.startswith(ASSETS_PREFIX + '/'):
            rest = path[len(ASSETS_PREFIX):] or '/'
            if self.assets_dir is None or rest.endswith('/'):
                self.send_error(HTTPStatus.NOT_FOUND)
                return None
            self.directory = self.assets_dir
            self.path = rest
            return super().send_head()

        if path.endswith(self.forbidden_suffix):
            self.send_error(HTTPStatus.NOT_FOUND)
            return None
        if path != '/' and not path.endswith('/') and not posixpath.splitext(path)[1]:
            path += self.default_ext
        self.directory = self.output_dir
        self.path = path
        return super().send_head()

    def list_directory(self, path):
        self.send_error(HTTPStatus.NOT_FOUND)
        return None

    def log_message(self, format, *args):
        logger.info(f"{self.address_string()} - {format % args}")


def parse_address(address):
    """Split ``host:port``; an empty host binds every interface."""
    host, sep, port = address.rpartition(':')
    if not sep:
        host, port = address, ''
    try:
        return host, int(port)
    except ValueError:
        raise ConfigError(f"invalid listening address {address!r}, expected host:port") from None


def create_server(address, output_dir, assets_dir=None):
    handler = partial(
        BlogRequestHandler,
        output_dir=os.path.abspath(output_dir),
        assets_dir=os.path.abspath(assets_dir) if assets_dir else None,
    )
    try:
        return ThreadingHTTPServer(parse_address(address), handler)
    except OSError as e:
        raise ConfigError(f"could not listen on {address}: {e.strerror or e}") from e


def serve(address, output_dir, assets_dir=None):
    """Serve until interrupted."""
    server = create_server(address, output_dir, assets_dir)
    host, port = server.server_address[:2]
    logger.info(f"Listening on http://{host}:{port}")
    try:
        server.serve_forever()
    finally:
        server.server_close()
