"""
Server driver
- Mounts the file responder at "/" and wraps it with the header decorator and access log
- Runs uvicorn over plain HTTP or TLS from the same Options
"""

import logging
import ssl
from typing import Optional

import uvicorn
from fastapi import FastAPI
from starlette.types import ASGIApp

from fileserve.access import AccessLog
from fileserve.files import FileServer
from fileserve.headers import ResponseHeaders
from fileserve.options import Options, split_addr

log = logging.getLogger("fileserve")


def create_app(options: Options) -> FastAPI:
    # No docs/openapi routes: every path belongs to the file tree
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    # Middleware added last runs first: access log outside, headers inside
    app.add_middleware(ResponseHeaders, cors=options.use_cors, headers=options.headers)
    app.add_middleware(AccessLog)

    app.mount("/", FileServer(options.dir), name="files")
    return app


def build_config(options: Options, app: Optional[ASGIApp] = None) -> uvicorn.Config:
    """Build and load the uvicorn config.

    Loading happens here, before anything is bound, so a missing or invalid
    PEM cert/key raises straight away.
    """
    host, port = split_addr(options.addr)
    kwargs = {}
    if options.use_https:
        kwargs.update(ssl_certfile=options.cert_file, ssl_keyfile=options.key_file)

    config = uvicorn.Config(
        app if app is not None else create_app(options),
        host=host,
        port=port,
        access_log=False,
        log_config=None,
        server_header=False,
        **kwargs,
    )
    config.load()
    if config.ssl is not None:
        config.ssl.minimum_version = ssl.TLSVersion.TLSv1_2
    return config


def serve(options: Options) -> int:
    """Serve until interrupted. Returns the process exit status."""
    log.info("Serving files from: %s", options.dir)
    log.info("%s: %s", options.scheme.upper(), options.addr)

    server = uvicorn.Server(build_config(options))
    try:
        server.run()
    except SystemExit as exc:
        # uvicorn exits on bind errors (address in use, permission denied)
        return exc.code if isinstance(exc.code, int) and exc.code else 1
    return 0 if server.started else 1
