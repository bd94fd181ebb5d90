"""
File responder
- Maps the request path onto the document root, refusing anything outside it
- Serves index.html for directories, or a plain HTML listing
- Conditional (304) and byte range (206) requests via Starlette's FileResponse
"""

import errno
import html
import mimetypes
import os
import stat
import urllib.parse
from typing import List, Optional, Tuple

import anyio.to_thread
from starlette.datastructures import URL, Headers
from starlette.exceptions import HTTPException
from starlette.responses import FileResponse, HTMLResponse, RedirectResponse, Response
from starlette.staticfiles import NotModifiedResponse, StaticFiles
from starlette.types import Scope

DEFAULT_TYPE = "application/octet-stream"
INDEX = "index.html"


def guess_type(path: str) -> str:
    media_type, _ = mimetypes.guess_type(path)
    return media_type or DEFAULT_TYPE


def render_listing(url_path: str, entries: List[Tuple[str, bool]]) -> str:
    """HTML listing in the same format as ``python -m http.server``.

    `entries` holds (name, is_dir) pairs, in any order.
    """
    title = html.escape(f"Directory listing for {url_path}", quote=False)
    lines = [
        "<!DOCTYPE HTML>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{title}</title>",
        "</head>",
        "<body>",
        f"<h1>{title}</h1>",
        "<hr>",
        "<ul>",
    ]
    for name, is_dir in sorted(entries, key=lambda e: e[0].lower()):
        link = name + "/" if is_dir else name
        lines.append(
            '<li><a href="%s">%s</a></li>'
            % (urllib.parse.quote(link, errors="surrogatepass"), html.escape(link, quote=False))
        )
    lines.extend(["</ul>", "<hr>", "</body>", "</html>", ""])
    return "\n".join(lines)


class FileServer(StaticFiles):
    """Static files rooted at one directory, with directory listings.

    Path lookups are confined to the real path of the root; anything that
    resolves outside it (``..`` segments, symlinks) is a 404.
    """

    def __init__(self, directory: str) -> None:
        super().__init__(directory=directory, html=True)

    def lookup_path(self, path: str) -> Tuple[str, Optional[os.stat_result]]:
        full_path, stat_result = super().lookup_path(path)
        if stat_result is not None and not os.access(full_path, os.R_OK):
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), full_path)
        return full_path, stat_result

    async def get_response(self, path: str, scope: Scope) -> Response:
        if scope["method"] not in ("GET", "HEAD"):
            raise HTTPException(status_code=405)

        try:
            full_path, stat_result = await anyio.to_thread.run_sync(self.lookup_path, path)
        except PermissionError:
            raise HTTPException(status_code=403)
        except OSError as exc:
            if exc.errno == errno.ENAMETOOLONG:
                raise HTTPException(status_code=404)
            raise

        if stat_result is None:
            raise HTTPException(status_code=404)

        if stat.S_ISREG(stat_result.st_mode):
            return self.file_response(full_path, stat_result, scope)

        if not stat.S_ISDIR(stat_result.st_mode):
            raise HTTPException(status_code=404)

        # directory URLs always end in "/" so relative links resolve
        if not scope["path"].endswith("/"):
            url = URL(scope=scope)
            return RedirectResponse(url=url.replace(path=url.path + "/"))

        try:
            index_path, index_stat = await anyio.to_thread.run_sync(self.lookup_path, os.path.join(path, INDEX))
        except PermissionError:
            raise HTTPException(status_code=403)
        if index_stat is not None and stat.S_ISREG(index_stat.st_mode):
            return self.file_response(index_path, index_stat, scope)

        return await self.listing_response(full_path, scope)

    def file_response(
        self,
        full_path: str,
        stat_result: os.stat_result,
        scope: Scope,
        status_code: int = 200,
    ) -> Response:
        request_headers = Headers(scope=scope)
        response = FileResponse(
            full_path,
            status_code=status_code,
            stat_result=stat_result,
            media_type=guess_type(full_path),
        )
        if self.is_not_modified(response.headers, request_headers):
            return NotModifiedResponse(response.headers)
        return response

    async def listing_response(self, full_path: str, scope: Scope) -> Response:
        try:
            entries = await anyio.to_thread.run_sync(_scan, full_path)
        except PermissionError:
            raise HTTPException(status_code=403)
        return HTMLResponse(render_listing(scope["path"], entries))


def _scan(directory: str) -> List[Tuple[str, bool]]:
    with os.scandir(directory) as it:
        return [(entry.name, entry.is_dir()) for entry in it]
