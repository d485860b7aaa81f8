"""Web front-end: a single form page listing search links for a playlist."""

import html
import logging
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlencode, urlparse

from .errors import NotFoundError, PlaylisterError
from .models import SearchEntry
from .paginator import Paginator

logger = logging.getLogger(__name__)

ERR_EMPTY_URI = "spotify uri is empty"
ERR_SERVER = "server error"


@dataclass
class TemplateData:
    playlist_uri: str = ""
    videos: tuple[SearchEntry, ...] = ()
    error_message: str = ""
    previous: str = ""
    next: str = ""


def page_link(playlist_id: str, page_number: int) -> str:
    return "/?" + urlencode({"uri": playlist_id, "page": page_number})


def build_template_data(paginator: Paginator, uri: str, page: str = "") -> TemplateData:
    """Resolve the requested page and map failures to user messages."""
    if not uri.strip():
        return TemplateData(error_message=ERR_EMPTY_URI)

    try:
        view = paginator.resolve_page(uri, page)
    except NotFoundError as e:
        logger.warning(f"Error building template data, err {e}")
        return TemplateData(playlist_uri=uri, error_message=f"playlist not found by uri '{uri}'")
    except PlaylisterError as e:
        logger.error(f"Error building template data, err {e}")
        return TemplateData(playlist_uri=uri, error_message=ERR_SERVER)

    data = TemplateData(playlist_uri=view.playlist_id, videos=view.entries)
    if view.previous_available:
        data.previous = page_link(view.playlist_id, view.page_number - 1)
    if view.next_available:
        data.next = page_link(view.playlist_id, view.page_number + 1)
    return data


def render_page(data: TemplateData) -> str:
    """Generate the HTML for the form and the result list."""
    parts = []
    if data.error_message:
        parts.append(
            '<div style="color: red; font-size: .8em; padding-top: 5px">'
            f"{html.escape(data.error_message)}</div>"
        )
    if data.videos:
        parts.append(
            "<p>I hope you find some videos for songs you like that you didn't know existed :)</p>"
        )
        for video in data.videos:
            parts.append(
                f'<p><a href="{html.escape(video.search_url)}" target="_blank">'
                f"{html.escape(video.display_name)}</a></p>"
            )
    if data.previous:
        parts.append(
            f'<a href="{html.escape(data.previous)}" style="text-decoration:none">&larr;</a>'
        )
    if data.next:
        parts.append(f'<a href="{html.escape(data.next)}" style="text-decoration:none">&rarr;</a>')
    body = "\n        ".join(parts)

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Video Playlist Maker</title>
</head>
<body style="font-family: Courier New; padding: 45px; text-align: center">
    <div>Hi! It's good to see you.</div><br>
    <div style="max-width: 600px; margin:auto">
        <form action="/" method="POST">
            <label for="uri">Enter the URI of a public Spotify playlist and I'll generate music video search urls for the songs in that playlist:</label><br><br>
            <input type="text" id="uri" name="uri" value="{html.escape(data.playlist_uri)}" style="font-size: .8em" />
            <input type="submit" value="Submit">
        </form>
        {body}
    </div>
</body>
</html>'''


def make_handler(paginator: Paginator) -> type:
    """Create a request handler class bound to a paginator."""

    class PlaylisterHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            parsed = urlparse(self.path)
            if parsed.path != "/":
                self.send_error(404)
                return
            self._respond(parse_qs(parsed.query))

        def do_POST(self):
            parsed = urlparse(self.path)
            if parsed.path != "/":
                self.send_error(404)
                return
            try:
                length = int(self.headers.get("Content-Length") or 0)
            except ValueError:
                self.send_error(400, "Invalid Content-Length")
                return
            if length < 0:
                self.send_error(400, "Invalid Content-Length")
                return
            body = self.rfile.read(length).decode("utf-8", errors="replace")
            form = parse_qs(parsed.query)
            form.update(parse_qs(body))
            self._respond(form)

        def _respond(self, form: dict):
            uri = form.get("uri", [""])[0]
            page = form.get("page", [""])[0]
            content = render_page(build_template_data(paginator, uri, page)).encode("utf-8")
            self.send_response(200)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(content)))
            self.end_headers()
            self.wfile.write(content)

        def log_message(self, format, *args):
            logger.debug(f"{self.address_string()} - {format % args}")

    return PlaylisterHandler


def make_server(paginator: Paginator, host: str = "", port: int = 1313) -> ThreadingHTTPServer:
    return ThreadingHTTPServer((host, port), make_handler(paginator))


def run_web_server(paginator: Paginator, port: int = 1313, host: str = "") -> int:
    """Serve the web page until interrupted."""
    server = make_server(paginator, host, port)
    print(f"Server is running at http://localhost:{server.server_address[1]}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print()
        print("Shutting down.")
    finally:
        server.server_close()
    return 0
