from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs

import pytest

LOGIN_PAGE = """<html><body>
<form method="post" action="/identity">
  <input id="identity_email" name="email">
  <input type="submit" name="commit" value="Continue">
</form>
</body></html>"""

PASSWORD_PAGE = """<html><body>
<form method="post" action="/session">
  <input id="password" name="password" type="password">
  <button type="submit" name="action" value="default">Log in</button>
</form>
</body></html>"""

SCHEDULE_PAGE = """<html><body>
<div class="schedule-card"><span class="schedule-card-label">
  {label}
</span></div>
</body></html>"""

EMPTY_SCHEDULE_PAGE = "<html><body><p>No orders today</p></body></html>"


class FakeRelishSite:
    """Tiny stand-in for the Relish login flow and schedule page."""

    def __init__(self) -> None:
        self.label: str | None = "Order Placed"
        self.submitted: dict[str, str] = {}
        self.schedule_hits = 0


def _make_handler(site: FakeRelishSite):
    class Handler(BaseHTTPRequestHandler):
        def log_message(self, format, *args):  # noqa: A002
            pass

        def _html(self, body: str) -> None:
            data = body.encode("utf-8")
            self.send_response(200)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)

        def do_GET(self):
            if self.path.startswith("/schedule"):
                site.schedule_hits += 1
                if site.label is None:
                    self._html(EMPTY_SCHEDULE_PAGE)
                else:
                    self._html(SCHEDULE_PAGE.format(label=site.label))
            elif self.path.startswith("/login"):
                self._html(LOGIN_PAGE)
            else:
                self.send_error(404)

        def do_POST(self):
            length = int(self.headers.get("Content-Length", 0))
            form = {k: v[0] for k, v in parse_qs(self.rfile.read(length).decode()).items()}
            site.submitted.update(form)

            if self.path == "/identity":
                self._html(PASSWORD_PAGE)
                return
            self.send_response(303)
            self.send_header("Location", "/schedule")
            self.send_header("Content-Length", "0")
            self.end_headers()

    return Handler


@pytest.fixture()
def relish_site():
    site = FakeRelishSite()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _make_handler(site))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    site.base_url = f"http://127.0.0.1:{server.server_address[1]}"
    try:
        yield site
    finally:
        server.shutdown()
        server.server_close()
