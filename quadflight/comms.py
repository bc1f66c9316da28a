"""HTTP control panel for arming the drone and its emergency kill switch."""

from __future__ import annotations

import argparse
import http.server
import logging
import threading
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from .mixer import MotorBank
from .state import FlightStatus

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 80

CONTROL_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Drone control</title>
<style>
  body { font-family: sans-serif; text-align: center; margin-top: 40px;
         background: #1e1e1e; color: #fff; }
  button { display: block; width: 80%; margin: 20px auto; padding: 30px;
           font-size: 28px; font-weight: bold; border: none;
           border-radius: 10px; color: #fff; }
  button:active { opacity: 0.7; }
  .kill { background: #c62828; padding: 50px; font-size: 38px; }
  .arm { background: #2e7d32; }
  #status { font-size: 20px; font-weight: bold; color: #ffb300; }
</style>
</head>
<body>
<h1>Flight Control</h1>
<div id="status">STATUS: AWAITING COMMAND</div>
<button class="kill" data-url="/kill" data-label="KILLED"
        data-color="#c62828">EMERGENCY KILL</button>
<button class="arm" data-url="/arm" data-label="ARMED"
        data-color="#2e7d32">ARM DRONE</button>
<script>
document.querySelectorAll("button").forEach(function (button) {
  button.addEventListener("click", function () {
    if (navigator.vibrate) { navigator.vibrate(200); }
    fetch(button.dataset.url, { method: "POST" }).then(function (reply) {
      if (!reply.ok) { return; }
      var status = document.getElementById("status");
      status.textContent = "STATUS: " + button.dataset.label;
      status.style.color = button.dataset.color;
    }).catch(function (error) {
      console.error("Command failed to send:", error);
    });
  });
});
</script>
</body>
</html>
"""


@dataclass(frozen=True)
class Response:
    """An HTTP reply: status code, content type and body text."""

    status: int
    content_type: str
    body: str


def _arm(status: FlightStatus, motors: MotorBank) -> Response:
    status.arm()
    logger.warning("WEB: DRONE ARMED!")
    return Response(200, "text/plain", "Armed")


def _kill(status: FlightStatus, motors: MotorBank) -> Response:
    status.kill()
    motors.kill()
    logger.warning("WEB: EMERGENCY KILL ENGAGED!")
    return Response(200, "text/plain", "Killed")


def _page(status: FlightStatus, motors: MotorBank) -> Response:
    return Response(200, "text/html", CONTROL_PAGE)


_ROUTES = {
    ("GET", "/"): _page,
    ("POST", "/arm"): _arm,
    ("POST", "/kill"): _kill,
}


def handle_request(status: FlightStatus, motors: MotorBank, method, path) -> Response:
    """Dispatch one request; unknown method/path pairs get a 404."""
    route = urlsplit(path).path or "/"
    handler = _ROUTES.get((method.upper(), route))
    if handler is None:
        return Response(404, "text/plain", f"Not found: {route}")
    return handler(status, motors)


def make_server(
    status: FlightStatus,
    motors: MotorBank,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> http.server.ThreadingHTTPServer:
    """Build an HTTP server bound to ``host:port`` that serves the control panel."""

    class _Handler(http.server.BaseHTTPRequestHandler):
        def _reply(self, method: str) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            if length:
                self.rfile.read(length)
            response = handle_request(status, motors, method, self.path)
            payload = response.body.encode("utf-8")
            self.send_response(response.status)
            self.send_header("Content-Type", f"{response.content_type}; charset=utf-8")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def do_GET(self) -> None:  # noqa: N802
            self._reply("GET")

        def do_POST(self) -> None:  # noqa: N802
            self._reply("POST")

        def log_message(self, format, *args) -> None:  # noqa: A002
            logger.debug("%s - %s", self.address_string(), format % args)

    return http.server.ThreadingHTTPServer((host, port), _Handler)


def main(argv: Optional[list] = None) -> int:
    """Serve the control panel until interrupted."""
    parser = argparse.ArgumentParser(description="Drone arm/kill web control panel.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to bind")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to bind")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    status = FlightStatus()
    motors = MotorBank()
    server = make_server(status, motors, args.host, args.port)
    logger.info("Web server started on %s:%d", args.host, server.server_address[1])
    stop = threading.Event()
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        stop.set()
    finally:
        server.server_close()
    return 0