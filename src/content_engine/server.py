"""Scheduler and liveness server.

The liveness endpoint answers every request with ``200 Server is running``.
The scheduler runs the pipeline once at startup and then every
``interval_hours(articles_per_day)`` hours, inline on its own thread, so a
slow run delays the next one instead of overlapping it.
"""

from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable

from src.common.logging import setup_logging

logger = setup_logging(module_name="content_engine.server")

LIVENESS_BODY = b"Server is running"


def interval_hours(articles_per_day: float) -> int:
    """Hours between runs: 24 / articles_per_day, rounded, at least 1."""
    return max(1, round(24 / articles_per_day))


class LivenessHandler(BaseHTTPRequestHandler):
    """Answers any method on any path with ``200 Server is running``."""

    def _respond(self, include_body: bool = True) -> None:
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(LIVENESS_BODY)))
        self.end_headers()
        if include_body:
            self.wfile.write(LIVENESS_BODY)

    def do_GET(self):  # noqa: N802
        self._respond()

    def do_HEAD(self):  # noqa: N802
        self._respond(include_body=False)

    do_POST = do_PUT = do_PATCH = do_DELETE = do_OPTIONS = do_GET

    def log_message(self, format, *args):  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


def make_server(port: int, host: str = "0.0.0.0") -> ThreadingHTTPServer:
    return ThreadingHTTPServer((host, port), LivenessHandler)


class Scheduler:
    """Runs ``job`` now and then every ``interval_seconds`` until stopped."""

    def __init__(self, job: Callable[[], object], interval_seconds: float):
        self.job = job
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_once(self) -> None:
        try:
            self.job()
        except Exception:
            # A crashed run must not stop the schedule
            logger.exception("Scheduled run failed")

    def loop(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self.interval_seconds)

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.loop, name="scheduler", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)


def serve(job: Callable[[], object], articles_per_day: float, port: int) -> None:
    """Start the scheduler and block serving the liveness endpoint."""
    hours = interval_hours(articles_per_day)
    scheduler = Scheduler(job, hours * 3600)
    server = make_server(port)

    logger.info("Server is running on port %d", port)
    logger.info("Scheduled to run every %d hour(s)", hours)
    scheduler.start()
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        scheduler.stop()
        server.server_close()
