"""
Kubernetes readiness and liveness probe utilities.

Provides a minimal HTTP health server for queue workers.
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any


class HealthServer:
    """
    HTTP health check server for standalone services (NATS consumers).

    Provides /healthz and /readyz endpoints for Kubernetes probes.

    Usage:
        server = HealthServer(port=8080)
        threading.Thread(target=server.start, daemon=True).start()

    Attributes:
        is_ready: Set to True when service is ready to receive traffic.
    """

    def __init__(self, port: int = 8080):
        """
        Initialize health server.

        Args:
            port: HTTP port to listen on.
        """
        self._port = port
        self.is_ready = False
        self._server: HTTPServer | None = None

    def set_ready(self, ready: bool = True) -> None:
        """
        Set service readiness state.

        Args:
            ready: Whether service is ready for traffic.
        """
        self.is_ready = ready

    def status_for(self, path: str) -> tuple[int, dict[str, str]]:
        """
        Resolve the response for a probe path.

        Args:
            path: Request path.

        Returns:
            Tuple of (HTTP status, JSON body).
        """
        if path in ("/healthz", "/"):
            return 200, {"status": "healthy"}
        if path == "/readyz":
            if self.is_ready:
                return 200, {"status": "ready"}
            return 503, {"status": "not_ready"}
        return 404, {"error": "not_found"}

    def start(self) -> None:
        """
        Start the HTTP health server (blocking).

        Call this in a daemon thread.
        """
        health_server = self

        class HealthHandler(BaseHTTPRequestHandler):
            """Handler for health check endpoints."""

            protocol_version = "HTTP/1.1"

            def do_GET(self) -> None:
                status, body = health_server.status_for(self.path)
                content = json.dumps(body).encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(content)))
                self.end_headers()
                self.wfile.write(content)

            def log_message(self, format: str, *args: Any) -> None:
                """Suppress default access logging."""
                pass

        self._server = HTTPServer(("0.0.0.0", self._port), HealthHandler)
        self._server.serve_forever()

    def stop(self) -> None:
        """Stop the health server."""
        if self._server:
            self._server.shutdown()
