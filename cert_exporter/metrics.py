"""Prometheus metric families and the HTTP server exposing them."""

import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger("cert-exporter.metrics")

SECRET_LABELS = ["key_name", "issuer", "cn", "secret_name",
                 "secret_namespace", "serviceline"]
CONFIGMAP_LABELS = ["key_name", "issuer", "cn", "configmap_name",
                    "configmap_namespace"]


class ExporterMetrics:
    """All metric families of the exporter, registered on one registry."""

    def __init__(self, registry=REGISTRY):
        self.registry = registry

        self.errors_total = Counter(
            'cert_exporter_error_total',
            'Total number of errors encountered while checking certificates',
            registry=registry)
        self.check_duration = Histogram(
            'cert_exporter_check_duration_seconds',
            'Duration of a periodic check', ['kind'], registry=registry)

        self.secret_expiry_seconds = Gauge(
            'cert_exporter_secret_expires_in_seconds',
            'Number of seconds until a certificate stored in a secret expires',
            SECRET_LABELS, registry=registry)
        self.secret_not_after = Gauge(
            'cert_exporter_secret_not_after_timestamp',
            'Expiration timestamp of a certificate stored in a secret',
            SECRET_LABELS, registry=registry)

        self.configmap_expiry_seconds = Gauge(
            'cert_exporter_configmap_expires_in_seconds',
            'Number of seconds until a certificate stored in a configMap expires',
            CONFIGMAP_LABELS, registry=registry)
        self.configmap_not_after = Gauge(
            'cert_exporter_configmap_not_after_timestamp',
            'Expiration timestamp of a certificate stored in a configMap',
            CONFIGMAP_LABELS, registry=registry)


class _Handler(BaseHTTPRequestHandler):
    registry = REGISTRY

    def do_GET(self):
        path = self.path.split("?", 1)[0]
        if path == "/metrics":
            body = generate_latest(self.registry)
            self._respond(200, CONTENT_TYPE_LATEST, body)
        elif path == "/healthz":
            body = json.dumps({"status": "healthy"}).encode("utf-8")
            self._respond(200, "application/json", body)
        else:
            self._respond(404, "text/plain", b"Not Found")

    def _respond(self, status, content_type, body):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.debug(format % args)


class MetricsServer:
    """Serves /metrics and /healthz from a background thread."""

    def __init__(self, port=8080, registry=REGISTRY, addr=""):
        self.port = port
        self.addr = addr
        self.registry = registry
        self.server = None
        self._thread = None

    def start(self):
        handler = type("MetricsHandler", (_Handler,), {"registry": self.registry})
        self.server = ThreadingHTTPServer((self.addr, self.port), handler)
        self.server.daemon_threads = True
        self._thread = threading.Thread(
            target=self.server.serve_forever, name="metrics-server", daemon=True)
        self._thread.start()
        logger.info(f"Metrics server listening on port {self.port}.")

    def stop(self):
        if self.server is not None:
            self.server.shutdown()
            self.server.server_close()
