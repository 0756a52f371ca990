import pytest
import time
import requests
from prometheus_client import CollectorRegistry
from cert_exporter.metrics import ExporterMetrics, MetricsServer


def test_health_endpoint():
    """Test that the /healthz endpoint returns a healthy status"""
    # Start the metrics server
    server = MetricsServer(port=8001, registry=CollectorRegistry())
    server.start()

    # Give the server a moment to start
    time.sleep(0.5)

    try:
        # Test the health endpoint
        response = requests.get('http://localhost:8001/healthz')
        assert response.status_code == 200
        assert response.headers['Content-Type'] == 'application/json'
        assert response.json() == {"status": "healthy"}
    finally:
        # Clean up
        server.stop()


def test_metrics_endpoint_serves_registry():
    """The /metrics endpoint exposes the families of the given registry"""
    registry = CollectorRegistry()
    metrics = ExporterMetrics(registry)
    metrics.errors_total.inc()

    server = MetricsServer(port=8002, registry=registry)
    server.start()

    time.sleep(0.5)

    try:
        response = requests.get('http://localhost:8002/metrics')
        assert response.status_code == 200
        assert 'text/plain' in response.headers['Content-Type']
        assert 'cert_exporter_error_total 1.0' in response.text
    finally:
        server.stop()


def test_404_for_unknown_path():
    """Test that unknown paths return 404"""
    server = MetricsServer(port=8003, registry=CollectorRegistry())
    server.start()

    time.sleep(0.5)

    try:
        response = requests.get('http://localhost:8003/unknown')
        assert response.status_code == 404
        assert response.content == b"Not Found"
    finally:
        server.stop()
