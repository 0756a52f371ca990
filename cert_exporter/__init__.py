"""Prometheus exporter for certificates stored in Kubernetes secrets and configMaps."""
