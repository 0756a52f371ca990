import datetime

import pytest
from unittest.mock import MagicMock
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from kubernetes.client.rest import ApiException
from prometheus_client import REGISTRY, CollectorRegistry

from cert_exporter.metrics import ExporterMetrics

from certs import NOW


@pytest.fixture
def kube_client():
    """Fixture for a mock KubeClient without any password secrets."""
    client = MagicMock()
    client.get_secret.side_effect = ApiException(status=404, reason="Not Found")
    return client


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return ExporterMetrics(registry)


@pytest.fixture
def cert_factory():
    """Build self-signed (or issuer-signed) certificates expiring at a given epoch."""

    def make(common_name="example.com", not_after=NOW + 86400, issuer_cn=None, extra_subject=None):
        key = ec.generate_private_key(ec.SECP256R1())
        subject_attrs = list(extra_subject or [])
        if common_name is not None:
            subject_attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
        subject = x509.Name(subject_attrs)
        issuer = subject
        if issuer_cn is not None:
            issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer_cn)])
        certificate = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(datetime.datetime.fromtimestamp(NOW - 3600, tz=datetime.timezone.utc))
            .not_valid_after(datetime.datetime.fromtimestamp(not_after, tz=datetime.timezone.utc))
            .sign(key, hashes.SHA256())
        )
        return certificate, key

    return make


@pytest.fixture(autouse=True)
def clear_prometheus_registry():
    """Clear the default Prometheus registry before each test."""
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        REGISTRY.unregister(collector)
