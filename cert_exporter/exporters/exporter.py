import abc
import time

from ..certificates import decode_certificates


class Exporter(abc.ABC):
    """Turns certificate bytes into gauge series for one resource kind."""

    def __init__(self, metrics, clock=time.time):
        self.metrics = metrics
        self.clock = clock

    @property
    @abc.abstractmethod
    def gauges(self):
        """The (expires-in, not-after) gauge pair of this exporter."""
        pass

    @abc.abstractmethod
    def label_values(self, key_name, certificate, resource_name, resource_namespace, labels):
        """Label values for one certificate, in gauge label order."""
        pass

    def export_metrics(self, data, key_name, resource_name, resource_namespace, password="", labels=None):
        """
        Publish expiry series for every certificate found in ``data``.

        Raises CertificateDecodeError when nothing could be decoded.
        """
        certificates = decode_certificates(data, password)
        expiry_seconds, not_after = self.gauges
        now = self.clock()
        for certificate in certificates:
            values = self.label_values(
                key_name, certificate, resource_name, resource_namespace, labels or {})
            expiry_seconds.labels(*values).set(certificate.not_after - now)
            not_after.labels(*values).set(certificate.not_after)

    def reset_metrics(self):
        for gauge in self.gauges:
            gauge.clear()
