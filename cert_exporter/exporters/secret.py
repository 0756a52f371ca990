from .exporter import Exporter

SERVICELINE_LABEL = "serviceline"


class SecretExporter(Exporter):
    """Exports certificates stored in secrets, tagged with the owning serviceline."""

    @property
    def gauges(self):
        return self.metrics.secret_expiry_seconds, self.metrics.secret_not_after

    def label_values(self, key_name, certificate, resource_name, resource_namespace, labels):
        return (
            key_name,
            certificate.issuer_cn,
            certificate.subject_cn,
            resource_name,
            resource_namespace,
            labels.get(SERVICELINE_LABEL, ""),
        )
