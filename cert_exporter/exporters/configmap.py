from .exporter import Exporter


class ConfigMapExporter(Exporter):
    """Exports certificates stored in configMaps."""

    @property
    def gauges(self):
        return self.metrics.configmap_expiry_seconds, self.metrics.configmap_not_after

    def label_values(self, key_name, certificate, resource_name, resource_namespace, labels):
        return (
            key_name,
            certificate.issuer_cn,
            certificate.subject_cn,
            resource_name,
            resource_namespace,
        )
