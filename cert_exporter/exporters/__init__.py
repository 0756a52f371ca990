from .secret import SecretExporter
from .configmap import ConfigMapExporter
from ..resources import SECRET, CONFIG_MAP

SUPPORTED_EXPORTERS = {
    SECRET.lower(): SecretExporter,
    CONFIG_MAP.lower(): ConfigMapExporter,
}

def get_exporter(kind, metrics, **kwargs):
    exporter_class = SUPPORTED_EXPORTERS.get(kind.lower())
    if not exporter_class:
        raise ValueError(f"Unsupported resource kind: {kind}")
    return exporter_class(metrics, **kwargs)
