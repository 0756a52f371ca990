"""Plain representations of the cluster resources that may carry certificates."""

import base64
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

logger = logging.getLogger("cert-exporter.resources")

SECRET = "Secret"
CONFIG_MAP = "ConfigMap"


@dataclass
class ResourceItem:
    """A Secret or ConfigMap reduced to what the checkers need."""

    kind: str
    namespace: str
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    data: Dict[str, bytes] = field(default_factory=dict)
    resource_type: Optional[str] = None

    @classmethod
    def from_secret(cls, secret):
        metadata = secret.metadata
        return cls(
            kind=SECRET,
            namespace=metadata.namespace,
            name=metadata.name,
            labels=dict(metadata.labels or {}),
            annotations=dict(metadata.annotations or {}),
            data={
                key: base64.b64decode(value)
                for key, value in (secret.data or {}).items()
            },
            resource_type=secret.type,
        )

    @classmethod
    def from_config_map(cls, config_map):
        metadata = config_map.metadata
        return cls(
            kind=CONFIG_MAP,
            namespace=metadata.namespace,
            name=metadata.name,
            labels=dict(metadata.labels or {}),
            annotations=dict(metadata.annotations or {}),
            data=merge_config_map_data(
                config_map.data, config_map.binary_data, metadata.name),
        )


def merge_config_map_data(text_data, binary_data, name=""):
    """
    Combine the text and binary maps of a ConfigMap.

    Binary values are base64 encoded by the API and win over a text value
    stored under the same key.
    """
    combined = {
        key: value.encode("utf-8") for key, value in (text_data or {}).items()
    }
    for key, value in (binary_data or {}).items():
        if key in combined:
            logger.warning(
                f"Key '{key}' of configMap '{name}' is present in data and binaryData, using binaryData.")
        combined[key] = base64.b64decode(value)
    return combined
