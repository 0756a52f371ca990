"""Read-only access to Secrets and ConfigMaps."""

import logging

from .resources import ResourceItem

logger = logging.getLogger("cert-exporter.kube")


class KubeClient:
    """Lists and fetches resources through a CoreV1Api and converts them to ResourceItems.

    An empty namespace lists across all namespaces. API errors are not handled
    here; callers decide whether they are fatal.
    """

    def __init__(self, v1_api):
        self.v1 = v1_api

    @staticmethod
    def _list_kwargs(label_selector):
        if label_selector:
            return {"label_selector": label_selector}
        return {}

    def list_secrets(self, namespace, label_selector=None):
        kwargs = self._list_kwargs(label_selector)
        if namespace:
            secrets = self.v1.list_namespaced_secret(namespace, **kwargs)
        else:
            secrets = self.v1.list_secret_for_all_namespaces(**kwargs)
        return [ResourceItem.from_secret(s) for s in secrets.items]

    def list_config_maps(self, namespace, label_selector=None):
        kwargs = self._list_kwargs(label_selector)
        if namespace:
            config_maps = self.v1.list_namespaced_config_map(namespace, **kwargs)
        else:
            config_maps = self.v1.list_config_map_for_all_namespaces(**kwargs)
        return [ResourceItem.from_config_map(c) for c in config_maps.items]

    def get_secret(self, namespace, name):
        logger.debug(f"Reading secret '{name}' in ns '{namespace}'")
        return ResourceItem.from_secret(self.v1.read_namespaced_secret(name, namespace))
