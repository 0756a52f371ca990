import logging
import os

logger = logging.getLogger("cert-exporter")


def split_list(value):
    """Split a comma separated setting, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def env_list(name, default=None):
    items = split_list(os.environ.get(name))
    if not items and default is not None:
        return list(default)
    return items


def get_k8s_api(kubeconfig_path=None):
    """Initialize and return Kubernetes API client."""
    from kubernetes import client, config

    if kubeconfig_path:
        config.load_kube_config(config_file=kubeconfig_path)
        logger.info(f"Loaded kube config from {kubeconfig_path}.")
        return client.CoreV1Api()

    # Load kube config
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster kube config.")
    except config.ConfigException:
        logger.info(
            "Could not load in-cluster config. Falling back to local kube config.")
        config.load_kube_config()
    return client.CoreV1Api()
