"""cert-exporter - Entry point."""

import logging
import os
import signal
import sys
import threading
from dotenv import load_dotenv
from prometheus_client import REGISTRY

from .checker import CheckerConfig, ConfigMapChecker, SecretChecker
from .exporters import get_exporter
from .kube import KubeClient
from .metrics import ExporterMetrics, MetricsServer
from .resources import CONFIG_MAP, SECRET
from .utils import env_list, get_k8s_api

logger = logging.getLogger("cert-exporter")


def load_checker_config(prefix, period, with_types=False):
    """
    Build the checker settings for one resource kind from the environment.

    Returns None when no include globs are configured, which disables the kind.
    """
    include_globs = env_list(f"{prefix}_INCLUDE_GLOBS")
    if not include_globs:
        return None
    return CheckerConfig(
        period=period,
        label_selectors=env_list(f"{prefix}_LABEL_SELECTORS"),
        annotation_selectors=env_list(f"{prefix}_ANNOTATION_SELECTORS"),
        namespaces=env_list(f"{prefix}_NAMESPACES", default=[""]),
        include_globs=include_globs,
        exclude_globs=env_list(f"{prefix}_EXCLUDE_GLOBS"),
        include_types=env_list(f"{prefix}_INCLUDE_TYPES") if with_types else (),
    )


def build_checkers(kube_client, metrics, secret_config, config_map_config):
    checkers = []
    if secret_config is not None:
        checkers.append(SecretChecker(
            kube_client, get_exporter(SECRET, metrics), metrics, secret_config))
    if config_map_config is not None:
        checkers.append(ConfigMapChecker(
            kube_client, get_exporter(CONFIG_MAP, metrics), metrics, config_map_config))
    return checkers


def main():
    """Main entry point for cert-exporter."""
    # Load environment variables from .env file
    load_dotenv()

    # Get log level from environment variable (default to INFO)
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if log_level not in valid_log_levels:
        log_level = "INFO"

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        port = int(os.environ.get("METRICS_PORT", "8080"))
        period = float(os.environ.get("POLLING_PERIOD", "3600"))
        secret_config = load_checker_config("SECRETS", period, with_types=True)
        config_map_config = load_checker_config("CONFIGMAPS", period)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    if secret_config is None and config_map_config is None:
        logger.error(
            "Nothing to check. Set SECRETS_INCLUDE_GLOBS and/or CONFIGMAPS_INCLUDE_GLOBS.")
        sys.exit(1)

    metrics = ExporterMetrics(REGISTRY)

    # Start up the server to expose the metrics.
    metrics_server = MetricsServer(port=port, registry=REGISTRY)
    metrics_server.start()

    logger.info(f"Prometheus metrics server started on port {port}.")
    logger.info(f"Log level set to: {log_level}")

    try:
        v1_api = get_k8s_api(os.environ.get("KUBECONFIG"))
    except Exception as e:
        logger.error(f"Failed to build kubernetes client: {e}")
        sys.exit(1)

    checkers = build_checkers(
        KubeClient(v1_api), metrics, secret_config, config_map_config)

    # Setup signal handlers for graceful shutdown
    def signal_handler(signum, frame):
        signal_name = 'SIGTERM' if signum == signal.SIGTERM else 'SIGINT'
        logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        for checker in checkers:
            checker.shutdown()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    if os.environ.get("TEST_MODE") == "true":
        logger.info("TEST_MODE is enabled. Skipping checkers.")
        sys.exit(0)

    logger.info("Signal handlers registered. Starting checkers...")

    threads = [
        threading.Thread(target=checker.run, name=f"{checker.name}-checker", daemon=True)
        for checker in checkers
    ]
    for thread in threads:
        thread.start()

    try:
        for thread in threads:
            while thread.is_alive():
                thread.join(timeout=1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down...")
        for checker in checkers:
            checker.shutdown()

    metrics_server.stop()
    logger.info("cert-exporter shutdown complete.")
    sys.exit(0)


if __name__ == '__main__':
    main()
