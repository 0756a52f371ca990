"""Periodic discovery of certificates stored in cluster resources."""

import abc
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Tuple

from .filters import GlobFilter, decide, matches_annotations, matches_type
from .passwords import PasswordResolver
from .resources import CONFIG_MAP, SECRET

logger = logging.getLogger("cert-exporter.checker")


def _as_tuple(value, name):
    if value is None:
        return ()
    if isinstance(value, str):
        raise ValueError(f"{name} must be a list of strings, not a string")
    items = tuple(value)
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"{name} must only contain strings, got {item!r}")
    return items


@dataclass(frozen=True)
class CheckerConfig:
    """Settings of one checker. Validated on creation and never changed afterwards."""

    period: float = 3600
    label_selectors: Tuple[str, ...] = ()
    annotation_selectors: Tuple[str, ...] = ()
    namespaces: Tuple[str, ...] = ("",)
    include_globs: Tuple[str, ...] = ()
    exclude_globs: Tuple[str, ...] = ()
    include_types: Tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.period, bool) or not isinstance(self.period, (int, float)):
            raise ValueError(f"period must be a number, got {self.period!r}")
        if not math.isfinite(self.period) or self.period <= 0:
            raise ValueError(f"period must be a positive finite number, got {self.period}")
        for name in ("label_selectors", "annotation_selectors", "namespaces",
                     "include_globs", "exclude_globs", "include_types"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name), name))
        if not self.namespaces:
            object.__setattr__(self, "namespaces", ("",))


class ResourceChecker(abc.ABC):
    """
    Reconciles the exported metrics of one resource kind on a fixed period.

    Every check starts by clearing the exporter's series, then lists the
    configured namespaces, filters resources and their data entries, and
    exports whatever qualifies. Failures are logged and counted; they never
    end a check early.
    """

    kind = None

    def __init__(self, kube_client, exporter, metrics, config,
                 password_resolver=None, clock=time.monotonic, wait=None):
        self.kube_client = kube_client
        self.exporter = exporter
        self.metrics = metrics
        self.config = config
        self.password_resolver = password_resolver or PasswordResolver(kube_client)
        self.clock = clock
        self._shutdown = threading.Event()
        # wait(timeout) returns True once the checker should stop
        self._wait = wait or self._shutdown.wait
        self.include_filter = GlobFilter(config.include_globs, metrics.errors_total)
        self.exclude_filter = GlobFilter(config.exclude_globs, metrics.errors_total)

    @property
    def name(self):
        return self.kind[0].lower() + self.kind[1:]

    @abc.abstractmethod
    def list_resources(self, namespace, label_selector=None):
        """List the resources of this kind in one namespace."""
        pass

    def shutdown(self):
        """Signal the checker to stop after the current check."""
        logger.info(f"Shutdown signal received. Stopping {self.name} checker...")
        self._shutdown.set()

    def run(self):
        """Check immediately, then once per period until shut down."""
        namespaces = ", ".join(ns or "<all>" for ns in self.config.namespaces)
        logger.info(f"Scan {self.name}s in {namespaces}")
        while not self._shutdown.is_set():
            started = self.clock()
            try:
                self.check()
            except Exception as e:
                self.metrics.errors_total.inc()
                logger.error(f"Unexpected error during {self.name} check: {e}", exc_info=True)
            remaining = self.config.period - (self.clock() - started)
            if self._wait(max(0, remaining)):
                break
        logger.info(f"{self.kind} checker stopped.")

    def check(self):
        """Run a single check."""
        with self.metrics.check_duration.labels(self.name).time():
            logger.info("Begin periodic check")
            self.exporter.reset_metrics()
            for item in self.collect():
                if self.include_resource(item):
                    self.check_resource(item)
            logger.info(f"Periodic {self.name} check finished.")

    def collect(self):
        """List every namespace, once per label selector. Results are not deduplicated."""
        items = []
        selectors = self.config.label_selectors or (None,)
        for namespace in self.config.namespaces:
            for label_selector in selectors:
                try:
                    items.extend(self.list_resources(namespace, label_selector))
                except Exception as e:
                    self.metrics.errors_total.inc()
                    logger.error(f"Error requesting {self.name}s {e}")
        return items

    def include_resource(self, item):
        logger.info(f"Reviewing {self.name} {item.name} in {item.namespace}")
        if not matches_annotations(item.annotations, self.config.annotation_selectors):
            logger.debug(
                f"Ignoring {self.name} {item.name} in {item.namespace}, no annotation of {list(self.config.annotation_selectors)}")
            return False
        return True

    def check_resource(self, item):
        for name, data in sorted(item.data.items()):
            decision = decide(name, self.include_filter, self.exclude_filter)
            if not decision.accepted:
                logger.info(
                    f"Ignoring {name}. Does not match {list(self.config.include_globs)} or matches {list(self.config.exclude_globs)}.")
                continue

            logger.info(f"Publishing {item.name}/{item.namespace} metrics {name}")
            try:
                password = self.password_resolver.resolve(item, name)
                self.exporter.export_metrics(
                    data, name, item.name, item.namespace, password, item.labels)
            except Exception as e:
                self.metrics.errors_total.inc()
                logger.error(f"Error exporting {self.name} {item.name}/{name}: {e}")


class SecretChecker(ResourceChecker):
    kind = SECRET

    def list_resources(self, namespace, label_selector=None):
        return self.kube_client.list_secrets(namespace, label_selector)

    def include_resource(self, item):
        if not matches_type(item.resource_type, self.config.include_types):
            logger.info(
                f"Ignoring secret {item.name} in {item.namespace} because {item.resource_type} is not included in your secret include types {list(self.config.include_types)}")
            return False
        return super().include_resource(item)


class ConfigMapChecker(ResourceChecker):
    kind = CONFIG_MAP

    def __init__(self, kube_client, exporter, metrics, config, **kwargs):
        if config.include_types:
            raise ValueError("include_types only applies to secrets")
        kwargs.setdefault(
            "password_resolver", PasswordResolver(kube_client, check_same_resource=False))
        super().__init__(kube_client, exporter, metrics, config, **kwargs)

    def list_resources(self, namespace, label_selector=None):
        return self.kube_client.list_config_maps(namespace, label_selector)
