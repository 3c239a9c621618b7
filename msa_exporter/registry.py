# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Gauge registry shared by the collector (writer) and the metrics endpoint (reader).
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from prometheus_client import CollectorRegistry, Gauge

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredMetric:
    name: str
    description: str
    label_names: Tuple[str, ...]
    gauge: Gauge


class MetricRegistry:
    """
    Lazily creates one labelled Gauge per metric name and keeps it for the
    life of the process.

    The label-name set given on first creation is final. Later emissions are
    fitted to it: declared labels missing from the emission are set to the
    empty string, undeclared ones are dropped.
    """

    def __init__(self, prometheus_registry: Optional[CollectorRegistry] = None):
        # Private registry, nothing is added to the prometheus_client default one
        self.prometheus_registry = prometheus_registry if prometheus_registry is not None else CollectorRegistry()
        self._metrics: Dict[str, RegisteredMetric] = {}
        self._lock = threading.Lock()

    def get_or_create(self, name: str, description: str, label_names: Iterable[str]) -> RegisteredMetric:
        """
        Return the metric registered under ``name``, creating it on first use.

        Args:
            name: Full metric name, including the prefix
            description: HELP text, only used on creation
            label_names: Label names, only used on creation

        Returns:
            The cached RegisteredMetric
        """
        label_names = tuple(label_names)
        with self._lock:
            metric = self._metrics.get(name)
            if metric is not None:
                if set(label_names) != set(metric.label_names):
                    LOG.warning(f"Metric {name} already registered with labels {list(metric.label_names)}, "
                                f"ignoring requested labels {list(label_names)}")
                return metric

            gauge = Gauge(name, description, labelnames=label_names, registry=self.prometheus_registry)
            metric = RegisteredMetric(name=name, description=description, label_names=label_names, gauge=gauge)
            self._metrics[name] = metric
            LOG.debug(f"Registered gauge {name} with labels {list(label_names)}")
            return metric

    def set(self, metric: RegisteredMetric, labels: Dict[str, str], value: float) -> None:
        """Record ``value`` for the label combination, overwriting any previous value."""
        extra = set(labels) - set(metric.label_names)
        if extra:
            LOG.warning(f"Dropping undeclared labels {sorted(extra)} for metric {metric.name}")
        values = {name: str(labels.get(name, "")) for name in metric.label_names}

        with self._lock:
            if metric.label_names:
                metric.gauge.labels(**values).set(value)
            else:
                metric.gauge.set(value)

    def get_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Current value of one series, or None if it was never set."""
        return self.prometheus_registry.get_sample_value(name, labels or {})

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)
