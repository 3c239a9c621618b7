# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
One collection cycle: walk the metric catalog, fetch each show path once,
select objects, derive labels and values, and record them in the registry.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Dict, List, Mapping

from msa_exporter.connection import MSASession
from msa_exporter.document import (
    Node,
    describe_tree,
    extract_labels,
    find_nodes_by_name,
    find_property,
    parse_response,
)
from msa_exporter.exceptions import FetchError, ParseError
from msa_exporter.metrics_config import (
    METRIC_PREFIX,
    SSD_ARCHITECTURE,
    SSD_LIFE_METRIC,
    VERSION_CONTROLLERS,
    VERSION_DESCRIPTION,
    VERSION_LABEL_NAMES,
    VERSION_METRIC,
    VERSION_PATH,
    VERSION_PROPERTIES,
    MetricDefinition,
    MetricSource,
)
from msa_exporter.registry import MetricRegistry

LOG = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


@dataclass
class CycleStats:
    samples: int = 0
    skipped: int = 0
    failed_rules: int = 0
    fetches: int = 0
    duration: float = 0.0


def parse_value(raw: str) -> float:
    """
    Convert a property string to a float sample.

    'N/A' and 'NaN' both yield NaN.

    Raises:
        ValueError: If the string is not a number
    """
    value = "NaN" if raw == NOT_AVAILABLE else raw
    try:
        return float(value)
    except ValueError:
        if value == "NaN":
            return math.nan
        raise


def collect_versions(session: MSASession, registry: MetricRegistry, prefix: str = METRIC_PREFIX) -> int:
    """
    Publish controller firmware versions as labels of a constant 1 gauge.

    Raises:
        FetchError: If the version path cannot be fetched
        ParseError: If the version document is malformed
    """
    nodes = parse_response(session.fetch(VERSION_PATH))
    metric = registry.get_or_create(prefix + VERSION_METRIC, VERSION_DESCRIPTION, VERSION_LABEL_NAMES)

    count = 0
    for controller in VERSION_CONTROLLERS:
        for node in find_nodes_by_name(nodes, controller):
            labels = {"controller": controller}
            for prop, label in VERSION_PROPERTIES.items():
                value = find_property(node, prop)
                if value is not None:
                    labels[label] = value
            registry.set(metric, labels, 1.0)
            count += 1
    LOG.debug(f"Recorded firmware versions for {count} controller(s)")
    return count


class PathCache:
    """Raw bodies fetched during one cycle, keyed by show path."""

    def __init__(self, session: MSASession):
        self.session = session
        self._bodies: Dict[str, bytes] = {}
        self.fetches = 0

    def get(self, path: str) -> bytes:
        if path not in self._bodies:
            self.fetches += 1
            self._bodies[path] = self.session.fetch(path)
            if LOG.isEnabledFor(logging.DEBUG):
                self._dump_structure(path)
        return self._bodies[path]

    def _dump_structure(self, path: str) -> None:
        try:
            nodes = parse_response(self._bodies[path])
        except ParseError:
            return
        LOG.debug(f"XML structure for path {path}:")
        for line in describe_tree(nodes, "  "):
            LOG.debug(line)


def select_nodes(nodes: List[Node], metric_name: str, source: MetricSource) -> List[Node]:
    """Find the rule's objects, keeping only SSDs for the SSD life metric when any exist."""
    selected = find_nodes_by_name(nodes, source.object_selector)
    if source.object_selector == "drive" and metric_name == SSD_LIFE_METRIC:
        ssds = [node for node in selected if find_property(node, "architecture") == SSD_ARCHITECTURE]
        if ssds:
            selected = ssds
    return selected


def emit_source(metric_name: str, definition: MetricDefinition, source: MetricSource, nodes: List[Node],
                registry: MetricRegistry, stats: CycleStats, prefix: str = METRIC_PREFIX) -> None:
    selected = select_nodes(nodes, metric_name, source)
    if not selected:
        LOG.debug(f"No objects found for metric {metric_name} (path: {source.path}, selector: {source.object_selector})")
        return

    for node in selected:
        labels = extract_labels(node, source.properties_as_label)
        for key, value in source.labels.items():
            labels[key] = str(value)

        raw = find_property(node, source.property_selector)
        if raw is None:
            LOG.debug(f"Property {source.property_selector} not found for metric {metric_name}")
            stats.skipped += 1
            continue

        try:
            value = parse_value(raw)
        except ValueError as e:
            LOG.warning(f"Failed to parse value {raw!r} for metric {metric_name}: {e}")
            stats.skipped += 1
            continue

        metric = registry.get_or_create(prefix + metric_name, definition.description, definition.label_names)
        registry.set(metric, labels, value)
        stats.samples += 1


def run_cycle(session: MSASession, catalog: Mapping[str, MetricDefinition], registry: MetricRegistry,
              prefix: str = METRIC_PREFIX) -> CycleStats:
    """
    Run the firmware pass and then every catalog rule against one session.

    Args:
        session: Authenticated array session
        catalog: Metric name -> MetricDefinition
        registry: Destination for all samples
        prefix: Prepended to every metric name

    Returns:
        Counters describing the cycle

    Raises:
        FetchError, ParseError: Only when the firmware version pass fails.
            Failures of catalog rules are logged and skipped.
    """
    time_start = time.time()
    stats = CycleStats()

    collect_versions(session, registry, prefix)
    stats.fetches += 1

    cache = PathCache(session)
    for name, definition in catalog.items():
        for source in definition.sources:
            try:
                body = cache.get(source.path)
            except FetchError as e:
                LOG.error(f"Failed to get {source.path}: {e}")
                stats.failed_rules += 1
                continue

            try:
                nodes = parse_response(body)
            except ParseError as e:
                LOG.error(f"Failed to parse {source.path}: {e}")
                stats.failed_rules += 1
                continue

            emit_source(name, definition, source, nodes, registry, stats, prefix)

    stats.fetches += cache.fetches
    stats.duration = time.time() - time_start
    LOG.info(f"Cycle finished in {stats.duration:.2f}s: {stats.samples} samples, {stats.skipped} skipped, "
             f"{stats.failed_rules} failed rules, {stats.fetches} fetches")
    return stats
