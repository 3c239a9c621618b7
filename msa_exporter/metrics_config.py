# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Metrics configuration for the MSA exporter.

Each catalog entry names one exported metric (without the ``msa_`` prefix) and
lists the rules used to fill it: which show path to fetch, which objects to
select, which property holds the value and which properties become labels.
Several rules may feed one metric, distinguished by their static labels.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

METRIC_PREFIX = "msa_"

# Firmware versions are not catalog driven, see collector.collect_versions()
VERSION_PATH = "version"
VERSION_METRIC = "version"
VERSION_DESCRIPTION = "Firmware Versions"
VERSION_CONTROLLERS = ("controller-a-versions", "controller-b-versions")
VERSION_PROPERTIES = {
    "bundle-version": "bundle_version",
    "bundle-base-version": "bundle_base_version",
    "sc-fw": "sc_fw",
    "mc-fw": "mc_fw",
    "pld-rev": "pld_rev",
}
VERSION_LABEL_NAMES = ("controller",) + tuple(VERSION_PROPERTIES.values())

# Only SSDs report a meaningful life-left value
SSD_LIFE_METRIC = "disk_ssd_life_left"
SSD_ARCHITECTURE = "SSD"

_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")


@dataclass(frozen=True)
class MetricSource:
    path: str
    object_selector: str
    property_selector: str
    properties_as_label: Mapping[str, str] = field(default_factory=dict)
    labels: Mapping[str, object] = field(default_factory=dict)

    @property
    def label_names(self) -> Tuple[str, ...]:
        """Every label name this rule can emit, sorted."""
        return tuple(sorted(set(self.properties_as_label.values()) | set(self.labels)))


@dataclass(frozen=True)
class MetricDefinition:
    description: str
    sources: Tuple[MetricSource, ...]

    @property
    def label_names(self) -> Tuple[str, ...]:
        return self.sources[0].label_names if self.sources else ()


def _source(path, object_selector, property_selector, properties_as_label, **labels) -> MetricSource:
    return MetricSource(
        path=path,
        object_selector=object_selector,
        property_selector=property_selector,
        properties_as_label=MappingProxyType(dict(properties_as_label)),
        labels=MappingProxyType(labels),
    )


# Label mappings: object property -> label name
HOSTPORT_STATS_LABELS = {"durable-id": "port"}
DISK_LABELS = {"location": "location", "serial-number": "serial"}
VOLUME_LABELS = {"volume-name": "volume"}
POOL_STATS_LABELS = {"pool": "pool", "serial-number": "serial"}
POOL_LABELS = {"name": "pool", "serial-number": "serial"}
TIER_LABELS = {"tier": "tier", "pool": "pool", "serial-number": "serial"}
CONTROLLER_LABELS = {"durable-id": "controller"}
PSU_LABELS = {"durable-id": "psu", "serial-number": "serial"}
ENCLOSURE_LABELS = {"enclosure-id": "id", "enclosure-wwn": "wwn"}


def _hostport(prop):
    return [_source("host-port-statistics", "host-port-statistics", prop, HOSTPORT_STATS_LABELS)]


def _volume_stats(prop):
    return [_source("volume-statistics", "volume-statistics", prop, VOLUME_LABELS)]


def _volume(prop):
    return [_source("volumes", "volume", prop, VOLUME_LABELS)]


def _pool_stats(prop):
    return [_source("pool-statistics", "pool-statistics", prop, POOL_STATS_LABELS)]


def _pool(prop):
    return [_source("pools", "pools", prop, POOL_LABELS)]


def _tier(prop):
    return [_source("pool-statistics", "tier-statistics", prop, TIER_LABELS)]


def _controller(prop):
    return [_source("controller-statistics", "controller-statistics", prop, CONTROLLER_LABELS)]


# Per-port drive error counters: (error type, property prefix)
DISK_ERROR_COUNTERS = [
    ("smart", "smart-count"),
    ("io-timeout", "io-timeout-count"),
    ("no-response", "no-response-count"),
    ("spinup-retry", "spinup-retry-count"),
    ("media-errors", "number-of-media-errors"),
    ("nonmedia-errors", "number-of-nonmedia-errors"),
    ("block-reassigns", "number-of-block-reassigns"),
    ("bad-blocks", "number-of-bad-blocks"),
]

# Volume tier share: (tier label, property)
VOLUME_TIERS = [
    ("Performance", "percent-tier-ssd"),
    ("Standard", "percent-tier-sas"),
    ("Archive", "percent-tier-sata"),
    ("RFC", "percent-allocated-rfc"),
]

METRIC_TABLE = {
    # Host ports
    "hostport_data_read": ("Data Read", _hostport("data-read-numeric")),
    "hostport_data_written": ("Data Written", _hostport("data-written-numeric")),
    "hostport_avg_resp_time_read": ("Read Response Time", _hostport("avg-read-rsp-time")),
    "hostport_avg_resp_time_write": ("Write Response Time", _hostport("avg-write-rsp-time")),
    "hostport_avg_resp_time": ("I/O Response Time", _hostport("avg-rsp-time")),
    "hostport_queue_depth": ("Queue Depth", _hostport("queue-depth")),
    "hostport_reads": ("Reads", _hostport("number-of-reads")),
    "hostport_writes": ("Writes", _hostport("number-of-writes")),

    # Disks
    "disk_temperature": ("Temperature", [_source("disks", "drive", "temperature-numeric", DISK_LABELS)]),
    "disk_iops": ("IOPS", [_source("disk-statistics", "disk-statistics", "iops", DISK_LABELS)]),
    "disk_power_on_hours": ("Power on hours",
                            [_source("disk-statistics", "disk-statistics", "power-on-hours", DISK_LABELS)]),
    "disk_bps": ("Bytes per second",
                 [_source("disks", "disk-statistics", "bytes-per-second-numeric", DISK_LABELS)]),
    "disk_avg_resp_time": ("Average I/O Response Time", [_source("disks", "drive", "avg-rsp-time", DISK_LABELS)]),
    SSD_LIFE_METRIC: ("SSD Life Remaining", [_source("disks", "drive", "ssd-life-left-numeric", DISK_LABELS)]),
    "disk_health": ("Health", [_source("disks", "drive", "health-numeric", DISK_LABELS)]),
    "disk_errors": ("Errors", [
        _source("disk-statistics", "disk-statistics", f"{prefix}-{port}", DISK_LABELS, type=error_type, port=port)
        for error_type, prefix in DISK_ERROR_COUNTERS
        for port in (1, 2)
    ]),

    # Volumes
    "volume_health": ("Health", _volume("health-numeric")),
    "volume_iops": ("IOPS", _volume_stats("iops")),
    "volume_bps": ("Bytes per second", _volume_stats("bytes-per-second-numeric")),
    "volume_reads": ("Reads", _volume_stats("number-of-reads")),
    "volume_writes": ("Writes", _volume_stats("number-of-writes")),
    "volume_data_read": ("Data Read", _volume_stats("data-read-numeric")),
    "volume_data_written": ("Data Written", _volume_stats("data-written-numeric")),
    "volume_shared_pages": ("Shared Pages", _volume_stats("shared-pages")),
    "volume_read_hits": ("Read-Cache Hits", _volume_stats("read-cache-hits")),
    "volume_read_misses": ("Read-Cache Misses", _volume_stats("read-cache-misses")),
    "volume_write_hits": ("Write-Cache Hits", _volume_stats("write-cache-hits")),
    "volume_write_misses": ("Write-Cache Misses", _volume_stats("write-cache-misses")),
    "volume_small_destage": ("Small Destages", _volume_stats("small-destages")),
    "volume_full_stripe_write_destages": ("Full Stripe Write Destages", _volume_stats("full-stripe-write-destages")),
    "volume_read_ahead_ops": ("Read-Ahead Operations", _volume_stats("read-ahead-operations")),
    "volume_write_cache_space": ("Write Cache Space", _volume_stats("write-cache-space")),
    "volume_write_cache_percent": ("Write Cache Percentage", _volume_stats("write-cache-percent")),
    "volume_size": ("Size", _volume("size-numeric")),
    "volume_total_size": ("Total Size", _volume("total-size-numeric")),
    "volume_allocated_size": ("Allocated Size", _volume("allocated-size-numeric")),
    "volume_blocks": ("Blocks", _volume("blocks")),
    "volume_tier_distribution": ("Volume tier distribution", [
        _source("volume-statistics", "volume-statistics", prop, VOLUME_LABELS, tier=tier)
        for tier, prop in VOLUME_TIERS
    ]),

    # Pools
    "pool_data_read": ("Data Read", _pool_stats("data-read-numeric")),
    "pool_data_written": ("Data Written", _pool_stats("data-written-numeric")),
    "pool_avg_resp_time": ("I/O Response Time", _pool_stats("avg-rsp-time")),
    "pool_avg_resp_time_read": ("Read Response Time", _pool_stats("avg-read-rsp-time")),
    "pool_total_size": ("Total Size", _pool("total-size-numeric")),
    "pool_available_size": ("Available Size", _pool("total-avail-numeric")),
    "pool_snapshot_size": ("Snapshot Size", _pool("snap-size-numeric")),
    "pool_allocated_pages": ("Allocated Pages", _pool("allocated-pages")),
    "pool_available_pages": ("Available Pages", _pool("available-pages")),
    "pool_metadata_volume_size": ("Metadata Volume Size", _pool("metadata-vol-size-numeric")),
    "pool_total_rfc_size": ("Total RFC Size", _pool("total-rfc-size-numeric")),
    "pool_available_rfc_size": ("Available RFC Size", _pool("available-rfc-size-numeric")),
    "pool_reserved_size": ("Reserved Size", _pool("reserved-size-numeric")),
    "pool_unallocated_reserved_size": ("Unallocated Reserved Size", _pool("reserved-unalloc-size-numeric")),

    # Tiers (nested below pool-statistics)
    "tier_reads": ("Reads", _tier("number-of-reads")),
    "tier_writes": ("Writes", _tier("number-of-writes")),
    "tier_data_read": ("Data Read", _tier("data-read-numeric")),
    "tier_data_written": ("Data Written", _tier("data-written-numeric")),
    "tier_avg_resp_time": ("I/O Response Time", _tier("avg-rsp-time")),
    "tier_avg_resp_time_read": ("Read Response Time", _tier("avg-read-rsp-time")),
    "tier_avg_resp_time_write": ("Write Response Time", _tier("avg-write-rsp-time")),

    # Enclosures and power supplies
    "enclosure_power": ("Power consumption in watts",
                        [_source("enclosures", "enclosures", "enclosure-power", ENCLOSURE_LABELS)]),
    "psu_health": ("Power-supply unit health",
                   [_source("enclosure", "power-supplies", "health-numeric", PSU_LABELS)]),
    "psu_status": ("Power-supply unit status",
                   [_source("enclosure", "power-supplies", "status-numeric", PSU_LABELS)]),

    # Controllers
    "controller_cpu": ("CPU Load", _controller("cpu-load")),
    "controller_iops": ("IOPS", _controller("iops")),
    "controller_bps": ("Bytes per second", _controller("bytes-per-second-numeric")),
    "controller_read_hits": ("Read-Cache Hits", _controller("read-cache-hits")),
    "controller_read_misses": ("Read-Cache Misses", _controller("read-cache-misses")),
    "controller_write_hits": ("Write-Cache Hits", _controller("write-cache-hits")),
    "controller_write_misses": ("Write-Cache Misses", _controller("write-cache-misses")),

    # System
    "system_health": ("System health", [_source("system", "system-information", "health-numeric", {})]),
}


def build_catalog(table: Optional[Dict[str, tuple]] = None) -> Mapping[str, MetricDefinition]:
    """
    Freeze a metric table into the read-only catalog used by the collector.

    Args:
        table: name -> (description, [MetricSource, ...]); defaults to METRIC_TABLE

    Returns:
        Read-only mapping of metric name to MetricDefinition, in table order
    """
    if table is None:
        table = METRIC_TABLE
    catalog = {
        name: MetricDefinition(description=description, sources=tuple(sources))
        for name, (description, sources) in table.items()
    }
    return MappingProxyType(catalog)


def validate_catalog(catalog: Mapping[str, MetricDefinition], prefix: str = METRIC_PREFIX) -> None:
    """
    Check that each metric can be registered with one fixed label-name set.

    Raises:
        ValueError: On an invalid metric or label name, a clash between mapped
            and static labels, or rules of one metric declaring different
            label-name sets
    """
    for name, definition in catalog.items():
        if not _METRIC_NAME_RE.match(prefix + name):
            raise ValueError(f"Invalid metric name: {prefix + name}")
        if name == VERSION_METRIC:
            raise ValueError(f"Metric name {name} is reserved for firmware versions")
        if not definition.sources:
            raise ValueError(f"Metric {name} has no sources")

        expected = definition.sources[0].label_names
        for source in definition.sources:
            clash = set(source.properties_as_label.values()) & set(source.labels)
            if clash:
                raise ValueError(f"Metric {name}: labels {sorted(clash)} are both mapped and static")
            for label in source.label_names:
                if not _LABEL_NAME_RE.match(label) or label.startswith("__"):
                    raise ValueError(f"Metric {name}: invalid label name {label!r}")
            if source.label_names != expected:
                raise ValueError(
                    f"Metric {name}: source {source.path}/{source.property_selector} declares labels "
                    f"{list(source.label_names)}, expected {list(expected)}"
                )
