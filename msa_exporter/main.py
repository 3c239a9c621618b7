#!/usr/bin/env python3

# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Entry point for the MSA Prometheus exporter.

Starts the /metrics endpoint, then on every interval logs in to the array,
runs one collection cycle and sleeps until the next one. Sessions are never
reused between cycles and failed cycles are not retried early.
"""

import argparse
import logging
import os
import sys
import time
from typing import Callable, Mapping, Optional

from pydantic import ValidationError

from msa_exporter.collector import CycleStats, run_cycle
from msa_exporter.config import DEFAULT_INTERVAL, DEFAULT_PORT, DEFAULT_TIMEOUT, ExporterSettings, load_settings
from msa_exporter.connection import authenticate
from msa_exporter.exceptions import AuthError, MSAExporterError
from msa_exporter.metrics_config import MetricDefinition, build_catalog, validate_catalog
from msa_exporter.registry import MetricRegistry
from msa_exporter.server import MetricsServer

LOG = logging.getLogger(__name__)

FORMAT = '%(asctime)s - %(levelname)s - %(funcName)s - %(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export HPE MSA storage metrics for Prometheus")
    parser.add_argument('positional', nargs='*', metavar='HOST LOGIN PASSWORD',
        help='Hostname, login and password as positional arguments (all three required). Flags take precedence.')
    parser.add_argument('--hostname', type=str, default=None,
        help='MSA storage hostname or address. Env: HOST')
    parser.add_argument('--login', type=str, default=None,
        help='MSA storage login. Env: LOGIN')
    parser.add_argument('--password', type=str, default=None,
        help='MSA storage password. Env: PASSWORD')
    parser.add_argument('--port', type=int, default=None,
        help=f'Exporter port. Env: PORT. Default: {DEFAULT_PORT}')
    parser.add_argument('--interval', type=float, default=None,
        help=f'Scrape interval in seconds. Env: INTERVAL. Default: {DEFAULT_INTERVAL:g}')
    parser.add_argument('--timeout', type=float, default=None,
        help=f'Per-request timeout in seconds. Env: TIMEOUT. Default: {DEFAULT_TIMEOUT:g}')
    parser.add_argument('--config', type=str, default=None,
        help='Path to a YAML config file. Lowest precedence after defaults.')
    parser.add_argument('--maxIterations', type=int, default=None,
        help='Exit after this many collection cycles. Env: MAX_ITERATIONS. Default: 0 (run indefinitely)')
    parser.add_argument('--logfile', type=str, default=None,
        help='Path to log file. If not provided, logs to console only.')
    parser.add_argument('--loglevel', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default='INFO',
        help='Log level for both console and file output. Default: INFO')
    parser.add_argument('--debug', action='store_true',
        help='Shorthand for --loglevel DEBUG')
    return parser


def configure_logging(loglevel: str, logfile: Optional[str] = None) -> None:
    log_level = getattr(logging, loglevel.upper())

    if logfile:
        logfile_dir = os.path.dirname(logfile) if os.path.dirname(logfile) else '.'
        if os.path.exists(logfile_dir) and os.access(logfile_dir, os.W_OK):
            logging.basicConfig(filename=logfile, level=log_level, format=FORMAT, datefmt=DATE_FORMAT)
            logging.info('Logging to file: ' + logfile)
        else:
            logging.basicConfig(level=log_level, format=FORMAT, datefmt=DATE_FORMAT)
            logging.error(f'Logfile directory {logfile_dir} does not exist or is not writable')
            logging.warning('Falling back to console logging only')
    else:
        logging.basicConfig(level=log_level, format=FORMAT, datefmt=DATE_FORMAT)

    # The login URL carries the credential digest, keep HTTP libraries at INFO or above
    requests_level = max(log_level, logging.INFO)
    logging.getLogger("requests").setLevel(level=requests_level)
    logging.getLogger("urllib3").setLevel(level=requests_level)


def collect_once(settings: ExporterSettings, catalog: Mapping[str, MetricDefinition],
                 registry: MetricRegistry) -> Optional[CycleStats]:
    """
    Authenticate and run one collection cycle.

    Returns:
        CycleStats, or None when the cycle failed (the failure is logged)
    """
    try:
        session = authenticate(settings.hostname, settings.login, settings.password, settings.timeout)
    except AuthError as e:
        LOG.error(f"Failed to create client: {e}")
        return None

    with session:
        try:
            return run_cycle(session, catalog, registry)
        except MSAExporterError as e:
            LOG.error(f"Failed to scrape: {e}")
            return None


def poll(settings: ExporterSettings, catalog: Mapping[str, MetricDefinition], registry: MetricRegistry,
         sleep: Callable[[float], None] = time.sleep) -> int:
    """
    Run collection cycles every ``settings.interval`` seconds.

    Returns:
        Number of cycles run (only returns when max_iterations is set)
    """
    loop_iteration = 1
    while True:
        time_start = time.time()
        LOG.info(f"Starting collection iteration {loop_iteration} of "
                 f"{settings.max_iterations if settings.max_iterations > 0 else 'unlimited'}")
        try:
            collect_once(settings, catalog, registry)
        except Exception as e:
            LOG.error(f"Unexpected error during collection: {e}", exc_info=True)

        if settings.max_iterations > 0 and loop_iteration >= settings.max_iterations:
            LOG.info(f"Completed final iteration ({settings.max_iterations}). Exiting.")
            return loop_iteration

        elapsed = time.time() - time_start
        if elapsed >= settings.interval:
            LOG.warning(f"Collection took {elapsed:.2f}s but interval is {settings.interval:g}s")
        else:
            LOG.debug(f"Sleeping for {settings.interval - elapsed:.2f} seconds until next collection")
            sleep(settings.interval - elapsed)
        loop_iteration += 1


def main(argv=None) -> int:
    CMD = build_parser().parse_args(argv)
    configure_logging('DEBUG' if CMD.debug else CMD.loglevel, CMD.logfile)

    try:
        settings = load_settings(CMD)
    except ValidationError as e:
        print(f"Error: invalid configuration (hostname, login and password are required):\n{e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    catalog = build_catalog()
    validate_catalog(catalog)
    registry = MetricRegistry()

    LOG.info(f"Starting MSA exporter on port {settings.port}")
    LOG.info(f"Connecting to {settings.hostname} as {settings.login}")
    LOG.info(f"Scraping every {settings.interval:g} seconds with timeout {settings.timeout:g} seconds")

    server = MetricsServer(registry, settings.port)
    try:
        server.start()
    except OSError:
        return 1

    try:
        poll(settings, catalog, registry)
    except KeyboardInterrupt:
        LOG.info("Interrupted by user. Exiting gracefully.")
    finally:
        server.stop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
