"""
Prometheus exporter for HPE MSA storage arrays.
"""

__version__ = "1.0.0"
