# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Custom exceptions for the MSA exporter
"""

from typing import Optional


class MSAExporterError(Exception):
    """Base exception for the MSA exporter"""
    pass


class AuthError(MSAExporterError):
    """Login to the array management API failed"""

    def __init__(self, host: str, message: str):
        self.host = host
        super().__init__(f"Authentication to {host} failed: {message}")


class FetchError(MSAExporterError):
    """A show request against the array failed"""

    def __init__(self, host: str, path: str, message: str, status_code: Optional[int] = None):
        self.host = host
        self.path = path
        self.status_code = status_code
        super().__init__(f"Failed to fetch '{path}' from {host}: {message}")


class ParseError(MSAExporterError):
    """Response body is not a well-formed XML document"""
    pass
