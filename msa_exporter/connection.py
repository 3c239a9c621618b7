# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Session handling for the MSA management API.

Login is a GET on /api/login/<sha256(login_password)>; the session key found in
the reply is then sent as a header and as cookies on every /api/show request.
"""

import hashlib
import logging
from typing import Optional

import requests
import urllib3

from msa_exporter.document import find_property, parse_response
from msa_exporter.exceptions import AuthError, FetchError, ParseError

LOG = logging.getLogger(__name__)
# MSA controllers ship self-signed certificates
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

SESSION_KEY_PROPERTY = "response"


def credential_digest(login: str, password: str) -> str:
    """Hex SHA-256 of ``login_password`` as expected by the login endpoint."""
    return hashlib.sha256(f"{login}_{password}".encode("utf-8")).hexdigest()


def _new_http_session() -> requests.Session:
    session = requests.Session()
    session.verify = False
    return session


class MSASession:
    """An authenticated session against one array."""

    def __init__(self, host: str, login: str, session_key: str, timeout: float,
                 http_session: Optional[requests.Session] = None):
        self.host = host
        self.login = login
        self.session_key = session_key
        self.timeout = timeout
        self.http = http_session if http_session is not None else _new_http_session()

    def fetch(self, path: str) -> bytes:
        """
        Fetch the raw XML body of ``/api/show/<path>``.

        Args:
            path: Show command path, e.g. 'disks' or 'host-port-statistics'

        Returns:
            Unparsed response body

        Raises:
            FetchError: On transport failure or a non-200 status
        """
        url = f"https://{self.host}/api/show/{path}"
        LOG.debug(f"Fetching {url}")
        try:
            resp = self.http.get(
                url,
                headers={"sessionKey": self.session_key},
                cookies={"wbisessionkey": self.session_key, "wbiusername": self.login},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise FetchError(self.host, path, str(e)) from e

        if resp.status_code != 200:
            raise FetchError(self.host, path, f"HTTP {resp.status_code}", status_code=resp.status_code)
        return resp.content

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


def authenticate(host: str, login: str, password: str, timeout: float,
                 http_session: Optional[requests.Session] = None) -> MSASession:
    """
    Log in to the array and return a session carrying the session key.

    Args:
        host: Array management hostname or address
        login: Account name
        password: Account password
        timeout: Per-request timeout in seconds
        http_session: Optional pre-built requests session (TLS verification is
            disabled on it)

    Returns:
        MSASession ready for fetch()

    Raises:
        AuthError: On transport failure, non-200 status, an unparsable reply,
            or a reply without a session key
    """
    http = http_session if http_session is not None else _new_http_session()
    http.verify = False

    url = f"https://{host}/api/login/{credential_digest(login, password)}"
    LOG.info(f"Authenticating to {host} as {login}")
    try:
        resp = http.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        http.close()
        raise AuthError(host, str(e)) from e

    if resp.status_code != 200:
        http.close()
        raise AuthError(host, f"HTTP {resp.status_code}")

    try:
        nodes = parse_response(resp.content)
    except ParseError as e:
        http.close()
        raise AuthError(host, f"unparsable login reply: {e}") from e

    session_key = None
    for node in nodes:
        session_key = find_property(node, SESSION_KEY_PROPERTY)
        if session_key:
            break

    if not session_key:
        http.close()
        raise AuthError(host, "session key not found in response")

    LOG.debug(f"Obtained session key from {host}")
    return MSASession(host, login, session_key, timeout, http_session=http)
