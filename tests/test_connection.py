"""Tests for MSA login and show requests."""

import hashlib

import pytest
import requests

from msa_exporter.connection import MSASession, authenticate, credential_digest
from msa_exporter.exceptions import AuthError, FetchError

LOGIN_OK = b'<RESPONSE><OBJECT name="status"><PROPERTY name="response">KEY1</PROPERTY></OBJECT></RESPONSE>'
LOGIN_NESTED = (b'<RESPONSE><OBJECT name="outer"><OBJECT name="status">'
                b'<PROPERTY name="response">KEY2</PROPERTY></OBJECT></OBJECT></RESPONSE>')
LOGIN_NO_KEY = b'<RESPONSE><OBJECT name="status"><PROPERTY name="return-code">2</PROPERTY></OBJECT></RESPONSE>'


def test_credential_digest():
    expected = hashlib.sha256(b"manage_!secret").hexdigest()
    assert credential_digest("manage", "!secret") == expected
    assert len(expected) == 64


def test_authenticate_extracts_session_key(http_session, make_response):
    http_session.get.return_value = make_response(200, LOGIN_OK)

    session = authenticate("msa.example.com", "manage", "!secret", 7, http_session=http_session)

    assert isinstance(session, MSASession)
    assert session.session_key == "KEY1"
    assert session.host == "msa.example.com"
    assert session.login == "manage"
    assert session.timeout == 7
    digest = credential_digest("manage", "!secret")
    http_session.get.assert_called_once_with(f"https://msa.example.com/api/login/{digest}", timeout=7)
    assert http_session.verify is False


def test_authenticate_finds_nested_session_key(http_session, make_response):
    http_session.get.return_value = make_response(200, LOGIN_NESTED)
    session = authenticate("msa", "manage", "pw", 5, http_session=http_session)
    assert session.session_key == "KEY2"


def test_authenticate_missing_key(http_session, make_response):
    http_session.get.return_value = make_response(200, LOGIN_NO_KEY)
    with pytest.raises(AuthError, match="session key not found"):
        authenticate("msa", "manage", "pw", 5, http_session=http_session)
    http_session.close.assert_called_once()


def test_authenticate_bad_status(http_session, make_response):
    http_session.get.return_value = make_response(401, b"")
    with pytest.raises(AuthError, match="HTTP 401"):
        authenticate("msa", "manage", "pw", 5, http_session=http_session)


def test_authenticate_unparsable_body(http_session, make_response):
    http_session.get.return_value = make_response(200, b"<html>oops")
    with pytest.raises(AuthError, match="unparsable"):
        authenticate("msa", "manage", "pw", 5, http_session=http_session)


def test_authenticate_transport_error(http_session):
    http_session.get.side_effect = requests.exceptions.ConnectTimeout("timed out")
    with pytest.raises(AuthError) as excinfo:
        authenticate("msa", "manage", "pw", 5, http_session=http_session)
    assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectTimeout)
    assert excinfo.value.host == "msa"


def test_fetch_sends_session_key(msa_session, http_session, make_response):
    http_session.get.return_value = make_response(200, b"<RESPONSE/>")

    body = msa_session.fetch("disks")

    assert body == b"<RESPONSE/>"
    http_session.get.assert_called_once_with(
        "https://msa.example.com/api/show/disks",
        headers={"sessionKey": "KEY1"},
        cookies={"wbisessionkey": "KEY1", "wbiusername": "monitor"},
        timeout=5.0,
    )


def test_fetch_bad_status(msa_session, http_session, make_response):
    http_session.get.return_value = make_response(503, b"busy")
    with pytest.raises(FetchError) as excinfo:
        msa_session.fetch("pools")
    assert excinfo.value.status_code == 503
    assert excinfo.value.path == "pools"


def test_fetch_transport_error(msa_session, http_session):
    http_session.get.side_effect = requests.exceptions.ReadTimeout("slow")
    with pytest.raises(FetchError) as excinfo:
        msa_session.fetch("volumes")
    assert excinfo.value.status_code is None


def test_session_context_manager_closes(msa_session, http_session):
    with msa_session as session:
        assert session is msa_session
    http_session.close.assert_called_once()
