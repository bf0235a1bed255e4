"""Tests for TLS transport construction."""

from __future__ import annotations

import ssl
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from etcd_registry.core.exceptions import ConfigurationError
from etcd_registry.infra.discovery import transport as transport_module
from etcd_registry.infra.discovery.transport import (
    DIAL_TIMEOUT,
    TLS_HANDSHAKE_TIMEOUT,
    Transport,
    TransportConfig,
    build_transport,
    connect_timeout,
)

TLS_DIR = Path(__file__).resolve().parents[3] / "fixtures" / "tls"
CA_FILE = TLS_DIR / "ca.pem"
CERT_FILE = TLS_DIR / "client.pem"
KEY_FILE = TLS_DIR / "client-key.pem"


@pytest.mark.unit
class TestTransportConfig:
    def test_plain_http_without_tls_material(self):
        config = TransportConfig()
        assert config.uses_tls is False
        assert config.scheme == "http"

    def test_https_with_ca_file(self):
        assert TransportConfig(ca_file=CA_FILE).scheme == "https"

    def test_https_with_cert_file_only(self):
        assert TransportConfig(cert_file=CERT_FILE).scheme == "https"

    def test_connect_timeout_adds_handshake_for_tls(self):
        assert connect_timeout(False) == DIAL_TIMEOUT
        assert connect_timeout(True) == DIAL_TIMEOUT + TLS_HANDSHAKE_TIMEOUT


@pytest.mark.unit
class TestBuildTransport:
    def test_defaults(self):
        transport = build_transport()

        assert isinstance(transport.ssl_context, ssl.SSLContext)
        assert transport.timeout.connect == DIAL_TIMEOUT
        assert transport.timeout.read is None

    def test_ca_bundle_becomes_trust_root(self):
        transport = build_transport(TransportConfig(ca_file=CA_FILE))

        ca_certs = transport.ssl_context.get_ca_certs()
        assert len(ca_certs) == 1
        assert transport.timeout.connect == DIAL_TIMEOUT + TLS_HANDSHAKE_TIMEOUT

    def test_missing_ca_bundle_raises(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            build_transport(TransportConfig(ca_file=tmp_path / "missing.pem"))

        assert exc_info.value.type == "tls-ca-bundle"
        assert "missing.pem" in exc_info.value.extra["path"]

    def test_unparseable_ca_bundle_keeps_default_trust(self, tmp_path):
        junk = tmp_path / "junk.pem"
        junk.write_text(
            "not a certificate\n"
            "-----BEGIN CERTIFICATE-----\nnot-base64!!\n-----END CERTIFICATE-----\n"
        )
        default_context = MagicMock(spec=ssl.SSLContext)

        with patch.object(
            transport_module.ssl, "create_default_context", return_value=default_context
        ):
            transport = build_transport(TransportConfig(ca_file=junk))

        assert transport.ssl_context is default_context

    def test_client_key_pair_loaded(self):
        transport = build_transport(
            TransportConfig(ca_file=CA_FILE, cert_file=CERT_FILE, key_file=KEY_FILE)
        )
        assert isinstance(transport.ssl_context, ssl.SSLContext)

    def test_cert_without_key_skips_mutual_tls(self):
        default_context = MagicMock(spec=ssl.SSLContext)

        with patch.object(
            transport_module.ssl, "create_default_context", return_value=default_context
        ):
            build_transport(TransportConfig(cert_file=CERT_FILE))

        default_context.load_cert_chain.assert_not_called()

    def test_unloadable_key_pair_raises(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            build_transport(
                TransportConfig(cert_file=CERT_FILE, key_file=tmp_path / "missing-key.pem")
            )

        assert exc_info.value.type == "tls-client-cert"

    def test_encrypted_key_fails_without_prompting(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_transport(
                TransportConfig(
                    cert_file=CERT_FILE, key_file=TLS_DIR / "client-key-encrypted.pem"
                )
            )

        assert exc_info.value.type == "tls-client-cert"


@pytest.mark.unit
class TestTransport:
    @pytest.mark.asyncio
    async def test_create_client_uses_supplied_http_transport(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        transport = Transport(http_transport=httpx.MockTransport(handler))

        async with transport.create_client() as client:
            response = await client.get("http://127.0.0.1:2379/version")

        assert response.text == "ok"
        assert len(seen) == 1

    def test_with_response_timeout_keeps_connect_budget(self):
        transport = build_transport()
        timeout = transport.with_response_timeout(3.0)

        assert timeout.read == 3.0
        assert timeout.connect == DIAL_TIMEOUT
