"""HTTP(S) transport construction for etcd clients.

A Transport carries the TLS context, timeouts and connection limits shared
by every httpx client the adapter opens: the version probe and the bound
store client. Building it performs no network I/O.
"""

from __future__ import annotations

import logging
import re
import ssl
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from etcd_registry.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DIAL_TIMEOUT = 30.0
KEEPALIVE = 30.0
TLS_HANDSHAKE_TIMEOUT = 10.0

_PEM_CERTIFICATE = re.compile(
    r"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----",
    re.DOTALL,
)


@dataclass(frozen=True)
class TransportConfig:
    """TLS file paths; all optional."""

    cert_file: Path | None = None
    key_file: Path | None = None
    ca_file: Path | None = None

    @property
    def uses_tls(self) -> bool:
        """Whether HTTPS should be used to reach etcd."""
        return self.ca_file is not None or self.cert_file is not None

    @property
    def scheme(self) -> str:
        return "https" if self.uses_tls else "http"


def connect_timeout(uses_tls: bool) -> float:
    """Budget for the connect phase.

    httpx bounds TCP dial and TLS handshake with a single connect timeout.
    """
    return DIAL_TIMEOUT + TLS_HANDSHAKE_TIMEOUT if uses_tls else DIAL_TIMEOUT


def _default_timeout() -> httpx.Timeout:
    # No overall read deadline; only connection setup is bounded
    return httpx.Timeout(None, connect=DIAL_TIMEOUT)


def _default_limits() -> httpx.Limits:
    return httpx.Limits(keepalive_expiry=KEEPALIVE)


@dataclass(frozen=True)
class Transport:
    """Immutable HTTP transport description.

    Attributes:
        ssl_context: TLS context used to verify servers and present a client cert.
        timeout: Default request timeout.
        limits: Connection pool limits.
        http_transport: Pre-built httpx transport. When set it replaces the
            network stack entirely (e.g. ``httpx.MockTransport`` in tests).
    """

    ssl_context: ssl.SSLContext = field(default_factory=ssl.create_default_context)
    timeout: httpx.Timeout = field(default_factory=_default_timeout)
    limits: httpx.Limits = field(default_factory=_default_limits)
    http_transport: httpx.AsyncBaseTransport | None = None

    def create_client(
        self,
        base_url: str = "",
        timeout: httpx.Timeout | None = None,
    ) -> httpx.AsyncClient:
        """Open a new async HTTP client bound to this transport.

        Args:
            base_url: Optional base URL for relative requests.
            timeout: Overrides the transport's default timeout.

        Returns:
            A new httpx.AsyncClient; the caller owns and closes it.
        """
        if self.http_transport is not None:
            return httpx.AsyncClient(
                base_url=base_url,
                timeout=timeout or self.timeout,
                transport=self.http_transport,
            )
        return httpx.AsyncClient(
            base_url=base_url,
            verify=self.ssl_context,
            timeout=timeout or self.timeout,
            limits=self.limits,
            trust_env=True,
        )

    def with_response_timeout(self, seconds: float) -> httpx.Timeout:
        """Timeout that bounds each response while keeping the connect budget."""
        return httpx.Timeout(seconds, connect=self.timeout.connect)


def _read_ca_bundle(path: Path) -> str:
    try:
        return path.read_bytes().decode("ascii", errors="ignore")
    except OSError as e:
        raise ConfigurationError(
            detail=f"etcd: unable to read CA bundle: {e}",
            type="tls-ca-bundle",
            extra={"path": str(path)},
        ) from e


def _no_key_password() -> bytes:
    # Encrypted client keys are unsupported; an empty password makes them
    # fail to load instead of prompting on the terminal
    return b""


def _load_ca_pool(pem: str) -> tuple[ssl.SSLContext, int]:
    """Load every parseable PEM certificate into a fresh client context."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    loaded = 0
    for block in _PEM_CERTIFICATE.findall(pem):
        try:
            context.load_verify_locations(cadata=block)
        except (ssl.SSLError, ValueError):
            continue
        loaded += 1
    return context, loaded


def build_transport(config: TransportConfig | None = None) -> Transport:
    """Build the transport for the configured TLS material.

    - CA bundle set: its certificates become the only trust roots. An
      unreadable file raises ConfigurationError; a bundle with no usable
      certificate leaves the default trust store in place.
    - Client certificate and key both set: presented for mutual TLS. A
      pair that fails to load raises ConfigurationError. If only one of
      the two is set, mutual TLS is skipped.

    Args:
        config: TLS file paths. None means plain defaults.

    Returns:
        Transport with the resulting TLS context.

    Raises:
        ConfigurationError: If TLS material cannot be loaded.
    """
    config = config or TransportConfig()
    ssl_context = ssl.create_default_context()

    if config.ca_file is not None:
        pem = _read_ca_bundle(config.ca_file)
        pool, loaded = _load_ca_pool(pem)
        if loaded:
            ssl_context = pool
            logger.debug(
                "Loaded etcd CA bundle",
                extra={"path": str(config.ca_file), "certificates": loaded},
            )
        else:
            logger.debug(
                "CA bundle contained no usable certificates, using default trust store",
                extra={"path": str(config.ca_file)},
            )

    if config.cert_file is not None and config.key_file is not None:
        try:
            ssl_context.load_cert_chain(
                certfile=str(config.cert_file),
                keyfile=str(config.key_file),
                password=_no_key_password,
            )
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(
                detail=f"etcd: unable to load client key pair: {e}",
                type="tls-client-cert",
                extra={"cert_file": str(config.cert_file), "key_file": str(config.key_file)},
            ) from e

    return Transport(
        ssl_context=ssl_context,
        timeout=httpx.Timeout(None, connect=connect_timeout(config.uses_tls)),
    )
