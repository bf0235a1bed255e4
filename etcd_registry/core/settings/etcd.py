"""etcd registry adapter configuration settings.

Environment variables use ETCD_ prefix.
Example: ETCD_URL=etcd://10.0.0.1:2379/services, ETCD_CA_FILE=/etc/ssl/ca.pem

TLS is attempted when a CA bundle or client certificate is configured;
otherwise the adapter speaks plain HTTP.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_etcd_yaml_source

if TYPE_CHECKING:
    from etcd_registry.infra.discovery.transport import TransportConfig

DEFAULT_ENDPOINT_HOST = "127.0.0.1:2379"


class SyncPolicy(str, Enum):
    """What to do with cluster membership before each store operation."""

    WARN_AND_CONTINUE = "warn_and_continue"  # Sync, log failures, carry on
    SKIP = "skip"  # Never sync


class EtcdSettings(BaseSettings):
    """etcd registry adapter settings.

    Environment variables use ETCD_ prefix.
    Example: ETCD_CERT_FILE=/etc/ssl/client.pem
    """

    # ──────────────────────────────────────────────────────────────
    # Endpoint
    # ──────────────────────────────────────────────────────────────

    url: str = Field(
        default=f"etcd://{DEFAULT_ENDPOINT_HOST}",
        description="Adapter URI: etcd://host:port/key-prefix",
    )

    header_timeout: float = Field(
        default=3.0,
        gt=0,
        le=60.0,
        description="Per-request response header timeout for the 2.x keys client (seconds)",
    )

    sync_policy: SyncPolicy = Field(
        default=SyncPolicy.WARN_AND_CONTINUE,
        description="Cluster membership sync before store operations",
    )

    # ──────────────────────────────────────────────────────────────
    # TLS material
    # ──────────────────────────────────────────────────────────────

    cert_file: Path | None = Field(
        default=None,
        description="Identify HTTPS client using this SSL certificate file",
    )

    key_file: Path | None = Field(
        default=None,
        description="Identify HTTPS client using this SSL key file",
    )

    ca_file: Path | None = Field(
        default=None,
        description="Verify certificates of HTTPS-enabled servers using this CA bundle",
    )

    @field_validator("cert_file", "key_file", "ca_file", mode="before")
    @classmethod
    def _empty_path_is_unset(cls, value: object) -> object:
        """Treat empty strings as unset, like an empty command-line flag."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    # ──────────────────────────────────────────────────────────────
    # Computed properties
    # ──────────────────────────────────────────────────────────────

    @computed_field
    @property
    def uses_tls(self) -> bool:
        """Whether HTTPS should be used to reach etcd."""
        return self.ca_file is not None or self.cert_file is not None

    @computed_field
    @property
    def scheme(self) -> str:
        """HTTP scheme for the etcd endpoint."""
        return "https" if self.uses_tls else "http"

    def to_transport_config(self) -> TransportConfig:
        """Build the transport configuration for these settings.

        Returns:
            TransportConfig carrying the TLS file paths.
        """
        from etcd_registry.infra.discovery.transport import TransportConfig

        return TransportConfig(
            cert_file=self.cert_file,
            key_file=self.key_file,
            ca_file=self.ca_file,
        )

    model_config = SettingsConfigDict(
        env_prefix="ETCD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_etcd_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
