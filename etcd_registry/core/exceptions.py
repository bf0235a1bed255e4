"""Exception types for the etcd registry adapter."""

from __future__ import annotations

from typing import Any


class RegistryException(Exception):
    """Base registry exception.

    All custom exceptions should inherit from this class.

    Attributes:
        detail: Human-readable error message.
        type: Error type identifier.
        extra: Additional context-specific information about the error.

    Example:
            raise RegistryException(
            detail="etcd: no valid etcd client could be created",
            type="client-construction",
            extra={"endpoints": ["http://127.0.0.1:2379"]}
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "about:blank",
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize registry exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.type = type
        self.extra = extra or {}
        super().__init__(detail)


class ConfigurationError(RegistryException):
    """Raised when the adapter cannot be constructed.

    Covers unreadable TLS material, an unreachable store while probing its
    version, and unknown adapter URI schemes. There is no recovery path.

    Example:
            raise ConfigurationError(
            detail="etcd: unable to read CA bundle",
            type="tls-ca-bundle",
            extra={"path": "/etc/ssl/etcd-ca.pem"}
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "configuration",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail=detail, type=type, extra=extra)


class OperationError(RegistryException):
    """Raised by a store client when a single operation fails.

    The adapter logs these and re-raises them unchanged; retry policy
    belongs to the caller.
    """

    def __init__(
        self,
        detail: str,
        type: str = "operation",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail=detail, type=type, extra=extra)


class EtcdError(OperationError):
    """Error payload returned by an etcd member.

    etcd answers failed requests with a JSON body of the form
    ``{"errorCode": 100, "message": "Key not found", "cause": "/web/1", "index": 7}``.

    Example:
            raise EtcdError(
            error_code=100,
            message="Key not found",
            cause="/services/web/1",
            index=7,
        )
    """

    def __init__(
        self,
        error_code: int,
        message: str,
        cause: str = "",
        index: int = 0,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize etcd error.

        Args:
            error_code: etcd error code (100 key not found, 501 unreachable, ...).
            message: Message reported by etcd.
            cause: Key or detail the error refers to.
            index: etcd index at which the error occurred.
            extra: Additional context about the error.
        """
        self.error_code = error_code
        self.message = message
        self.cause = cause
        self.index = index
        detail = f"{error_code}: {message}"
        if cause:
            detail += f" ({cause})"
        detail += f" [{index}]"
        super().__init__(
            detail=detail,
            type="etcd-error",
            extra={"error_code": error_code, "cause": cause, "index": index, **(extra or {})},
        )

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> EtcdError:
        """Build an error from a decoded etcd error body.

        Args:
            payload: JSON object returned by etcd.

        Returns:
            EtcdError populated from the payload.
        """
        return cls(
            error_code=int(payload.get("errorCode", 0)),
            message=str(payload.get("message", "")),
            cause=str(payload.get("cause", "")),
            index=int(payload.get("index", 0)),
        )

    def __repr__(self) -> str:
        return (
            f"EtcdError(error_code={self.error_code!r}, message={self.message!r}, "
            f"cause={self.cause!r}, index={self.index!r})"
        )


class ClusterUnavailableError(OperationError):
    """Raised when no etcd member could be reached.

    Example:
            raise ClusterUnavailableError(
            endpoints=["http://10.0.0.1:2379", "http://10.0.0.2:2379"],
            errors=["connection refused", "timed out"],
        )
    """

    def __init__(
        self,
        endpoints: list[str],
        errors: list[str] | None = None,
        detail: str = "etcd cluster is unavailable or misconfigured",
    ) -> None:
        self.endpoints = list(endpoints)
        self.errors = list(errors or [])
        message = detail
        if self.errors:
            message += "; " + "; ".join(
                f"error #{i}: {err}" for i, err in enumerate(self.errors)
            )
        super().__init__(
            detail=message,
            type="cluster-unavailable",
            extra={"endpoints": self.endpoints},
        )
