"""
Error taxonomy for the MariaDB provisioner.

Every failure is surfaced to the caller; nothing here is retried.

- AlreadyExistsError: an instance is already present (create precondition)
- RemoteAPIError: any failure talking to the Kubernetes API
- PartialProvisioningError: a create sequence stopped partway through
- TemplateError: a static manifest template is missing or malformed
- LeaseHeldError: another caller holds the provisioning lease
"""

from dataclasses import dataclass
from typing import List, Optional

from kubernetes.client.rest import ApiException


@dataclass(frozen=True)
class ResourceRef:
    """Names one Kubernetes object touched by a create or delete sequence."""

    kind: str
    name: str
    namespace: Optional[str] = None

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"


class KwpmError(Exception):
    """Base class for all provisioner errors."""


class AlreadyExistsError(KwpmError):
    """Raised when a MariaDB instance already exists in the cluster."""


class TemplateError(KwpmError):
    """Raised when a manifest template cannot be read or parsed."""


class LeaseHeldError(KwpmError):
    """Raised when the provisioning lease is held by another caller."""

    def __init__(self, lease_name: str, holder: Optional[str] = None):
        self.lease_name = lease_name
        self.holder = holder
        held_by = f" by {holder}" if holder else ""
        super().__init__(f"Provisioning lease {lease_name} is held{held_by}")


class RemoteAPIError(KwpmError):
    """
    Any failure returned by (or while reaching) the Kubernetes API.

    Attributes:
        status: HTTP status code, or None for transport-level failures
        reason: Short reason phrase from the API server
        body: Raw response body, if any
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        body: Optional[str] = None
    ):
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.body = body

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_conflict(self) -> bool:
        return self.status == 409

    @classmethod
    def from_exception(cls, exc: Exception, action: str) -> "RemoteAPIError":
        """
        Wrap an exception raised by the kubernetes client.

        Args:
            exc: ApiException, or a transport error (urllib3/OSError)
            action: Human readable description, e.g. "create namespace kwpm-mariadb"
        """
        if isinstance(exc, ApiException):
            return cls(
                f"Failed to {action}: {exc.status} {exc.reason}",
                status=exc.status,
                reason=exc.reason,
                body=exc.body
            )
        return cls(f"Failed to {action}: {exc}")


class PartialProvisioningError(RemoteAPIError):
    """
    A create sequence failed after some resources were already created.

    The created resources are left in place; run `remove()` to clean up.

    Attributes:
        created: Resources created before the failure, in creation order
        failed: The resource whose creation failed
    """

    def __init__(
        self,
        cause: RemoteAPIError,
        created: List[ResourceRef],
        failed: ResourceRef
    ):
        super().__init__(
            f"{cause} (already created: {', '.join(str(r) for r in created) or 'nothing'})",
            status=cause.status,
            reason=cause.reason,
            body=cause.body
        )
        self.created = list(created)
        self.failed = failed
