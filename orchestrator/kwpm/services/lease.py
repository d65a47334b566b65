"""
Provisioning Lease

Best-effort mutual exclusion around the existence-check-then-create window,
using a coordination.k8s.io/v1 Lease object as the lock. Creating the Lease
succeeds for exactly one caller; everyone else gets a 409 conflict until it
is deleted or expires.

Usage:
    async with ProvisioningLease(k8s, namespace="default"):
        ...  # check + create
"""

from kubernetes import client
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import os
import socket

from ..errors import LeaseHeldError, RemoteAPIError
from ..k8s_client import KubernetesClient
from ..utils.resource_naming import PROVISIONING_LEASE_NAME

logger = logging.getLogger(__name__)


def default_holder_identity() -> str:
    return f"{socket.gethostname()}-{os.getpid()}"


class ProvisioningLease:
    """A Lease held for the duration of one provisioning run."""

    def __init__(
        self,
        k8s: KubernetesClient,
        namespace: str = "default",
        name: str = PROVISIONING_LEASE_NAME,
        duration_seconds: int = 300,
        holder_identity: Optional[str] = None
    ):
        self.k8s = k8s
        self.namespace = namespace
        self.name = name
        self.duration_seconds = duration_seconds
        self.holder_identity = holder_identity or default_holder_identity()
        self.held = False

    def _manifest(self, resource_version: Optional[str] = None) -> client.V1Lease:
        now = datetime.now(timezone.utc)
        return client.V1Lease(
            metadata=client.V1ObjectMeta(
                name=self.name,
                namespace=self.namespace,
                resource_version=resource_version,
                labels={"app.kubernetes.io/managed-by": "kwpm"}
            ),
            spec=client.V1LeaseSpec(
                holder_identity=self.holder_identity,
                lease_duration_seconds=self.duration_seconds,
                acquire_time=now,
                renew_time=now
            )
        )

    @staticmethod
    def is_expired(lease: client.V1Lease, now: Optional[datetime] = None) -> bool:
        """A lease is expired once renew (or acquire) time + duration has passed."""
        spec = lease.spec
        if spec is None:
            return True
        last_seen = spec.renew_time or spec.acquire_time
        if last_seen is None or spec.lease_duration_seconds is None:
            return True
        if last_seen.tzinfo is None:
            last_seen = last_seen.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        return last_seen + timedelta(seconds=spec.lease_duration_seconds) < now

    async def acquire(self) -> None:
        """
        Take the lease.

        If the current holder releases between our conflicting create and the
        read, the create is attempted once more.

        Raises:
            LeaseHeldError: If another holder has a live lease
            RemoteAPIError: For any other API failure
        """
        for _ in range(2):
            try:
                await self.k8s.create_lease(self.namespace, self._manifest())
                self.held = True
                logger.info(f"[K8S] ✅ Acquired lease {self.namespace}/{self.name} as {self.holder_identity}")
                return
            except RemoteAPIError as e:
                if not e.is_conflict:
                    raise

            try:
                existing = await self.k8s.read_lease(self.namespace, self.name)
                break
            except RemoteAPIError as e:
                if not e.is_not_found:
                    raise
                logger.info(f"[K8S] Lease {self.namespace}/{self.name} released while reading, retrying")
        else:
            raise LeaseHeldError(self.name)

        holder = existing.spec.holder_identity if existing.spec else None

        if not self.is_expired(existing):
            raise LeaseHeldError(self.name, holder)

        logger.warning(f"[K8S] Taking over expired lease {self.namespace}/{self.name} from {holder}")
        try:
            await self.k8s.replace_lease(
                self.namespace,
                self._manifest(resource_version=existing.metadata.resource_version)
            )
        except RemoteAPIError as e:
            # Someone else replaced it first
            if e.is_conflict:
                raise LeaseHeldError(self.name) from e
            raise
        self.held = True
        logger.info(f"[K8S] ✅ Acquired lease {self.namespace}/{self.name} as {self.holder_identity}")

    async def release(self) -> None:
        """Delete the lease. A lease that is already gone is not an error."""
        if not self.held:
            return
        try:
            await self.k8s.delete_lease(self.namespace, self.name)
            logger.info(f"[K8S] Released lease {self.namespace}/{self.name}")
        except RemoteAPIError as e:
            if not e.is_not_found:
                raise
        finally:
            self.held = False

    async def __aenter__(self) -> "ProvisioningLease":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        # The lease expires on its own; a failed release must not mask the
        # outcome of the guarded block
        try:
            await self.release()
        except RemoteAPIError as release_error:
            logger.error(f"[K8S] Error releasing lease {self.namespace}/{self.name}: {release_error}", exc_info=True)
