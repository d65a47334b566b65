"""
Namespace Registry

Discovers kwpm-managed instances from namespace names. The result is a
point-in-time snapshot of cluster state; nothing is cached.
"""

from kubernetes import client
from typing import List
import logging

from ..k8s_client import KubernetesClient
from ..utils.resource_naming import is_managed, matches_suffix

logger = logging.getLogger(__name__)


class NamespaceRegistry:
    """Read-only view over the cluster's namespaces."""

    def __init__(self, k8s: KubernetesClient):
        self.k8s = k8s

    async def list_all(self) -> List[client.V1Namespace]:
        """
        List every namespace visible to the current credentials.

        Raises:
            RemoteAPIError: If the list call fails
        """
        return await self.k8s.list_namespaces()

    async def list_managed(self) -> List[client.V1Namespace]:
        """List namespaces following the kwpm naming convention."""
        return [ns for ns in await self.list_all() if is_managed(ns.metadata.name)]

    async def exists(self, suffix: str) -> bool:
        """
        Check whether a managed namespace for the given workload kind exists.

        Args:
            suffix: Namespace name suffix, e.g. "-mariadb"
        """
        managed = await self.list_managed()
        found = any(matches_suffix(ns.metadata.name, suffix) for ns in managed)
        logger.debug(f"[K8S] {len(managed)} managed namespaces, '*{suffix}' present: {found}")
        return found
