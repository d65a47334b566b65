"""
Decommissioner

Removes the MariaDB instance by its fixed names. Deleting the namespace
cascades to the claim, service, secret and deployment; the PersistentVolume
is cluster-scoped and must be deleted on its own.

No existence check is made here; deleting something that is not there is
reported as a not-found RemoteAPIError.
"""

from typing import List
import logging

from ..errors import ResourceRef
from ..k8s_client import KubernetesClient
from ..utils.resource_naming import MARIADB_NAMESPACE, MARIADB_PV_NAME

logger = logging.getLogger(__name__)


class Decommissioner:
    """Deletes the MariaDB namespace and its PersistentVolume."""

    def __init__(self, k8s: KubernetesClient):
        self.k8s = k8s

    async def remove(self) -> List[ResourceRef]:
        """
        Delete the MariaDB instance.

        Returns:
            Resources whose deletion was accepted, in order

        Raises:
            RemoteAPIError: On the first failed delete (404 if missing)
        """
        removed: List[ResourceRef] = []

        logger.info(f"[K8S] Deleting namespace {MARIADB_NAMESPACE}")
        await self.k8s.delete_namespace(MARIADB_NAMESPACE)
        removed.append(ResourceRef("Namespace", MARIADB_NAMESPACE))
        logger.info(f"[K8S] ✅ Deleted namespace {MARIADB_NAMESPACE}")

        logger.info(f"[K8S] Deleting persistent volume {MARIADB_PV_NAME}")
        await self.k8s.delete_persistent_volume(MARIADB_PV_NAME)
        removed.append(ResourceRef("PersistentVolume", MARIADB_PV_NAME))
        logger.info(f"[K8S] ✅ Deleted persistent volume {MARIADB_PV_NAME}")

        return removed
