"""
Provisioner

Creates the MariaDB ResourceSet in one strictly ordered pass:

    namespace -> persistent volume -> persistent volume claim
              -> service -> secret -> deployment

Namespaced objects need their namespace first; the deployment goes last
because it consumes the claim, the service and the secret.

There is no rollback. When a step fails, the error lists what was already
created so the operator can run `kwpm remove` to clean up.
"""

from contextlib import AsyncExitStack
from typing import List, Optional
import logging
import posixpath

from ..errors import (
    AlreadyExistsError,
    PartialProvisioningError,
    RemoteAPIError,
    ResourceRef,
    TemplateError,
)
from ..k8s_client import KubernetesClient
from ..utils.resource_naming import MARIADB_NAMESPACE, MARIADB_SUFFIX, get_storage_path
from .affinity import HOSTNAME_LABEL, pin_to_host
from .lease import ProvisioningLease
from .namespace_registry import NamespaceRegistry
from .resource_catalog import ResourceCatalog

logger = logging.getLogger(__name__)


class Provisioner:
    """Creates the MariaDB instance if it does not exist yet."""

    def __init__(
        self,
        k8s: KubernetesClient,
        registry: Optional[NamespaceRegistry] = None,
        catalog: Optional[ResourceCatalog] = None,
        lease: Optional[ProvisioningLease] = None,
        topology_key: str = HOSTNAME_LABEL
    ):
        """
        Args:
            k8s: Kubernetes client used for every remote call
            registry: Namespace registry (default: built on k8s)
            catalog: Template catalog (default: packaged templates)
            lease: Lease held around check-then-create; None disables locking
            topology_key: Node label the volume is pinned by
        """
        self.k8s = k8s
        self.registry = registry or NamespaceRegistry(k8s)
        self.catalog = catalog or ResourceCatalog(api_client=k8s.api_client)
        self.lease = lease
        self.topology_key = topology_key

    async def create_if_not_exists(
        self,
        storage_path: str,
        node_hostname: str,
        secret_value: str
    ) -> List[ResourceRef]:
        """
        Create the full MariaDB ResourceSet.

        Args:
            storage_path: Base directory on the node; data lives in {storage_path}/mariadb
            node_hostname: kubernetes.io/hostname of the node holding storage_path
            secret_value: MariaDB root password stored in the mysql-pass secret

        Returns:
            Created resources, in creation order

        Raises:
            ValueError: If an argument is empty, the storage path is not
                absolute or the hostname is malformed
            AlreadyExistsError: If a "-mariadb" managed namespace already exists
            LeaseHeldError: If another provisioning run holds the lease
            PartialProvisioningError: If a creation step failed
            RemoteAPIError: If the existence check failed
            TemplateError: If a manifest template cannot be loaded
        """
        if not storage_path or not storage_path.strip():
            raise ValueError("Storage path must not be empty")
        # Node-local volumes need an absolute path on the node
        if storage_path != storage_path.strip() or not posixpath.isabs(storage_path):
            raise ValueError(f"Storage path must be an absolute path: {storage_path!r}")
        if not secret_value:
            raise ValueError("Secret value must not be empty")
        # Validate before touching the cluster
        node_affinity = pin_to_host(node_hostname, self.topology_key)

        async with AsyncExitStack() as stack:
            if self.lease is not None:
                await stack.enter_async_context(self.lease)

            if await self.registry.exists(MARIADB_SUFFIX):
                logger.info(f"[K8S] MariaDB instance already exists, nothing to do")
                raise AlreadyExistsError("MariaDB deployment already exists")

            namespace = self.catalog.namespace()
            pv = self.catalog.persistent_volume()
            pvc = self.catalog.persistent_volume_claim()
            svc = self.catalog.service()
            secret = self.catalog.secret(secret_value)
            deployment = self.catalog.deployment()

            if pv.spec is None or pv.spec.local is None:
                raise TemplateError("PersistentVolume template must define spec.local")
            pv.spec.local.path = get_storage_path(storage_path)
            pv.spec.node_affinity = node_affinity

            logger.info(f"[K8S] Creating MariaDB instance in namespace {MARIADB_NAMESPACE}")
            logger.info(f"[K8S] Volume path: {pv.spec.local.path} on node {node_hostname}")

            ns = MARIADB_NAMESPACE
            steps = [
                (ResourceRef("Namespace", namespace.metadata.name),
                 lambda: self.k8s.create_namespace(namespace)),
                (ResourceRef("PersistentVolume", pv.metadata.name),
                 lambda: self.k8s.create_persistent_volume(pv)),
                (ResourceRef("PersistentVolumeClaim", pvc.metadata.name, ns),
                 lambda: self.k8s.create_persistent_volume_claim(ns, pvc)),
                (ResourceRef("Service", svc.metadata.name, ns),
                 lambda: self.k8s.create_service(ns, svc)),
                (ResourceRef("Secret", secret.metadata.name, ns),
                 lambda: self.k8s.create_secret(ns, secret)),
                (ResourceRef("Deployment", deployment.metadata.name, ns),
                 lambda: self.k8s.create_deployment(ns, deployment)),
            ]

            created: List[ResourceRef] = []
            for ref, create in steps:
                logger.info(f"[K8S] Creating {ref}")
                try:
                    await create()
                except RemoteAPIError as e:
                    logger.error(f"[K8S] ❌ Provisioning stopped at {ref}; left in place: {created}")
                    raise PartialProvisioningError(e, created, ref) from e
                created.append(ref)
                logger.info(f"[K8S] ✅ Created {ref}")

        logger.info(f"[K8S] ✅ MariaDB instance created")
        return created
