"""
Kubernetes client bootstrap for the MariaDB provisioner.

Thin wrapper over the official kubernetes client. It loads cluster
configuration, exposes one coroutine per remote call the provisioner needs,
and converts every client failure into RemoteAPIError. The synchronous
client calls are run in a worker thread with asyncio.to_thread.
"""

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError
import logging
import asyncio
from typing import Any, Callable, List, Optional

from .errors import RemoteAPIError

logger = logging.getLogger(__name__)


class KubernetesClient:
    """
    Per-kind create/delete/list operations against the Kubernetes API.

    Namespaces and PersistentVolumes are cluster-scoped; every other kind is
    addressed inside a namespace.
    """

    def __init__(self, api_client: Optional[client.ApiClient] = None):
        """
        Initialize Kubernetes client with in-cluster or kubeconfig.

        Args:
            api_client: Preconfigured ApiClient; configuration is loaded
                from the environment when omitted
        """
        if api_client is None:
            try:
                # Try in-cluster config first (for production)
                config.load_incluster_config()
                logger.info("Loaded in-cluster Kubernetes configuration")
            except config.ConfigException:
                try:
                    # Fall back to kubeconfig (for development)
                    config.load_kube_config()
                    logger.info("Loaded kubeconfig for development")
                except config.ConfigException as e:
                    logger.error(f"Failed to load Kubernetes config: {e}")
                    raise RuntimeError("Cannot load Kubernetes configuration") from e
            api_client = client.ApiClient()

        self.api_client = api_client
        self.core_v1 = client.CoreV1Api(api_client)
        self.apps_v1 = client.AppsV1Api(api_client)
        self.coordination_v1 = client.CoordinationV1Api(api_client)

    async def _call(self, action: str, func: Callable[..., Any], **kwargs) -> Any:
        """Run one blocking API call off the event loop, wrapping failures."""
        try:
            return await asyncio.to_thread(func, **kwargs)
        except (ApiException, HTTPError, OSError) as e:
            error = RemoteAPIError.from_exception(e, action)
            if error.is_not_found:
                logger.warning(f"[K8S] {error}")
            else:
                logger.error(f"[K8S] ❌ {error}")
            raise error from e

    # =========================================================================
    # CLUSTER-SCOPED RESOURCES
    # =========================================================================

    async def list_namespaces(self) -> List[client.V1Namespace]:
        result = await self._call("list namespaces", self.core_v1.list_namespace)
        return list(result.items or [])

    async def create_namespace(self, body: client.V1Namespace) -> client.V1Namespace:
        return await self._call(
            f"create namespace {body.metadata.name}",
            self.core_v1.create_namespace,
            body=body
        )

    async def delete_namespace(self, name: str) -> Any:
        return await self._call(
            f"delete namespace {name}",
            self.core_v1.delete_namespace,
            name=name
        )

    async def create_persistent_volume(
        self,
        body: client.V1PersistentVolume
    ) -> client.V1PersistentVolume:
        return await self._call(
            f"create persistent volume {body.metadata.name}",
            self.core_v1.create_persistent_volume,
            body=body
        )

    async def delete_persistent_volume(self, name: str) -> Any:
        return await self._call(
            f"delete persistent volume {name}",
            self.core_v1.delete_persistent_volume,
            name=name
        )

    # =========================================================================
    # NAMESPACED RESOURCES
    # =========================================================================

    async def create_persistent_volume_claim(
        self,
        namespace: str,
        body: client.V1PersistentVolumeClaim
    ) -> client.V1PersistentVolumeClaim:
        return await self._call(
            f"create persistent volume claim {namespace}/{body.metadata.name}",
            self.core_v1.create_namespaced_persistent_volume_claim,
            namespace=namespace,
            body=body
        )

    async def create_service(self, namespace: str, body: client.V1Service) -> client.V1Service:
        return await self._call(
            f"create service {namespace}/{body.metadata.name}",
            self.core_v1.create_namespaced_service,
            namespace=namespace,
            body=body
        )

    async def create_secret(self, namespace: str, body: client.V1Secret) -> client.V1Secret:
        return await self._call(
            f"create secret {namespace}/{body.metadata.name}",
            self.core_v1.create_namespaced_secret,
            namespace=namespace,
            body=body
        )

    async def create_deployment(self, namespace: str, body: client.V1Deployment) -> client.V1Deployment:
        return await self._call(
            f"create deployment {namespace}/{body.metadata.name}",
            self.apps_v1.create_namespaced_deployment,
            namespace=namespace,
            body=body
        )

    # =========================================================================
    # LEASES
    # =========================================================================

    async def read_lease(self, namespace: str, name: str) -> client.V1Lease:
        return await self._call(
            f"read lease {namespace}/{name}",
            self.coordination_v1.read_namespaced_lease,
            name=name,
            namespace=namespace
        )

    async def create_lease(self, namespace: str, body: client.V1Lease) -> client.V1Lease:
        return await self._call(
            f"create lease {namespace}/{body.metadata.name}",
            self.coordination_v1.create_namespaced_lease,
            namespace=namespace,
            body=body
        )

    async def replace_lease(self, namespace: str, body: client.V1Lease) -> client.V1Lease:
        return await self._call(
            f"replace lease {namespace}/{body.metadata.name}",
            self.coordination_v1.replace_namespaced_lease,
            name=body.metadata.name,
            namespace=namespace,
            body=body
        )

    async def delete_lease(self, namespace: str, name: str) -> Any:
        return await self._call(
            f"delete lease {namespace}/{name}",
            self.coordination_v1.delete_namespaced_lease,
            name=name,
            namespace=namespace
        )


# Default instance for the CLI - lazily initialized
_k8s_client_instance = None

def get_k8s_client() -> KubernetesClient:
    """Get or create the default Kubernetes client (lazy initialization)."""
    global _k8s_client_instance
    if _k8s_client_instance is None:
        _k8s_client_instance = KubernetesClient()
    return _k8s_client_instance
