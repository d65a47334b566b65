"""
Test configuration and fixtures for pytest.

Provides an in-memory fake of the Kubernetes API surface kwpm uses, so the
provisioning flows can be exercised end to end without a cluster. The fake
follows the API server's semantics where kwpm depends on them:
- creating an existing object -> 409 Conflict
- deleting or reading a missing object -> 404 Not Found
- namespaced objects require their namespace to exist
- deleting a namespace cascades to everything inside it
"""

import sys
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import pytest

# Add the orchestrator directory to sys.path
orchestrator_dir = Path(__file__).parent.parent
sys.path.insert(0, str(orchestrator_dir))


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    Sets up test environment variables and registers custom markers.
    """
    os.environ["KWPM_LOG_LEVEL"] = "DEBUG"
    os.environ.pop("KWPM_MARIADB_PASSWORD", None)

    # Import and clear settings cache after env vars are set
    from kwpm.config import get_settings
    get_settings.cache_clear()

    # Register custom markers
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "kubernetes: mark test as exercising Kubernetes API flows")


class FakeCluster:
    """Stands in for CoreV1Api, AppsV1Api and CoordinationV1Api at once."""

    def __init__(self):
        self.namespaces: Dict[str, object] = {}
        self.persistent_volumes: Dict[str, object] = {}
        # (kind, namespace, name) -> body
        self.namespaced: Dict[Tuple[str, str, str], object] = {}
        self.calls: List[str] = []
        self.fail_on: Dict[str, int] = {}

    # -- helpers --------------------------------------------------------------

    def _record(self, method: str) -> None:
        self.calls.append(method)
        if method in self.fail_on:
            from kubernetes.client.rest import ApiException
            raise ApiException(status=self.fail_on[method], reason="Injected failure")

    @staticmethod
    def _not_found():
        from kubernetes.client.rest import ApiException
        return ApiException(status=404, reason="Not Found")

    @staticmethod
    def _conflict():
        from kubernetes.client.rest import ApiException
        return ApiException(status=409, reason="AlreadyExists")

    def _create_namespaced(self, kind: str, namespace: str, body):
        if namespace not in self.namespaces:
            raise self._not_found()
        key = (kind, namespace, body.metadata.name)
        if key in self.namespaced:
            raise self._conflict()
        self.namespaced[key] = body
        return body

    def names(self, kind: str, namespace: Optional[str] = None) -> List[str]:
        return [
            name for (k, ns, name) in self.namespaced
            if k == kind and (namespace is None or ns == namespace)
        ]

    def add_namespace(self, name: str) -> None:
        from kubernetes import client
        self.namespaces[name] = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))

    # -- CoreV1Api ------------------------------------------------------------

    def list_namespace(self):
        from kubernetes import client
        self._record("list_namespace")
        return client.V1NamespaceList(items=list(self.namespaces.values()))

    def create_namespace(self, body):
        self._record("create_namespace")
        if body.metadata.name in self.namespaces:
            raise self._conflict()
        self.namespaces[body.metadata.name] = body
        return body

    def delete_namespace(self, name):
        self._record("delete_namespace")
        if name not in self.namespaces:
            raise self._not_found()
        del self.namespaces[name]
        for key in [k for k in self.namespaced if k[1] == name]:
            del self.namespaced[key]

    def create_persistent_volume(self, body):
        self._record("create_persistent_volume")
        if body.metadata.name in self.persistent_volumes:
            raise self._conflict()
        self.persistent_volumes[body.metadata.name] = body
        return body

    def delete_persistent_volume(self, name):
        self._record("delete_persistent_volume")
        if name not in self.persistent_volumes:
            raise self._not_found()
        del self.persistent_volumes[name]

    def create_namespaced_persistent_volume_claim(self, namespace, body):
        self._record("create_namespaced_persistent_volume_claim")
        return self._create_namespaced("PersistentVolumeClaim", namespace, body)

    def create_namespaced_service(self, namespace, body):
        self._record("create_namespaced_service")
        return self._create_namespaced("Service", namespace, body)

    def create_namespaced_secret(self, namespace, body):
        self._record("create_namespaced_secret")
        return self._create_namespaced("Secret", namespace, body)

    # -- AppsV1Api ------------------------------------------------------------

    def create_namespaced_deployment(self, namespace, body):
        self._record("create_namespaced_deployment")
        return self._create_namespaced("Deployment", namespace, body)

    # -- CoordinationV1Api ----------------------------------------------------

    def read_namespaced_lease(self, name, namespace):
        self._record("read_namespaced_lease")
        key = ("Lease", namespace, name)
        if key not in self.namespaced:
            raise self._not_found()
        return self.namespaced[key]

    def create_namespaced_lease(self, namespace, body):
        self._record("create_namespaced_lease")
        return self._create_namespaced("Lease", namespace, body)

    def replace_namespaced_lease(self, name, namespace, body):
        self._record("replace_namespaced_lease")
        key = ("Lease", namespace, name)
        if key not in self.namespaced:
            raise self._not_found()
        current = self.namespaced[key]
        if body.metadata.resource_version != current.metadata.resource_version:
            raise self._conflict()
        self.namespaced[key] = body
        return body

    def delete_namespaced_lease(self, name, namespace):
        self._record("delete_namespaced_lease")
        key = ("Lease", namespace, name)
        if key not in self.namespaced:
            raise self._not_found()
        del self.namespaced[key]


@pytest.fixture
def fake_cluster():
    """Empty fake cluster with the `default` namespace present."""
    cluster = FakeCluster()
    cluster.add_namespace("default")
    return cluster


@pytest.fixture
def k8s(fake_cluster):
    """KubernetesClient whose API groups are backed by fake_cluster."""
    pytest.importorskip("kubernetes")
    from kubernetes import client
    from kwpm.k8s_client import KubernetesClient

    manager = KubernetesClient(api_client=client.ApiClient())
    manager.core_v1 = fake_cluster
    manager.apps_v1 = fake_cluster
    manager.coordination_v1 = fake_cluster
    return manager
