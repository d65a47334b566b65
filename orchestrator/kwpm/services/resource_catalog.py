"""
Resource Catalog

Loads the static MariaDB manifest templates and turns them into kubernetes
client model objects ready for parameter injection. Also builds the two
objects that have no template: the instance namespace and the credential
secret.

Templates (kwpm/templates/mariadb/):
- mariadb-pv.yaml          -> V1PersistentVolume (cluster-scoped)
- mariadb-pvc.yaml         -> V1PersistentVolumeClaim
- mariadb-svc.yaml         -> V1Service
- mariadb-deployment.yaml  -> V1Deployment

Every load returns a fresh object, so callers may mutate the result.
"""

from kubernetes import client
from pathlib import Path
from typing import Any, Optional, Union
import inspect
import json
import logging

import yaml

from ..errors import TemplateError
from ..utils.resource_naming import (
    MARIADB_NAMESPACE,
    MARIADB_SECRET_NAME,
    MARIADB_SECRET_KEY,
)

logger = logging.getLogger(__name__)

PACKAGED_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "mariadb"


class _JsonResponse:
    """Response object accepted by ApiClient.deserialize before kubernetes 35."""

    def __init__(self, data: str):
        self.data = data


def deserialize_manifest(api_client: client.ApiClient, manifest: Any, model: str) -> Any:
    """
    Turn a parsed manifest into a kubernetes client model.

    ApiClient.deserialize takes a response object up to kubernetes 34 and
    (response_text, response_type, content_type) from 35 on.
    """
    body = json.dumps(manifest)
    if "content_type" in inspect.signature(api_client.deserialize).parameters:
        return api_client.deserialize(body, model, "application/json")
    return api_client.deserialize(_JsonResponse(body), model)


class ResourceCatalog:
    """Supplies the MariaDB ResourceSet members as typed, unsaved objects."""

    def __init__(
        self,
        template_dir: Optional[Union[str, Path]] = None,
        api_client: Optional[client.ApiClient] = None
    ):
        """
        Args:
            template_dir: Directory containing the mariadb-*.yaml templates
                (default: the templates packaged with kwpm)
            api_client: ApiClient used only for model deserialization
        """
        self.template_dir = Path(template_dir) if template_dir else PACKAGED_TEMPLATE_DIR
        # Deserialization is purely local; no cluster configuration is needed
        self._api_client = api_client or client.ApiClient()

    def _load(self, filename: str, model: str) -> Any:
        path = self.template_dir / filename
        try:
            manifest = yaml.safe_load(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise TemplateError(f"Template not found: {path}") from e
        except yaml.YAMLError as e:
            raise TemplateError(f"Invalid YAML in template {path}: {e}") from e

        if not isinstance(manifest, dict):
            raise TemplateError(f"Template {path} does not contain a manifest object")

        logger.debug(f"[K8S] Loaded template {path} as {model}")
        try:
            return deserialize_manifest(self._api_client, manifest, model)
        except ValueError as e:
            raise TemplateError(f"Template {path} is not a valid {model}: {e}") from e

    def persistent_volume(self) -> client.V1PersistentVolume:
        return self._load("mariadb-pv.yaml", "V1PersistentVolume")

    def persistent_volume_claim(self) -> client.V1PersistentVolumeClaim:
        return self._load("mariadb-pvc.yaml", "V1PersistentVolumeClaim")

    def service(self) -> client.V1Service:
        return self._load("mariadb-svc.yaml", "V1Service")

    def deployment(self) -> client.V1Deployment:
        return self._load("mariadb-deployment.yaml", "V1Deployment")

    def namespace(self) -> client.V1Namespace:
        return client.V1Namespace(
            metadata=client.V1ObjectMeta(
                name=MARIADB_NAMESPACE,
                labels={"app.kubernetes.io/managed-by": "kwpm"}
            )
        )

    def secret(self, secret_value: str) -> client.V1Secret:
        """Build the credential secret; string_data lets the API server base64-encode it."""
        return client.V1Secret(
            metadata=client.V1ObjectMeta(name=MARIADB_SECRET_NAME),
            string_data={MARIADB_SECRET_KEY: secret_value}
        )
