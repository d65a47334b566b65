"""
Services Module

Provisioning logic for the kwpm MariaDB instance.

Key components:
- NamespaceRegistry: instance discovery by namespace naming convention
- ResourceCatalog: manifest templates as kubernetes client models
- pin_to_host: node affinity for node-local storage
- ProvisioningLease: lock around check-then-create
- Provisioner / Decommissioner: create and remove the instance
"""

from .affinity import pin_to_host
from .decommissioner import Decommissioner
from .lease import ProvisioningLease
from .namespace_registry import NamespaceRegistry
from .provisioner import Provisioner
from .resource_catalog import ResourceCatalog

__all__ = [
    "pin_to_host",
    "Decommissioner",
    "ProvisioningLease",
    "NamespaceRegistry",
    "Provisioner",
    "ResourceCatalog",
]
