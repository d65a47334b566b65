"""
Resource naming conventions for the MariaDB instance.

Instances are discovered purely by namespace name:
- Every namespace managed by kwpm starts with MANAGED_PREFIX
- The database instance namespace additionally ends with MARIADB_SUFFIX

The concrete object names below are fixed; there is only ever one instance.
"""

MANAGED_PREFIX = "kwpm-"
MARIADB_SUFFIX = "-mariadb"

MARIADB_NAMESPACE = f"{MANAGED_PREFIX}mariadb"
MARIADB_PV_NAME = f"{MARIADB_NAMESPACE}-pv"
MARIADB_SECRET_NAME = "mysql-pass"
MARIADB_SECRET_KEY = "password"
MARIADB_STORAGE_SUBDIR = "mariadb"

PROVISIONING_LEASE_NAME = f"{MARIADB_NAMESPACE}-provisioning"


def is_managed(name: str) -> bool:
    """True if the namespace name follows the kwpm naming convention."""
    return (name or "").startswith(MANAGED_PREFIX)


def matches_suffix(name: str, suffix: str) -> bool:
    """True if the namespace name identifies the workload kind `suffix`."""
    return (name or "").endswith(suffix)


def get_storage_path(base_path: str) -> str:
    """
    Get the node-local directory backing the MariaDB PersistentVolume.

    Examples:
        >>> get_storage_path("/data/volumes/kwpm")
        "/data/volumes/kwpm/mariadb"
    """
    return f"{base_path.rstrip('/')}/{MARIADB_STORAGE_SUBDIR}"
