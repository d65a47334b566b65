from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = "INFO"

    # ==========================================================================
    # Storage Settings
    # ==========================================================================
    # Base directory on the target node; the PV path becomes {base}/mariadb
    storage_base_path: str = "/data/volumes/kwpm"

    # Directory holding the mariadb-*.yaml templates
    # Empty string uses the templates packaged with kwpm
    template_dir: str = ""

    # Node label the PersistentVolume affinity is matched against
    k8s_affinity_topology_key: str = "kubernetes.io/hostname"

    # ==========================================================================
    # Provisioning Lease Settings
    # ==========================================================================
    # A coordination.k8s.io Lease guards the check-then-create window
    # so that two concurrent `create` runs cannot both pass the existence check
    provisioning_lease_enabled: bool = True
    provisioning_lease_namespace: str = "default"
    provisioning_lease_duration_seconds: int = 300

    # Environment variable the CLI reads the MariaDB root password from
    mariadb_password_env: str = "KWPM_MARIADB_PASSWORD"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "KWPM_"
        extra = "ignore"  # Ignore extra fields from .env file
        case_sensitive = False  # Allow lowercase env vars to match uppercase field names

@lru_cache()
def get_settings():
    return Settings()
