"""kwpm - provisions and decommissions a MariaDB instance on Kubernetes."""

__version__ = "0.1.0"
