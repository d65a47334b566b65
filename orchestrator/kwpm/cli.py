"""
Turn the kwpm MariaDB instance on or off.

Usage:
    kwpm status
    kwpm create [--storage-path PATH] [--node-hostname NODE] [--password-env VAR]
    kwpm remove [--if-exists]

The root password is read from $KWPM_MARIADB_PASSWORD (or the variable named
by --password-env) and prompted for when unset.
"""
import asyncio
import getpass
import logging
import os
import socket
import sys

from .config import get_settings
from .errors import AlreadyExistsError, KwpmError, LeaseHeldError, PartialProvisioningError
from .k8s_client import get_k8s_client
from .services import Decommissioner, NamespaceRegistry, Provisioner, ProvisioningLease, ResourceCatalog
from .utils.resource_naming import MARIADB_SUFFIX

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_ALREADY_EXISTS = 3
EXIT_LEASE_HELD = 4


async def status() -> int:
    registry = NamespaceRegistry(get_k8s_client())
    exists = await registry.exists(MARIADB_SUFFIX)
    managed = await registry.list_managed()

    print(f"MariaDB instance: {'present' if exists else 'absent'}")
    for ns in managed:
        print(f"  - {ns.metadata.name}")
    return EXIT_OK


async def create(storage_path: str, node_hostname: str, secret_value: str) -> int:
    settings = get_settings()
    k8s = get_k8s_client()

    lease = None
    if settings.provisioning_lease_enabled:
        lease = ProvisioningLease(
            k8s,
            namespace=settings.provisioning_lease_namespace,
            duration_seconds=settings.provisioning_lease_duration_seconds
        )

    provisioner = Provisioner(
        k8s,
        catalog=ResourceCatalog(settings.template_dir or None, api_client=k8s.api_client),
        lease=lease,
        topology_key=settings.k8s_affinity_topology_key
    )

    try:
        created = await provisioner.create_if_not_exists(storage_path, node_hostname, secret_value)
    except AlreadyExistsError as e:
        print(f"ℹ️  {e}")
        return EXIT_ALREADY_EXISTS
    except LeaseHeldError as e:
        print(f"❌ Error: {e}")
        return EXIT_LEASE_HELD
    except PartialProvisioningError as e:
        print(f"❌ Error: {e}")
        if e.created:
            print("Resources left in place (run `kwpm remove` to clean up):")
            for ref in e.created:
                print(f"  - {ref}")
        return EXIT_ERROR

    print("✅ MariaDB instance created:")
    for ref in created:
        print(f"  - {ref}")
    return EXIT_OK


async def remove(if_exists: bool) -> int:
    k8s = get_k8s_client()

    if if_exists and not await NamespaceRegistry(k8s).exists(MARIADB_SUFFIX):
        print("ℹ️  No MariaDB instance to remove")
        return EXIT_OK

    removed = await Decommissioner(k8s).remove()
    print("✅ MariaDB instance removed:")
    for ref in removed:
        print(f"  - {ref}")
    return EXIT_OK


def read_password(env_var: str) -> str:
    password = os.environ.get(env_var)
    if password:
        return password
    if not sys.stdin.isatty():
        raise ValueError(f"${env_var} is not set and no terminal is available to prompt for it")
    return getpass.getpass("MariaDB root password: ")


def main(argv=None):
    """Main entry point."""
    import argparse

    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(description="Provision or remove the kwpm MariaDB instance")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Show whether the MariaDB instance exists")

    create_parser = subparsers.add_parser("create", help="Create the MariaDB instance if it does not exist")
    create_parser.add_argument(
        "--storage-path",
        default=settings.storage_base_path,
        help="Base directory on the node for volume data (default: %(default)s)",
    )
    create_parser.add_argument(
        "--node-hostname",
        default=socket.gethostname(),
        help="kubernetes.io/hostname of the node holding the storage path (default: %(default)s)",
    )
    create_parser.add_argument(
        "--password-env",
        default=settings.mariadb_password_env,
        help="Environment variable holding the root password (default: %(default)s)",
    )

    remove_parser = subparsers.add_parser("remove", help="Delete the MariaDB instance")
    remove_parser.add_argument(
        "--if-exists",
        action="store_true",
        help="Do nothing when no instance exists instead of failing",
    )

    args = parser.parse_args(argv)

    try:
        if args.command == "status":
            code = asyncio.run(status())
        elif args.command == "create":
            secret_value = read_password(args.password_env)
            code = asyncio.run(create(args.storage_path, args.node_hostname, secret_value))
        elif args.command == "remove":
            code = asyncio.run(remove(args.if_exists))
        else:
            parser.print_help()
            code = EXIT_USAGE
    except ValueError as e:
        print(f"❌ Error: {e}")
        code = EXIT_USAGE
    except (KwpmError, RuntimeError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"❌ Error: {e}")
        code = EXIT_ERROR

    sys.exit(code)


if __name__ == "__main__":
    main()
