"""
Node affinity for node-local storage.

A `local` PersistentVolume is only usable on the node that holds its
directory, so the volume is pinned to that node by hostname label.
"""

from kubernetes import client
import re

HOSTNAME_LABEL = "kubernetes.io/hostname"

# Kubernetes label value: at most 63 chars, alphanumeric at both ends
_LABEL_VALUE_RE = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?$")


def pin_to_host(hostname: str, label_key: str = HOSTNAME_LABEL) -> client.V1VolumeNodeAffinity:
    """
    Create a volume node affinity requiring `label_key In [hostname]`.

    Args:
        hostname: Value of the node's hostname label
        label_key: Node label to match (default: kubernetes.io/hostname)

    Returns:
        V1VolumeNodeAffinity for a PersistentVolume spec

    Raises:
        ValueError: If hostname is empty or not a valid label value
    """
    if not hostname or not hostname.strip():
        raise ValueError("Node hostname must not be empty")
    if not _LABEL_VALUE_RE.match(hostname):
        raise ValueError(f"Invalid node hostname label value: {hostname!r}")

    return client.V1VolumeNodeAffinity(
        required=client.V1NodeSelector(
            node_selector_terms=[
                client.V1NodeSelectorTerm(
                    match_expressions=[
                        client.V1NodeSelectorRequirement(
                            key=label_key,
                            operator="In",
                            values=[hostname]
                        )
                    ]
                )
            ]
        )
    )
