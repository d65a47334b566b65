"""Utility modules for the kwpm provisioner."""
