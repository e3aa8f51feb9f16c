"""Bundled migration descriptors."""
