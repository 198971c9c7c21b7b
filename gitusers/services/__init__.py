"""Integrations with the systems of record that back user accounts."""
