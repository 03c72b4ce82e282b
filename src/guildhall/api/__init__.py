"""JSON introspection API."""

from guildhall.api.app import command_catalog, create_api

__all__ = ["command_catalog", "create_api"]
