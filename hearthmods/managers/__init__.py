"""Managers Package - lifecycle services for mods, the framework and the server."""
