"""Mod Package - install, update and removal of ordinary mods."""

from .mod_manager import ModManager

__all__ = ["ModManager"]
