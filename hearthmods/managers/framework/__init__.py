"""Framework Package - install, update and removal of BepInEx."""

from .framework_manager import FrameworkManager

__all__ = ["FrameworkManager"]
