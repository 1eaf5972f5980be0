"""
HearthMods - Valheim Mod Manager

Installs mods and BepInEx from Thunderstore into a Valheim dedicated server
and keeps a local record of what is installed.
"""

__version__ = "1.0.0"
