"""
HearthMods - Valheim Mod Manager
Command line tool to install, update and remove Valheim server mods
"""
import sys

from hearthmods.cli import main


if __name__ == "__main__":
    sys.exit(main())
