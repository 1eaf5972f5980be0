"""Server Package - launching the Valheim dedicated server."""

from .server_manager import MODDED, VANILLA, ServerManager

__all__ = ["MODDED", "VANILLA", "ServerManager"]
