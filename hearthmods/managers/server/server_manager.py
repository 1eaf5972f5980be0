import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Union

import psutil

from ...core.config import LINUX, MACOS, WINDOWS
from ...core.errors import InvalidGameTypeError, ServerStartError

VANILLA = "vanilla"
MODDED = "modded"

LINUX_START_SCRIPT = "start_server.sh"
MACOS_START_SCRIPT = "start_server.command"
WINDOWS_START_SCRIPT = "start_headless_server.bat"
MODDED_START_SCRIPT = "start_server_bepinex.sh"


def normalize(game_type: str) -> str:
    return game_type.strip().lower()


class ServerManager:
    """Handles Valheim dedicated server execution"""

    def __init__(self, server_directory: Union[str, Path], platform: str):
        self.server_directory = Path(server_directory)
        self.platform = platform
        self.server_process: Optional[subprocess.Popen] = None

    @staticmethod
    def is_valid_game_type(game_type: str) -> bool:
        return normalize(game_type) in (VANILLA, MODDED)

    def get_start_script(self, game_type: str) -> Path:
        """
        Picks the launch script for a game type

        Modded servers always use the BepInEx script. Vanilla servers use the
        script Valheim ships for the configured platform.
        """
        if normalize(game_type) == MODDED:
            return self.server_directory / MODDED_START_SCRIPT

        scripts = {
            LINUX: LINUX_START_SCRIPT,
            MACOS: MACOS_START_SCRIPT,
            WINDOWS: WINDOWS_START_SCRIPT,
        }
        if self.platform not in scripts:
            raise ServerStartError(f"unsupported platform {self.platform}")
        return self.server_directory / scripts[self.platform]

    def _command(self, script: Path) -> List[str]:
        if self.platform == WINDOWS:
            return ["cmd", "/c", str(script)]
        return ["sh", str(script)]

    def start(
        self,
        game_type: str,
        log_callback: Optional[Callable[[str], None]] = None
    ) -> int:
        """
        Launches the game server and blocks until it exits

        Args:
            game_type: vanilla or modded
            log_callback: Receives every line the server prints

        Returns:
            The server's exit code

        Raises:
            InvalidGameTypeError: game_type is neither vanilla nor modded
            ServerStartError: The start script is missing or could not be run
        """
        if not self.is_valid_game_type(game_type):
            raise InvalidGameTypeError(f"invalid game server type {game_type!r}")
        game_type = normalize(game_type)

        script = self.get_start_script(game_type)
        if not script.is_file():
            raise ServerStartError(f"start script {script} not found")

        if log_callback:
            log_callback(f"Launching {game_type} game server...\n\n")

        try:
            self.server_process = subprocess.Popen(
                self._command(script),
                cwd=str(self.server_directory),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise ServerStartError(f"unable to start game server: {exc}") from exc

        process = self.server_process
        for line in process.stdout:
            if log_callback:
                log_callback(line if line.endswith("\n") else line + "\n")
        process.stdout.close()

        exit_code = process.wait()
        self.server_process = None
        if log_callback:
            if exit_code != 0:
                log_callback("... Server crashed!\n")
            else:
                log_callback("... Closing server!\n")
        return exit_code

    def is_server_running(self) -> bool:
        return self.server_process is not None and self.server_process.poll() is None

    def stop(self, timeout: float = 10) -> bool:
        """
        Stops the running server and everything its start script spawned

        Returns:
            True if a running server was stopped
        """
        process = self.server_process
        if process is None or process.poll() is not None:
            self.server_process = None
            return False

        # The start script forks the server binary, so collect the tree first
        children = self._children(process.pid)
        for child in children:
            try:
                child.terminate()
            except psutil.NoSuchProcess:
                continue
        process.terminate()

        _, alive = psutil.wait_procs(children, timeout=timeout)
        for child in alive:
            try:
                child.kill()
            except psutil.NoSuchProcess:
                continue
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait(timeout=timeout)

        self.server_process = None
        return True

    @staticmethod
    def _children(pid: int) -> List[psutil.Process]:
        try:
            return psutil.Process(pid).children(recursive=True)
        except psutil.NoSuchProcess:
            return []
