import os
import subprocess
import time

import psutil
import pytest

from hearthmods.core.config import LINUX, MACOS, WINDOWS
from hearthmods.core.errors import InvalidGameTypeError, ServerStartError
from hearthmods.managers.server import ServerManager

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses sh start scripts")


def _alive(process):
    try:
        return process.status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False


@pytest.mark.parametrize("game_type, valid", [
    ("vanilla", True),
    (" Modded ", True),
    ("VANILLA", True),
    ("hardcore", False),
    ("", False),
])
def test_is_valid_game_type(game_type, valid):
    assert ServerManager.is_valid_game_type(game_type) is valid


@pytest.mark.parametrize("platform, script", [
    (LINUX, "start_server.sh"),
    (MACOS, "start_server.command"),
    (WINDOWS, "start_headless_server.bat"),
])
def test_vanilla_script_depends_on_platform(tmp_path, platform, script):
    assert ServerManager(tmp_path, platform).get_start_script("vanilla") == tmp_path / script


def test_modded_script_is_the_bepinex_one(tmp_path):
    assert ServerManager(tmp_path, WINDOWS).get_start_script("modded") == tmp_path / "start_server_bepinex.sh"


def test_unknown_platform(tmp_path):
    with pytest.raises(ServerStartError):
        ServerManager(tmp_path, "amiga").get_start_script("vanilla")


def test_start_rejects_invalid_game_type(tmp_path):
    with pytest.raises(InvalidGameTypeError):
        ServerManager(tmp_path, LINUX).start("hardcore")


def test_start_missing_script(tmp_path):
    with pytest.raises(ServerStartError):
        ServerManager(tmp_path, LINUX).start("modded")


@posix_only
def test_start_streams_output_and_returns_exit_code(tmp_path):
    (tmp_path / "start_server_bepinex.sh").write_text("echo 'Game server connected'\necho oops >&2\nexit 3\n")
    lines = []

    code = ServerManager(tmp_path, LINUX).start("modded", lines.append)

    assert code == 3
    assert "Game server connected\n" in lines
    assert "oops\n" in lines
    assert lines[-1] == "... Server crashed!\n"


@posix_only
def test_stop_terminates_running_server(tmp_path):
    manager = ServerManager(tmp_path, LINUX)
    manager.server_process = subprocess.Popen(["sleep", "30"])

    assert manager.is_server_running()
    assert manager.stop(timeout=5) is True
    assert not manager.is_server_running()


@posix_only
def test_stop_takes_down_forked_server(tmp_path):
    manager = ServerManager(tmp_path, LINUX)
    manager.server_process = subprocess.Popen(["sh", "-c", "sleep 30; echo done"])

    deadline = time.monotonic() + 5
    children = []
    while not children and time.monotonic() < deadline:
        children = psutil.Process(manager.server_process.pid).children(recursive=True)
        time.sleep(0.05)
    assert children

    assert manager.stop(timeout=5) is True

    for child in children:
        assert not _alive(child)


def test_stop_without_server(tmp_path):
    assert ServerManager(tmp_path, LINUX).stop() is False
