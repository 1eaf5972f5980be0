import pytest

from hearthmods import cli
from hearthmods.core.config import SERVER_DIRECTORY_KEY, AppConfig
from hearthmods.core.errors import ModNotFoundError, StorageError
from hearthmods.storage import Mod


class _FakeMods:
    def __init__(self, mods=(), error=None):
        self.mods = list(mods)
        self.error = error
        self.calls = []

    def _record(self, *call):
        self.calls.append(call)
        if self.error:
            raise self.error

    def list_mods(self):
        return self.mods

    def add_mod(self, namespace, name):
        self._record("add", namespace, name)

    def update_mod(self, name):
        self._record("update", name)

    def update_all_mods(self):
        self._record("update_all")

    def remove_mod(self, namespace, name):
        self._record("remove", namespace, name)

    def remove_all_mods(self):
        self._record("remove_all")


class _FakeFrameworks:
    def __init__(self, installed=True):
        self.installed = installed
        self.calls = []

    def install_framework(self):
        self.calls.append("install")
        return self.installed

    def update_framework(self):
        self.calls.append("update")

    def remove_framework(self):
        self.calls.append("remove")


@pytest.fixture
def context(tmp_path):
    config = AppConfig(tmp_path)
    config.load()
    return cli.Context(config=config, mods=_FakeMods(), frameworks=_FakeFrameworks(), server=None)


def run(argv, ctx):
    return cli.run(cli.parse_args(argv), ctx)


def test_add_ensures_framework_first(context):
    assert run(["add", "-n", "ValheimModding", "-m", "Jotunn"], context) == 0
    assert context.frameworks.calls == ["install"]
    assert context.mods.calls == [("add", "ValheimModding", "Jotunn")]


def test_add_stops_when_framework_declined(context, capsys):
    context.frameworks.installed = False
    run(["add", "-n", "ValheimModding", "-m", "Jotunn"], context)
    assert context.mods.calls == []
    assert "BepInEx is required" in capsys.readouterr().out


@pytest.mark.parametrize("argv, expected", [
    (["remove", "-n", "A", "-m", "B"], ("remove", "A", "B")),
    (["remove", "all"], ("remove_all",)),
    (["update", "-m", "B"], ("update", "B")),
    (["update", "all"], ("update_all",)),
])
def test_mod_commands_dispatch(context, argv, expected):
    run(argv, context)
    assert context.mods.calls == [expected]


@pytest.mark.parametrize("argv, expected", [
    (["remove", "bepinex"], "remove"),
    (["update", "bepinex"], "update"),
])
def test_framework_commands_dispatch(context, argv, expected):
    run(argv, context)
    assert context.frameworks.calls == [expected]


@pytest.mark.parametrize("argv", [
    ["remove"],
    ["remove", "-m", "B"],
    ["update"],
    ["add", "-n", "A"],
    ["start", "hardcore"],
])
def test_invalid_arguments_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(argv)
    assert excinfo.value.code == 2


def test_service_errors_are_reported_not_escalated(context, capsys):
    context.mods.error = ModNotFoundError("ValheimModding-Missing was not found")
    assert run(["update", "-m", "Missing"], context) == 0
    assert capsys.readouterr().out == "... ValheimModding-Missing was not found\n"


def test_list_terse(context, capsys):
    context.mods.mods = [Mod(name="Jotunn", namespace="ValheimModding", version="2.20.0")]
    run(["list"], context)
    assert capsys.readouterr().out == "Jotunn by ValheimModding | 2.20.0\n"


def test_list_verbose_wraps_descriptions():
    description = "A library that makes it easy to add items, recipes and pieces to Valheim."
    mods = [Mod(name="Jotunn", namespace="ValheimModding", version="2.20.0", description=description)]

    lines = cli.format_mods(mods, verbose=True).splitlines()

    assert lines[0].split() == ["NAME", "VERSION", "DESCRIPTION"]
    assert lines[1].startswith("Jotunn  2.20.0   A library")
    assert len(lines) > 2
    for line in lines[1:]:
        assert len(line[len("Jotunn  2.20.0   "):]) <= cli.DESCRIPTION_WIDTH


def test_list_empty():
    assert cli.format_mods([]) == "No mods installed\n"


def test_config_set_and_get(context, capsys):
    run(["config", "set", SERVER_DIRECTORY_KEY, "/srv/valheim"], context)
    run(["config", "get", SERVER_DIRECTORY_KEY], context)
    out = capsys.readouterr().out
    assert out.endswith("/srv/valheim\n")
    assert context.config.get(SERVER_DIRECTORY_KEY) == "/srv/valheim"


def test_config_lists_everything(context, capsys):
    run(["config"], context)
    out = capsys.readouterr().out
    assert f"{SERVER_DIRECTORY_KEY}: " in out
    assert "platform: " in out


def test_bootstrap_failure_exits_1(monkeypatch, capsys):
    def broken_bootstrap():
        raise StorageError("unable to open database")

    monkeypatch.setattr(cli, "bootstrap", broken_bootstrap)
    assert cli.main(["list"]) == 1
    assert "unable to open database" in capsys.readouterr().out


def test_bootstrap_wires_managers(tmp_path):
    ctx = cli.bootstrap(config_dir=tmp_path, input_stream=[])
    assert ctx.config.database_file.exists()
    assert ctx.mods.list_mods() == []
    assert ctx.mods.frameworks_repo is ctx.frameworks.frameworks_repo
