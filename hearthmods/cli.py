import argparse
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .core.api import ThunderstoreAPI
from .core.config import AppConfig
from .core.download import ArchiveDownloader
from .core.errors import HearthModsError
from .managers.files import FileManager
from .managers.framework import FrameworkManager
from .managers.mod import ModManager
from .managers.server import MODDED, VANILLA, ServerManager
from .storage import FrameworksRepository, Mod, ModsRepository, create_tables, open_database

DESCRIPTION_WIDTH = 40


def _write(message: str) -> None:
    sys.stdout.write(message)
    sys.stdout.flush()


@dataclass
class Context:
    """Everything a command needs, wired once at startup"""

    config: AppConfig
    mods: ModManager
    frameworks: FrameworkManager
    server: ServerManager


def bootstrap(
    config_dir: Optional[Path] = None,
    input_stream: Optional[Iterable[str]] = None,
    log_callback: Callable[[str], None] = _write
) -> Context:
    """
    Loads the configuration, opens the database and builds the managers

    Raises:
        ConfigError: The configuration file could not be read or created
        StorageError: The database could not be opened or initialised
    """
    config = AppConfig(config_dir)
    config.load()

    db = open_database(config.database_file)
    create_tables(db)

    lines = iter(input_stream if input_stream is not None else sys.stdin)
    registry = ThunderstoreAPI()
    frameworks_repo = FrameworksRepository(db)
    file_manager = FileManager(
        config.server_directory,
        downloader=ArchiveDownloader(),
        log_callback=log_callback,
    )

    return Context(
        config=config,
        mods=ModManager(
            ModsRepository(db),
            file_manager,
            registry,
            lines,
            log_callback=log_callback,
            frameworks_repo=frameworks_repo,
        ),
        frameworks=FrameworkManager(
            frameworks_repo,
            file_manager,
            registry,
            lines,
            log_callback=log_callback,
        ),
        server=ServerManager(config.server_directory, config.platform),
    )


# ==================== OUTPUT ====================

def format_mods(mods: List[Mod], verbose: bool = False) -> str:
    """Renders installed mods as terse lines or as a wrapped table"""
    if not mods:
        return "No mods installed\n"

    if not verbose:
        return "".join(f"{m.name} by {m.namespace} | {m.version}\n" for m in mods)

    name_width = max(len("NAME"), *(len(m.name) for m in mods))
    version_width = max(len("VERSION"), *(len(m.version) for m in mods))
    row = f"{{:<{name_width}}}  {{:<{version_width}}}  {{}}"

    out = [row.format("NAME", "VERSION", "DESCRIPTION").rstrip()]
    for m in mods:
        wrapped = textwrap.wrap(m.description, DESCRIPTION_WIDTH) or [""]
        out.append(row.format(m.name, m.version, wrapped[0]).rstrip())
        for extra in wrapped[1:]:
            out.append(row.format("", "", extra).rstrip())
    return "\n".join(out) + "\n"


# ==================== COMMANDS ====================

def _cmd_list(args: argparse.Namespace, ctx: Context) -> int:
    _write(format_mods(ctx.mods.list_mods(), args.verbose))
    return 0


def _cmd_add(args: argparse.Namespace, ctx: Context) -> int:
    # Every mod needs BepInEx
    if not ctx.frameworks.install_framework():
        _write("... BepInEx is required to install mods\n")
        return 0
    ctx.mods.add_mod(args.namespace, args.mod)
    return 0


def _cmd_remove(args: argparse.Namespace, ctx: Context) -> int:
    if args.target == "all":
        ctx.mods.remove_all_mods()
    elif args.target == "bepinex":
        ctx.frameworks.remove_framework()
    else:
        ctx.mods.remove_mod(args.namespace, args.mod)
    return 0


def _cmd_update(args: argparse.Namespace, ctx: Context) -> int:
    if args.target == "all":
        ctx.mods.update_all_mods()
    elif args.target == "bepinex":
        ctx.frameworks.update_framework()
    else:
        ctx.mods.update_mod(args.mod)
    return 0


def _cmd_config(args: argparse.Namespace, ctx: Context) -> int:
    if args.action == "get":
        _write(f"{ctx.config.get(args.key)}\n")
    elif args.action == "set":
        ctx.config.set(args.key, args.value)
        _write(f"{args.key} set to {args.value}\n")
    else:
        for key, value in ctx.config.items():
            _write(f"{key}: {value}\n")
    return 0


def _cmd_start(args: argparse.Namespace, ctx: Context) -> int:
    try:
        ctx.server.start(args.game_type, log_callback=_write)
    except KeyboardInterrupt:
        _write("Stopping server...\n")
        ctx.server.stop()
    return 0


COMMANDS = {
    "list": _cmd_list,
    "add": _cmd_add,
    "remove": _cmd_remove,
    "update": _cmd_update,
    "config": _cmd_config,
    "start": _cmd_start,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hearthmods",
        description="Manage mods for a Valheim dedicated server.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List installed mods.")
    list_cmd.add_argument("-v", "--verbose", action="store_true", help="Show descriptions.")

    add = sub.add_parser("add", help="Install a mod from Thunderstore.")
    add.add_argument("-n", "--namespace", required=True, help="Mod author.")
    add.add_argument("-m", "--mod", required=True, help="Mod package name.")

    remove = sub.add_parser("remove", help="Remove a mod, all mods or BepInEx.")
    remove.add_argument("target", nargs="?", choices=["all", "bepinex"])
    remove.add_argument("-n", "--namespace", help="Mod author.")
    remove.add_argument("-m", "--mod", help="Mod package name.")

    update = sub.add_parser("update", help="Update a mod, all mods or BepInEx.")
    update.add_argument("target", nargs="?", choices=["all", "bepinex"])
    update.add_argument("-m", "--mod", help="Mod package name.")

    config = sub.add_parser("config", help="Show or change configuration.")
    config_sub = config.add_subparsers(dest="action")
    get = config_sub.add_parser("get", help="Print one configuration value.")
    get.add_argument("key", choices=list(AppConfig.VALID_KEYS))
    set_cmd = config_sub.add_parser("set", help="Change one configuration value.")
    set_cmd.add_argument("key", choices=list(AppConfig.VALID_KEYS))
    set_cmd.add_argument("value")

    start = sub.add_parser("start", help="Launch the game server.")
    start.add_argument("game_type", choices=[VANILLA, MODDED])

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "remove" and args.target is None and not (args.namespace and args.mod):
        parser.error("remove needs 'all', 'bepinex' or both -n and -m")
    if args.command == "update" and args.target is None and not args.mod:
        parser.error("update needs 'all', 'bepinex' or -m")
    return args


def run(args: argparse.Namespace, ctx: Context) -> int:
    """Runs one parsed command. Service errors are reported, not escalated"""
    try:
        return COMMANDS[args.command](args, ctx)
    except HearthModsError as exc:
        _write(f"... {exc}\n")
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        ctx = bootstrap()
    except HearthModsError as exc:
        _write(f"Error: {exc}\n")
        return 1
    return run(args, ctx)


if __name__ == "__main__":
    sys.exit(main())
