from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# BepInEx is required by practically every Valheim mod
FRAMEWORK_NAMESPACE = "denikson"
FRAMEWORK_NAME = "BepInExPack_Valheim"


def full_name(namespace: str, name: str, version: str) -> str:
    """Canonical namespace-name-version key used for archives and install folders"""
    return f"{namespace}-{name}-{version}"


def parse_dependency(key: str) -> Optional[Tuple[str, str, str]]:
    """
    Splits a dependency key into (namespace, name, version)

    Args:
        key: Dependency key in the form namespace-name-version

    Returns:
        The three parts, or None if the key is malformed
    """
    parts = key.split("-")
    if len(parts) < 3 or not all(parts):
        return None
    namespace, version = parts[0], parts[-1]
    name = "-".join(parts[1:-1])
    return namespace, name, version


@dataclass
class Mod:
    """A single installed plugin"""

    name: str
    namespace: str
    version: str
    file_path: str = ""
    website_url: str = ""
    description: str = ""
    dependencies: List[str] = field(default_factory=list)
    id: int = 0
    framework_id: int = 0

    @property
    def full_name(self) -> str:
        return full_name(self.namespace, self.name, self.version)


@dataclass
class Framework:
    """
    The plugin loader every mod builds on

    Frameworks are installed into the server root instead of the plugin
    folder, so they are tracked separately from ordinary mods.
    """

    name: str
    namespace: str
    version: str
    website_url: str = ""
    description: str = ""
    id: int = 0

    @property
    def full_name(self) -> str:
        return full_name(self.namespace, self.name, self.version)
