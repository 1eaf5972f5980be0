import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from ..errors import (
    ByteIOError,
    HTTPClientError,
    JSONParseError,
    PackageNotFoundError,
    ThunderstoreAPIError,
)


@dataclass
class Release:
    """A specific, downloadable version of a package"""

    namespace: str
    name: str
    version_number: str
    full_name: str
    download_url: str
    description: str = ""
    icon: str = ""
    dependencies: List[str] = field(default_factory=list)
    downloads: int = 0
    date_created: str = ""
    website_url: str = ""
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Release":
        namespace = str(data.get("namespace", ""))
        name = str(data.get("name", ""))
        version = str(data.get("version_number", ""))
        return cls(
            namespace=namespace,
            name=name,
            version_number=version,
            full_name=str(data.get("full_name") or f"{namespace}-{name}-{version}"),
            download_url=str(data.get("download_url", "")),
            description=data.get("description") or "",
            icon=data.get("icon") or "",
            dependencies=[str(dep) for dep in data.get("dependencies") or []],
            downloads=int(data.get("downloads") or 0),
            date_created=data.get("date_created") or "",
            website_url=data.get("website_url") or "",
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class Listing:
    """Community metadata about a package (game, categories, review state)"""

    community: str = ""
    categories: List[str] = field(default_factory=list)
    has_nsfw_content: bool = False
    review_status: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Listing":
        return cls(
            community=data.get("community") or "",
            categories=list(data.get("categories") or []),
            has_nsfw_content=bool(data.get("has_nsfw_content", False)),
            review_status=data.get("review_status") or "",
        )


@dataclass
class Package:
    """Top level definition of a mod: its metadata and latest release"""

    namespace: str
    name: str
    latest: Release
    full_name: str = ""
    owner: str = ""
    package_url: str = ""
    date_created: str = ""
    date_updated: str = ""
    rating_score: int = 0
    is_pinned: bool = False
    is_deprecated: bool = False
    total_downloads: int = 0
    community_listings: List[Listing] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Package":
        if not isinstance(data, dict):
            raise ValueError("package document is not a JSON object")
        latest = data.get("latest")
        if not isinstance(latest, dict):
            raise ValueError("package document has no latest release")
        return cls(
            namespace=str(data.get("namespace", "")),
            name=str(data.get("name", "")),
            latest=Release.from_dict(latest),
            full_name=data.get("full_name") or "",
            owner=data.get("owner") or "",
            package_url=data.get("package_url") or "",
            date_created=data.get("date_created") or "",
            date_updated=data.get("date_updated") or "",
            rating_score=int(data.get("rating_score") or 0),
            is_pinned=bool(data.get("is_pinned", False)),
            is_deprecated=bool(data.get("is_deprecated", False)),
            total_downloads=int(data.get("total_downloads") or 0),
            community_listings=[
                Listing.from_dict(listing) for listing in data.get("community_listings") or []
            ],
        )


class PackageRegistry(ABC):
    """Read-only view of a remote package registry"""

    @abstractmethod
    def get_package(self, namespace: str, name: str) -> Package:
        raise NotImplementedError


class ThunderstoreAPI(PackageRegistry):
    """Handles requests to the Thunderstore API for Valheim mods"""

    BASE_URL = "https://thunderstore.io/api/experimental"
    USER_AGENT = "HearthMods/1.0.0 (Valheim dedicated server mod manager)"

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 10):
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": self.USER_AGENT,
            "Accept": "application/json"
        })
        self.timeout = timeout

    def get_package(self, namespace: str, name: str) -> Package:
        """
        Fetches a package and its latest release

        Args:
            namespace: Package namespace (the author)
            name: Package name

        Returns:
            The package document

        Raises:
            PackageNotFoundError: The registry has no such package
            ThunderstoreAPIError: The registry answered with any other error status
            HTTPClientError: The request could not be sent
            ByteIOError: The response body could not be read
            JSONParseError: The response body is not a valid package document
        """
        url = f"{self.BASE_URL}/package/{namespace}/{name}/"

        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
        except requests.RequestException as exc:
            raise HTTPClientError(f"request to {url} failed: {exc}") from exc

        try:
            data = response.content
        except requests.RequestException as exc:
            raise ByteIOError(f"unable to read response from {url}") from exc
        finally:
            response.close()

        # The API doesn't return a useful error body, so only the status is used
        if response.status_code == 404:
            raise PackageNotFoundError(f"package {namespace}-{name} was not found")
        if not 200 <= response.status_code < 300:
            raise ThunderstoreAPIError(
                f"Thunderstore returned status {response.status_code} for {namespace}-{name}"
            )

        try:
            return Package.from_dict(json.loads(data))
        except (ValueError, TypeError) as exc:
            raise JSONParseError(f"unable to parse package document for {namespace}-{name}") from exc
