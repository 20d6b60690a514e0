"""
Client for the Technic platform API and Solder manifest servers.

The platform API maps a modpack slug to the Solder instance that publishes
it. A Solder instance lists the builds of a modpack and, per build, the mod
archives that make up the server side of the pack.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from solder_sync.domain.errors import ManifestError, ResolutionError
from solder_sync.domain.models import Entry, Manifest
from solder_sync.services.transport import HttpTransport

logger = logging.getLogger(__name__)

TECHNIC_SOLDER_URL = "https://solder.technicpack.net/api/"
TECHNIC_PLATFORM_API = "https://www.technicpack.net/api/"

SYMBOLIC_BUILDS = ("latest", "recommended")


def _with_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"


def parse_entries(mods: Optional[List[Dict[str, Any]]]) -> List[Entry]:
    """Convert Solder ``mods`` records into entries, keeping their order."""
    entries: List[Entry] = []
    for mod in mods or []:
        entries.append(Entry(
            name=str(mod.get("name", "")),
            version=str(mod.get("version", "")),
            url=str(mod.get("url", "")),
            checksum=str(mod.get("md5", "")),
        ))
    return entries


class SolderClient:
    """Resolves manifest locations and fetches build manifests."""

    def __init__(
        self,
        transport: HttpTransport,
        solder_url: str = TECHNIC_SOLDER_URL,
        platform_api: str = TECHNIC_PLATFORM_API,
    ):
        self.transport = transport
        self.solder_url = _with_trailing_slash(solder_url)
        self.platform_api = _with_trailing_slash(platform_api)

    async def resolve_manifest_location(self, package_id: str) -> str:
        """Ask the platform API which Solder instance publishes ``package_id``."""
        data = await self.transport.fetch_json(f"{self.platform_api}modpack/{package_id}")
        solder_url = data.get("solder") if isinstance(data, dict) else None
        if not solder_url:
            raise ResolutionError(package_id)
        return _with_trailing_slash(str(solder_url))

    async def resolve_build(self, base_url: str, package_id: str, selector: str) -> str:
        """
        Turn a build selector into a concrete build id.

        ``latest`` and ``recommended`` are looked up on the modpack record;
        any other value is taken as a literal build id.
        """
        base_url = _with_trailing_slash(base_url)
        data = await self.transport.fetch_json(f"{base_url}modpack/{package_id}")
        self._raise_for_error(data, package_id, base_url)

        if selector not in SYMBOLIC_BUILDS:
            return selector

        build_id = data.get(selector)
        if not build_id:
            raise ManifestError(package_id, base_url, f"Modpack has no {selector} build")
        return str(build_id)

    async def fetch_build_manifest(self, base_url: str, package_id: str, build_id: str) -> Manifest:
        base_url = _with_trailing_slash(base_url)
        data = await self.transport.fetch_json(
            f"{base_url}modpack/{package_id}/{build_id}",
            params={"side": "server"},
        )
        self._raise_for_error(data, package_id, base_url)

        minecraft = data.get("minecraft")
        return Manifest(
            package_id=package_id,
            build_id=build_id,
            target_platform_version=str(minecraft) if minecraft is not None else None,
            entries=parse_entries(data.get("mods")),
        )

    async def fetch_manifest(self, base_url: str, package_id: str, selector: str) -> Manifest:
        build_id = await self.resolve_build(base_url, package_id, selector)
        return await self.fetch_build_manifest(base_url, package_id, build_id)

    async def locate(self, package_id: str, selector: str) -> Tuple[str, str]:
        """
        Find the Solder instance for a modpack and resolve its build.

        The public Technic Solder is tried first; packs it does not know are
        looked up through the platform API. Returns ``(base_url, build_id)``.
        """
        try:
            return self.solder_url, await self.resolve_build(self.solder_url, package_id, selector)
        except ManifestError as e:
            logger.debug(f"Public solder does not serve [{package_id}]: {e.message}")

        base_url = await self.resolve_manifest_location(package_id)
        logger.info(f"Using solder [{base_url}] for modpack [{package_id}]")
        return base_url, await self.resolve_build(base_url, package_id, selector)

    @staticmethod
    def _raise_for_error(data: Any, package_id: str, base_url: str) -> None:
        if not isinstance(data, dict):
            raise ManifestError(package_id, base_url, "Unexpected response from solder")
        if data.get("error"):
            raise ManifestError(package_id, base_url, str(data["error"]))
