"""Test helpers: in-memory zip archives and a fake Solder server."""

from __future__ import annotations

import hashlib
import io
import json
import zipfile
from collections import Counter
from typing import Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit

import httpx

from solder_sync.domain.models import Entry

SOLDER = "https://solder.example.org/api/"
PLATFORM = "https://platform.example.org/api/"
MODS = "https://mods.example.org/"


def make_zip(members: List[Tuple[str, Optional[bytes]]]) -> bytes:
    """Build a zip archive; ``None`` content marks a directory member."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as z:
        for name, content in members:
            if content is None:
                z.writestr(zipfile.ZipInfo(name.rstrip("/") + "/"), b"")
            else:
                z.writestr(name, content)
    return buffer.getvalue()


def md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def make_entry(name: str, version: str, archive: bytes, checksum: Optional[str] = None) -> Entry:
    return Entry(
        name=name,
        version=version,
        url=f"{MODS}{name}-{version}.zip",
        checksum=checksum if checksum is not None else md5(archive),
    )


Body = Union[bytes, Callable[[int], httpx.Response], httpx.Response, dict]


class FakeSolder:
    """
    Routes requests to canned responses and counts hits per path.

    A route value may be a JSON-able dict, raw bytes, a prepared response,
    or a callable receiving the hit number (starting at 1).
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Body] = {}
        self.hits: Counter = Counter()
        self.requests: List[httpx.Request] = []

    def add(self, url: str, body: Body) -> None:
        self.routes[urlsplit(url).path] = body

    def add_modpack(self, slug: str, builds: Dict[str, dict], latest: str, recommended: str,
                    base: str = SOLDER) -> None:
        self.add(f"{base}modpack/{slug}", {
            "name": slug, "latest": latest, "recommended": recommended, "builds": list(builds),
        })
        for build_id, payload in builds.items():
            self.add(f"{base}modpack/{slug}/{build_id}", payload)

    def add_entry(self, entry: Entry, archive: bytes) -> None:
        self.add(entry.url, archive)

    def entry_hits(self, entry: Entry) -> int:
        return self.hits[urlsplit(entry.url).path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(request)
        self.hits[path] += 1
        body = self.routes.get(path)
        if body is None:
            return httpx.Response(404, text="not found")
        if callable(body):
            return body(self.hits[path])
        if isinstance(body, httpx.Response):
            return body
        if isinstance(body, dict):
            return httpx.Response(200, content=json.dumps(body).encode(),
                                  headers={"Content-Type": "application/json"})
        return httpx.Response(200, content=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def build_payload(minecraft: str, entries: List[Entry]) -> dict:
    return {
        "minecraft": minecraft,
        "mods": [
            {"name": e.name, "version": e.version, "url": e.url, "md5": e.checksum}
            for e in entries
        ],
    }
