from __future__ import annotations

import pytest

from solder_sync.domain.errors import ArchiveError
from solder_sync.services.archive import extract_archive, iter_archive, normalize_member_path
from tests.helpers import make_zip


@pytest.mark.asyncio
async def test_extract_writes_members_and_records_them_in_order(tmp_path):
    data = make_zip([
        ("mods/", None),
        ("mods/A.jar", b"jar-a"),
        ("config/a.cfg", b"cfg"),
    ])

    paths = await extract_archive(data, tmp_path)

    assert paths == ["mods", "mods/A.jar", "config/a.cfg"]
    assert (tmp_path / "mods" / "A.jar").read_bytes() == b"jar-a"
    # Parent created on demand but not recorded: the archive did not list it.
    assert (tmp_path / "config").is_dir()


@pytest.mark.asyncio
async def test_existing_directories_are_not_an_error(tmp_path):
    (tmp_path / "mods").mkdir()
    (tmp_path / "mods" / "other.jar").write_bytes(b"keep")

    paths = await extract_archive(make_zip([("mods/", None), ("mods/B.jar", b"b")]), tmp_path)

    assert paths == ["mods", "mods/B.jar"]
    assert (tmp_path / "mods" / "other.jar").read_bytes() == b"keep"


@pytest.mark.asyncio
async def test_duplicate_members_are_recorded_once(tmp_path):
    data = make_zip([("mods/", None), ("mods/", None), ("mods/A.jar", b"1")])

    assert await extract_archive(data, tmp_path) == ["mods", "mods/A.jar"]


@pytest.mark.asyncio
async def test_invalid_archive_raises(tmp_path):
    with pytest.raises(ArchiveError):
        await extract_archive(b"definitely not a zip", tmp_path)


@pytest.mark.asyncio
async def test_member_escaping_root_is_rejected(tmp_path):
    root = tmp_path / "server"
    root.mkdir()
    data = make_zip([("../evil.txt", b"x")])

    with pytest.raises(ArchiveError):
        await extract_archive(data, root)
    assert not (tmp_path / "evil.txt").exists()


@pytest.mark.parametrize("name", ["/etc/passwd", "..", "a/../../b", "C:/x", ""])
def test_normalize_rejects_unsafe_names(name):
    with pytest.raises(ArchiveError):
        normalize_member_path(name)


def test_normalize_strips_directory_slash_and_backslashes():
    assert normalize_member_path("mods/") == "mods"
    assert normalize_member_path("mods\\A.jar") == "mods/A.jar"
    assert normalize_member_path("./mods/./A.jar") == "mods/A.jar"


def test_iter_archive_flags_directories():
    items = list(iter_archive(make_zip([("d/", None), ("d/f", b"1")])))

    assert [(i.path, i.is_dir) for i in items] == [("d", True), ("d/f", False)]
    assert items[1].data == b"1"


def test_colon_in_posix_member_name_is_allowed():
    assert normalize_member_path("config/a:b.cfg") == "config/a:b.cfg"
    assert normalize_member_path("a:b.cfg") == "a:b.cfg"


@pytest.mark.asyncio
async def test_root_directory_member_is_skipped(tmp_path):
    data = make_zip([("./", None), ("mods/A.jar", b"a")])

    assert await extract_archive(data, tmp_path) == ["mods/A.jar"]
