from __future__ import annotations

import itertools

import pytest

from solder_sync.domain.errors import DuplicateEntryError
from solder_sync.domain.models import Entry, Ledger, Manifest
from solder_sync.domain.planner import index_entries, plan_reconciliation


def _entry(name: str, version: str = "1") -> Entry:
    return Entry(name=name, version=version, url=f"https://m/{name}-{version}.zip", checksum="0" * 32)


def _manifest(*entries: Entry) -> Manifest:
    return Manifest(package_id="pack", build_id="2", entries=list(entries))


def _ledger(*entries: Entry) -> Ledger:
    return Ledger(package_id="pack", build_id="1", entries={e.name: e for e in entries})


def test_update_and_new_entries_are_installed():
    ledger = _ledger(_entry("A", "v1"))
    manifest = _manifest(_entry("A", "v2"), _entry("B", "v1"))

    plan = plan_reconciliation(ledger, manifest)

    assert plan.to_install == ["A", "B"]
    assert plan.unchanged == []
    assert plan.obsolete == []


def test_missing_entry_is_obsolete():
    plan = plan_reconciliation(_ledger(_entry("C")), _manifest())

    assert plan.obsolete == ["C"]
    assert plan.to_install == plan.unchanged == []


def test_same_version_is_unchanged_even_if_url_differs():
    old = _entry("A", "v1")
    new = Entry(name="A", version="v1", url="https://elsewhere/A.zip", checksum="f" * 32)

    plan = plan_reconciliation(_ledger(old), _manifest(new))

    assert plan.unchanged == ["A"]


def test_duplicate_names_are_rejected():
    with pytest.raises(DuplicateEntryError) as excinfo:
        plan_reconciliation(Ledger(), _manifest(_entry("A", "1"), _entry("B"), _entry("A", "2")))

    assert excinfo.value.name == "A"


def test_partition_covers_union_without_overlap():
    names = ["A", "B", "C", "D", "E"]
    # Every combination of (in ledger, in manifest, same version) per name.
    states = [("ledger",), ("manifest",), ("both", "same"), ("both", "diff")]
    for combo in itertools.product(states, repeat=len(names)):
        ledger_entries, manifest_entries = [], []
        for name, state in zip(names, combo):
            if state[0] in ("ledger", "both"):
                ledger_entries.append(_entry(name, "1"))
            if state[0] == "manifest":
                manifest_entries.append(_entry(name, "1"))
            if state[0] == "both":
                manifest_entries.append(_entry(name, "1" if state[1] == "same" else "2"))

        plan = plan_reconciliation(_ledger(*ledger_entries), _manifest(*manifest_entries))

        sets = [set(plan.unchanged), set(plan.to_install), set(plan.obsolete)]
        union = {e.name for e in ledger_entries} | {e.name for e in manifest_entries}
        assert set().union(*sets) == union
        assert sum(len(s) for s in sets) == len(union)


def test_index_entries_keeps_manifest_order():
    manifest = _manifest(_entry("Z"), _entry("A"), _entry("M"))

    assert list(index_entries(manifest)) == ["Z", "A", "M"]
