"""
Diff the installed ledger against a desired manifest.
"""
from __future__ import annotations

from typing import Dict

from solder_sync.domain.errors import DuplicateEntryError
from solder_sync.domain.models import Entry, Ledger, Manifest, ReconciliationPlan


def index_entries(manifest: Manifest) -> Dict[str, Entry]:
    """Map entry names to entries, rejecting repeated names."""
    indexed: Dict[str, Entry] = {}
    for entry in manifest.entries:
        if entry.name in indexed:
            raise DuplicateEntryError(entry.name)
        indexed[entry.name] = entry
    return indexed


def plan_reconciliation(ledger: Ledger, manifest: Manifest) -> ReconciliationPlan:
    """
    Partition entry names into unchanged, to-install and obsolete sets.

    An entry is unchanged only when the ledger holds the same version;
    a missing or different version means it has to be (re)installed.
    """
    desired = index_entries(manifest)
    plan = ReconciliationPlan()

    for name, entry in desired.items():
        installed = ledger.entries.get(name)
        if installed is not None and installed.version == entry.version:
            plan.unchanged.append(name)
        else:
            plan.to_install.append(name)

    plan.obsolete = [name for name in ledger.entries if name not in desired]
    return plan
