"""
Reconciliation run: converge a working directory to a Solder build.

This service handles:
- Locating the modpack's Solder and resolving the build selector
- Short-circuiting when the ledger already records the build
- Deleting files of obsolete and superseded entries
- Installing changed entries concurrently
- Committing the new ledger once, only if every install succeeded
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from solder_sync.core.config import SyncSettings
from solder_sync.domain.models import Entry, InstallOutcome, Ledger, Manifest, ReconciliationPlan
from solder_sync.domain.planner import index_entries, plan_reconciliation
from solder_sync.services.barrier import CompletionBarrier
from solder_sync.services.installer import EntryInstaller
from solder_sync.services.platform_artifact import copy_platform_artifact
from solder_sync.services.solder_client import SolderClient
from solder_sync.services.tracked_files import remove_tracked_files
from solder_sync.services.transport import HttpTransport
from solder_sync.storage.json_state_store import JsonStateStore
from solder_sync.storage.state_store import StateStore

logger = logging.getLogger(__name__)


class SyncReport(BaseModel):
    """Summary of a finished run."""

    package_id: str
    build_id: str
    up_to_date: bool = False
    plan: ReconciliationPlan = Field(default_factory=ReconciliationPlan)
    installed: List[str] = Field(default_factory=list)
    artifact_copied: bool = False


class Reconciler:
    """
    Runs one reconciliation of ``root`` against a Solder build.

    All ledger and barrier mutation happens in the coroutine driving
    ``reconcile``; install tasks only return outcomes.
    """

    def __init__(
        self,
        store: StateStore,
        client: SolderClient,
        installer: EntryInstaller,
        root: Path,
        artifact_source: Optional[str] = None,
        artifact_dest: Optional[str] = None,
    ):
        self.store = store
        self.client = client
        self.installer = installer
        self.root = root
        self.artifact_source = artifact_source
        self.artifact_dest = artifact_dest

    def _copy_artifact(self, package_id: str, target_platform_version: Optional[str]) -> bool:
        return copy_platform_artifact(
            package_id, target_platform_version, self.artifact_source, self.artifact_dest
        ) is not None

    async def sync(self, package_id: str, selector: str) -> SyncReport:
        ledger = self.store.load()
        base_url, build_id = await self.client.locate(package_id, selector)

        if ledger.is_build(package_id, build_id):
            logger.info(f"Modpack [{package_id}] is already up to date")
            copied = self._copy_artifact(package_id, ledger.target_platform_version)
            return SyncReport(package_id=package_id, build_id=build_id, up_to_date=True, artifact_copied=copied)

        if ledger.package_id != package_id:
            logger.info(
                f"Swapping from [{ledger.package_id} / {ledger.build_id}] to [{package_id} / {build_id}]"
            )
        else:
            logger.info(f"Updating [{package_id}] from build [{ledger.build_id}] to [{build_id}]")

        manifest = await self.client.fetch_build_manifest(base_url, package_id, build_id)
        return await self.reconcile(ledger, manifest)

    async def reconcile(self, ledger: Ledger, manifest: Manifest) -> SyncReport:
        """
        Converge the working directory from ``ledger`` to ``manifest``.

        Raises ``DuplicateEntryError`` before touching the filesystem and
        ``AggregateFailure`` after every install has finished if any of
        them failed; in that case nothing is committed.
        """
        plan = plan_reconciliation(ledger, manifest)
        desired = index_entries(manifest)
        tracked: Dict[str, List[str]] = {name: list(paths) for name, paths in ledger.tracked_files.items()}
        report = SyncReport(package_id=manifest.package_id, build_id=manifest.build_id, plan=plan)

        for name in plan.obsolete:
            logger.info(f"Removing obsolete mod [{name}]")
            remove_tracked_files(self.root, tracked.pop(name, []))

        def commit() -> None:
            self.store.commit(Ledger(
                package_id=manifest.package_id,
                build_id=manifest.build_id,
                target_platform_version=manifest.target_platform_version,
                entries=dict(desired),
                tracked_files={name: tracked.get(name, []) for name in desired},
            ))

        barrier = CompletionBarrier(len(desired), commit)
        unchanged = set(plan.unchanged)
        tasks: Dict[asyncio.Task, Entry] = {}

        for name, entry in desired.items():
            if name in unchanged:
                barrier.arrive(name)
                continue

            previous = ledger.entries.get(name)
            logger.info(
                f"Updating mod [{name}] from version [{previous.version if previous else 'N/A'}] "
                f"to [{entry.version}]"
            )
            remove_tracked_files(self.root, tracked.pop(name, []))
            tasks[asyncio.ensure_future(self.installer.install(entry))] = entry

        barrier.seal()

        try:
            for next_done in asyncio.as_completed(tasks):
                outcome: InstallOutcome = await next_done
                name = outcome.entry.name
                if outcome.ok:
                    tracked[name] = outcome.installed_paths
                    report.installed.append(name)
                else:
                    logger.error(f"Failed to install mod [{name}]: {outcome.error}")
                barrier.arrive(name, outcome.ok)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        report.artifact_copied = self._copy_artifact(manifest.package_id, manifest.target_platform_version)
        return report


async def sync_modpack(
    package_id: str,
    selector: str,
    settings: SyncSettings,
    store: Optional[StateStore] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SyncReport:
    """
    Run a full reconciliation using ``settings``.

    ``http_transport`` replaces the network layer of the shared HTTP client
    (tests pass an ``httpx.MockTransport``).
    """
    store = store or JsonStateStore(settings.state_path)

    async with HttpTransport(
        max_connections=settings.max_connections,
        timeout=settings.http_timeout,
        transport=http_transport,
    ) as transport:
        reconciler = Reconciler(
            store=store,
            client=SolderClient(transport, settings.solder_url, settings.platform_api),
            installer=EntryInstaller(transport, settings.work_dir, settings.checksum_retries),
            root=settings.work_dir,
            artifact_source=settings.artifact_source,
            artifact_dest=settings.artifact_dest,
        )
        return await reconciler.sync(package_id, selector)
