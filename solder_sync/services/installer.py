"""
Install a single manifest entry: download, verify, extract.
"""
from __future__ import annotations

import logging
from pathlib import Path

from solder_sync.domain.errors import ArchiveError, ChecksumExhaustedError, TransportError
from solder_sync.domain.models import Entry, InstallOutcome
from solder_sync.services.archive import extract_archive
from solder_sync.services.checksum import DEFAULT_ALGORITHM, ChecksumVerifier
from solder_sync.services.transport import HttpTransport

logger = logging.getLogger(__name__)

DEFAULT_CHECKSUM_RETRIES = 3


class EntryInstaller:
    """
    Fetch-verify-extract worker shared by all entries of one run.

    ``install`` never raises for a failing entry; the failure is returned
    in the outcome so sibling installs keep running.
    """

    def __init__(
        self,
        transport: HttpTransport,
        root: Path,
        checksum_retries: int = DEFAULT_CHECKSUM_RETRIES,
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        self.transport = transport
        self.root = root
        self.checksum_retries = checksum_retries
        self.algorithm = algorithm

    async def _download_verified(self, entry: Entry) -> bytes:
        attempts = self.checksum_retries + 1
        actual = ""
        for attempt in range(1, attempts + 1):
            verifier = ChecksumVerifier(self.algorithm)
            chunks = []
            async for chunk in self.transport.iter_bytes(entry.url):
                verifier.update(chunk)
                chunks.append(chunk)

            if verifier.matches(entry.checksum):
                return b"".join(chunks)

            actual = verifier.hexdigest()
            if attempt < attempts:
                logger.warning(
                    f"Checksum mismatch for mod [{entry.name}] (attempt {attempt}/{attempts}): "
                    f"expected {entry.checksum}, got {actual}. Retrying..."
                )

        raise ChecksumExhaustedError(entry.url, attempts, entry.checksum, actual)

    async def install(self, entry: Entry) -> InstallOutcome:
        try:
            data = await self._download_verified(entry)
            paths = await extract_archive(data, self.root)
        except TransportError as e:
            logger.error(f"Internal error downloading mod [{entry.name}]: {e}")
            return InstallOutcome.failure(entry, e)
        except ChecksumExhaustedError as e:
            logger.error(f"ERROR on downloading mod [{entry.url}]: {e}")
            return InstallOutcome.failure(entry, e)
        except (ArchiveError, OSError) as e:
            logger.error(f"Failed to extract mod [{entry.name}]: {e}")
            return InstallOutcome.failure(entry, e)

        logger.debug(f"Installed mod [{entry.name}] ({len(paths)} paths)")
        return InstallOutcome.success(entry, paths)
