"""
Deployment ledger: artifact name -> last deployed record, backed by one JSON
file that is read whole and rewritten whole.

There is no cross-process locking. Two gblend processes deploying against
the same ledger file race, and the last writer wins.
"""
import json
import logging
import os
import tempfile
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..contracts.records import DeploymentRecord
from ..errors import DeploymentError, DeploymentErrorKind

logger = logging.getLogger(__name__)


class DeploymentLedger:
    def __init__(self, path: str):
        self.path = path
        self._records: Dict[str, DeploymentRecord] = {}
        self._loaded = False

    @classmethod
    def for_network(cls, ledger_dir: str, network: str) -> "DeploymentLedger":
        return cls(os.path.join(ledger_dir, f"{network}.json"))

    def load(self) -> "DeploymentLedger":
        """Read the ledger file fully into memory. A missing file is an empty ledger."""
        self._records = {}
        self._loaded = True
        if not os.path.exists(self.path):
            logger.debug("Ledger %s does not exist yet", self.path)
            return self

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DeploymentError(
                DeploymentErrorKind.LEDGER_READ_FAILURE,
                f"Failed to read ledger {self.path}: {e}",
            ) from e

        if not isinstance(raw, dict):
            raise DeploymentError(
                DeploymentErrorKind.LEDGER_READ_FAILURE,
                f"Ledger {self.path} must contain a JSON object",
            )

        try:
            for name, value in raw.items():
                self._records[name] = DeploymentRecord.from_store(name, value)
        except (TypeError, ValidationError) as e:
            raise DeploymentError(
                DeploymentErrorKind.LEDGER_READ_FAILURE,
                f"Malformed record in ledger {self.path}: {e}",
            ) from e

        logger.debug("Loaded %d record(s) from %s", len(self._records), self.path)
        return self

    def _ensure_loaded(self):
        if not self._loaded:
            self.load()

    def lookup(self, artifact_name: str) -> Optional[DeploymentRecord]:
        self._ensure_loaded()
        return self._records.get(artifact_name)

    def records(self) -> List[DeploymentRecord]:
        self._ensure_loaded()
        return [self._records[name] for name in sorted(self._records)]

    def upsert(self, record: DeploymentRecord):
        """Replace the record for ``record.artifact_name`` and persist the whole ledger."""
        self._ensure_loaded()
        updated = dict(self._records)
        updated[record.artifact_name] = record
        self._write(updated)
        self._records = updated

    def _write(self, records: Dict[str, DeploymentRecord]):
        payload = {name: rec.to_store() for name, rec in sorted(records.items())}
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".ledger-", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            # Readers see either the old file or the new one, never a partial write
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise DeploymentError(
                DeploymentErrorKind.LEDGER_WRITE_FAILURE,
                f"Failed to write ledger {self.path}: {e}",
            ) from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.debug("Wrote %d record(s) to %s", len(payload), self.path)

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._records)

    def __contains__(self, artifact_name: str) -> bool:
        return self.lookup(artifact_name) is not None
