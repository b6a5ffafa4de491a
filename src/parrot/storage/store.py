"""File-based snapshot storage: a TOML metadata index plus one file per blob."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

from parrot.errors import StoreError
from parrot.storage.models import Blob, Snapshot

logger = logging.getLogger(__name__)

INDEX_FILE = "snapshots.toml"
DATA_DIR = "data"


class SnapshotStore:
    """Snapshot metadata and content rooted at a data directory.

    ``snapshots`` is the in-memory collection shared with every view; it is
    filled by :meth:`load_all` and grown by :meth:`add`.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self.snapshots: list[Snapshot] = []
        # Blob files left behind by a rename, removed once the index moves on.
        self._stale: list[Path] = []

    @property
    def index_file(self) -> Path:
        return self.path / INDEX_FILE

    @property
    def data_dir(self) -> Path:
        return self.path / DATA_DIR

    @property
    def is_initialized(self) -> bool:
        return self.index_file.is_file()

    def initialize(self) -> None:
        """Create an empty store on disk."""
        if self.is_initialized:
            raise StoreError(f"Parrot is already initialized in {self.path}.")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Unable to create {self.data_dir}: {e}") from e
        self.snapshots = []
        self.persist_metadata()
        logger.info("Store initialized: %s", self.path)

    def load_all(self) -> list[Snapshot]:
        """Read every snapshot from disk into the shared collection."""
        if not self.is_initialized:
            raise StoreError(f"No parrot data found in {self.path}. Run 'parrot init' first.")
        try:
            with open(self.index_file, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise StoreError(f"Malformed index {self.index_file}: {e}") from e
        except OSError as e:
            raise StoreError(f"Unable to read {self.index_file}: {e}") from e

        loaded = [self._from_record(record) for record in data.get("snapshots", [])]
        # Replace in place so views built on this list see the reload.
        self.snapshots[:] = loaded
        logger.info("Loaded %d snapshots from %s", len(loaded), self.path)
        return self.snapshots

    def get(self, name: str) -> Snapshot | None:
        for snapshot in self.snapshots:
            if snapshot.name == name:
                return snapshot
        return None

    def add(self, snapshot: Snapshot) -> None:
        """Add a new snapshot and write it to disk."""
        self._check_name(snapshot.name)
        self.persist_snapshot_content(snapshot)
        self.snapshots.append(snapshot)
        self.persist_metadata()

    def rename(self, snapshot: Snapshot, name: str) -> None:
        """Rename a snapshot and move its blobs to files under the new name.

        The old blob files are removed by the next :meth:`persist_metadata`,
        so the index on disk never points at a missing file.
        """
        if name == snapshot.name:
            return
        self._check_name(name)
        old_name = snapshot.name
        blobs = [blob for blob in (snapshot.stdout, snapshot.stderr) if blob is not None]
        stale = [self.data_dir / blob.file_name for blob in blobs]
        for blob in blobs:
            blob.name = name
        snapshot.name = name
        try:
            self.persist_snapshot_content(snapshot)
        except StoreError:
            for blob in blobs:
                blob.name = old_name
            snapshot.name = old_name
            raise
        self._stale.extend(stale)
        logger.info("Renamed %s to %s", old_name, name)

    def persist_snapshot_content(self, snapshot: Snapshot) -> None:
        """Write the stdout/stderr blobs of a snapshot."""
        for blob in (snapshot.stdout, snapshot.stderr):
            if blob is None:
                continue
            target = self.data_dir / blob.file_name
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                target.write_bytes(blob.body)
            except OSError as e:
                raise StoreError(f"Unable to write {target}: {e}") from e
            logger.info("Wrote %s (%d bytes)", target, len(blob.body))

    def persist_metadata(self) -> None:
        """Rewrite the metadata index from the in-memory collection."""
        data = {"snapshots": [self._to_record(snapshot) for snapshot in self.snapshots]}
        try:
            self.path.mkdir(parents=True, exist_ok=True)
            with open(self.index_file, "wb") as f:
                tomli_w.dump(data, f)
        except OSError as e:
            raise StoreError(f"Unable to write {self.index_file}: {e}") from e
        logger.info("Wrote metadata for %d snapshots", len(self.snapshots))
        self._remove_stale()

    def _remove_stale(self) -> None:
        live = {
            blob.file_name
            for snapshot in self.snapshots
            for blob in (snapshot.stdout, snapshot.stderr)
            if blob is not None
        }
        for path in self._stale:
            if path.name in live:
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StoreError(f"Unable to remove {path}: {e}") from e
            logger.info("Removed %s", path)
        self._stale = []

    def _check_name(self, name: str) -> None:
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise StoreError(f"Invalid snapshot name '{name}'.")
        if self.get(name) is not None:
            raise StoreError(f"A snapshot named '{name}' already exists.")

    def _to_record(self, snapshot: Snapshot) -> dict[str, Any]:
        # TOML has no null: absent values are left out of the record.
        record: dict[str, Any] = {
            "name": snapshot.name,
            "cmd": snapshot.cmd,
            "tags": sorted(snapshot.tags),
        }
        if snapshot.description is not None:
            record["description"] = snapshot.description
        if snapshot.exit_code is not None:
            record["exit_code"] = snapshot.exit_code
        if snapshot.stdout is not None:
            record["stdout"] = snapshot.stdout.file_name
        if snapshot.stderr is not None:
            record["stderr"] = snapshot.stderr.file_name
        return record

    def _from_record(self, record: dict[str, Any]) -> Snapshot:
        try:
            name = record["name"]
            cmd = record["cmd"]
        except KeyError as e:
            raise StoreError(f"Snapshot entry in {self.index_file} is missing {e}.") from e
        return Snapshot(
            name=name,
            cmd=cmd,
            description=record.get("description"),
            tags=set(record.get("tags", [])),
            exit_code=record.get("exit_code"),
            stdout=self._read_blob(record.get("stdout"), ".out"),
            stderr=self._read_blob(record.get("stderr"), ".err"),
        )

    def _read_blob(self, file_name: str | None, extension: str) -> Blob | None:
        if file_name is None:
            return None
        source = self.data_dir / file_name
        try:
            body = source.read_bytes()
        except OSError as e:
            raise StoreError(f"Unable to read {source}: {e}") from e
        name = file_name[: -len(extension)] if file_name.endswith(extension) else file_name
        return Blob(name=name, extension=extension, body=body)
