"""
Sound File Catalog
==================
In-memory lookup service for sound files.

Why is this file needed?
------------------------
1. Resolution: Playlist tiles persist only sound file ids. When a project is
   loaded, those ids are resolved against this catalog.
2. Import: It scans folders for audio files and reports progress so the GUI
   can show a progress bar during long imports.

Classes:
    SoundFileRecord: One entry of the catalog.
    SoundFileCatalog: The lookup service itself.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
import logging
import os
from typing import Any, Callable, Dict, Iterator, List, Optional

from companion.config import SOUND_FILE_EXTENSIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SoundFileRecord:
    id: int
    name: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> SoundFileRecord:
        return SoundFileRecord(id=int(data["id"]), name=str(data["name"]), path=str(data["path"]))


class SoundFileCatalog:
    """Id -> SoundFileRecord mapping with monotonically increasing ids."""

    def __init__(self) -> None:
        self._records: Dict[int, SoundFileRecord] = {}
        self._next_id: int = 1

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, sound_file_id: object) -> bool:
        return sound_file_id in self._records

    def __iter__(self) -> Iterator[SoundFileRecord]:
        return iter(self.records())

    def get(self, sound_file_id: int) -> Optional[SoundFileRecord]:
        """Returns the record for the id, or None if it is not in the catalog."""
        return self._records.get(sound_file_id)

    def records(self) -> List[SoundFileRecord]:
        return [self._records[k] for k in sorted(self._records)]

    def add(self, name: str, path: str) -> SoundFileRecord:
        rec = SoundFileRecord(id=self._next_id, name=name, path=path)
        self._records[rec.id] = rec
        self._next_id += 1
        logger.debug(f"Catalog: added sound file {rec.id} '{name}'")
        return rec

    def remove(self, sound_file_id: int) -> bool:
        if self._records.pop(sound_file_id, None) is None:
            return False
        logger.debug(f"Catalog: removed sound file {sound_file_id}")
        return True

    def clear(self) -> None:
        self._records.clear()
        self._next_id = 1

    def import_folder(
        self,
        folder: str,
        progress: Optional[Callable[[int], None]] = None
    ) -> int:
        """
        Adds every audio file below `folder` to the catalog.

        Args:
            folder: Directory to scan recursively.
            progress: Optional callback receiving the completion percentage
                (0-100). It always receives 100 when the import finishes.

        Returns:
            Number of records added.
        """
        if not os.path.isdir(folder):
            raise NotADirectoryError(f"Not a folder: {folder}")

        found: List[str] = []
        for root, _dirs, files in os.walk(folder):
            for fname in sorted(files):
                if os.path.splitext(fname)[1].lower() in SOUND_FILE_EXTENSIONS:
                    found.append(os.path.join(root, fname))

        known_paths = {rec.path for rec in self._records.values()}
        added = 0
        total = len(found)
        for i, path in enumerate(found):
            if path not in known_paths:
                self.add(os.path.splitext(os.path.basename(path))[0], path)
                added += 1
            if progress and total:
                progress(int((i + 1) * 100 / total))

        if progress:
            progress(100)
        logger.info(f"Imported {added} sound files from '{folder}' ({total - added} already known).")
        return added

    # ---- SERIALIZATION ----

    def to_list(self) -> List[Dict[str, Any]]:
        return [rec.to_dict() for rec in self.records()]

    @staticmethod
    def from_list(data: List[Dict[str, Any]]) -> SoundFileCatalog:
        catalog = SoundFileCatalog()
        catalog.replace_records(SoundFileRecord.from_dict(d) for d in data)
        return catalog

    def replace_records(self, records) -> None:
        """Replaces the whole catalog, keeping the persisted ids."""
        self._records = {rec.id: rec for rec in records}
        self._next_id = max(self._records, default=0) + 1
