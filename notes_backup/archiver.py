"""
Archive Creation
================

Zip archiver used by the job runner. The contents of a source folder are
written into the archive with paths relative to that folder, so extracting
the archive restores the folder's contents rather than the folder itself.
"""

import logging
import os
import zipfile
from enum import Enum
from pathlib import Path
from typing import Iterator, Tuple, Union

logger = logging.getLogger(__name__)


class CompressionLevel(Enum):
    """Compression levels understood by the archiver."""
    OPTIMAL = "optimal"
    FASTEST = "fastest"
    NO_COMPRESSION = "no_compression"


# (zip compression method, compresslevel)
_ZIP_SETTINGS = {
    CompressionLevel.OPTIMAL: (zipfile.ZIP_DEFLATED, 9),
    CompressionLevel.FASTEST: (zipfile.ZIP_DEFLATED, 1),
    CompressionLevel.NO_COMPRESSION: (zipfile.ZIP_STORED, None),
}


def _raise_walk_error(error: OSError) -> None:
    # An unlistable directory must fail the archive, not shrink it
    raise error


class Archiver:
    """Base class for archivers."""

    def compress(self, source_dir: Union[str, Path], dest_archive: Union[str, Path],
                 level: CompressionLevel = CompressionLevel.OPTIMAL) -> None:
        """Compress the contents of source_dir into dest_archive. Raises on failure."""
        raise NotImplementedError


class ZipArchiver(Archiver):
    """Writes zip archives with the standard library zipfile module."""

    def compress(self, source_dir: Union[str, Path], dest_archive: Union[str, Path],
                 level: CompressionLevel = CompressionLevel.OPTIMAL) -> None:
        source_dir = Path(source_dir)
        dest_archive = Path(dest_archive)
        method, compresslevel = _ZIP_SETTINGS[level]

        file_count = 0
        with zipfile.ZipFile(dest_archive, "w", compression=method, compresslevel=compresslevel) as archive:
            for path, arcname in self._iter_entries(source_dir, dest_archive):
                if path.is_dir():
                    # Empty directories get an explicit entry
                    archive.writestr(zipfile.ZipInfo(arcname + "/"), "")
                else:
                    archive.write(path, arcname=arcname)
                    file_count += 1

        logger.debug(f"Archived {file_count} file(s) from {source_dir} into {dest_archive}")

    @staticmethod
    def _iter_entries(source_dir: Path, dest_archive: Path) -> Iterator[Tuple[Path, str]]:
        dest_resolved = dest_archive.resolve()
        for root, dirs, files in os.walk(source_dir, onerror=_raise_walk_error):
            dirs.sort()
            root_path = Path(root)
            if root_path != source_dir and not dirs and not files:
                yield root_path, root_path.relative_to(source_dir).as_posix()
            for name in sorted(files):
                path = root_path / name
                # Never add the archive being written to itself
                if path.resolve() == dest_resolved:
                    continue
                yield path, path.relative_to(source_dir).as_posix()
