# pyright: standard

"""snap-orchestrator: snap_orchestrator/endpoint/archive.py
Minimal tar codec used to carry files in and out of containers.
"""

import shutil
import tarfile
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from ..__logger__ import logger


def create_tar(entries: Iterable[tuple[str, Path | str]], archive_path: Path | str) -> Path:
    """Write an uncompressed tar holding each (name, source_path) entry.

    An existing archive at archive_path is overwritten.
    """
    archive_path = Path(archive_path)
    with tarfile.open(archive_path, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for name, source in entries:
            logger.debug("Adding %s as %s to %s", source, name, archive_path)
            tar.add(str(source), arcname=name, recursive=False)
    return archive_path


def open_tar(path: Path | str) -> tarfile.TarFile:
    """Open an existing tar archive for reading (use as a context manager)."""
    return tarfile.open(Path(path), mode="r:*")


def _normalize(name: str) -> str:
    return name.removeprefix("./").rstrip("/").lower()


def find_entry(archive: tarfile.TarFile, *names: str) -> Optional[tarfile.TarInfo]:
    """Return the first member whose name case-insensitively equals one of names.

    Names are tried in the given order.
    """
    members = archive.getmembers()
    for name in names:
        wanted = _normalize(name)
        for member in members:
            if _normalize(member.name) == wanted:
                return member
    return None


def extract_entry(
    archive: tarfile.TarFile,
    member: tarfile.TarInfo,
    dest_dir: Path | str,
    overwrite: bool = True,
    name: Optional[str] = None,
) -> Path:
    """Extract a single regular-file member into dest_dir.

    Args:
        archive: Open archive holding member
        member: The entry to extract
        dest_dir: Directory to write into
        overwrite: Replace an existing file of the same name
        name: File name to write as (defaults to the member's base name)

    Returns:
        Path of the extracted file
    """
    if not member.isfile():
        raise ValueError(f"Archive entry '{member.name}' is not a regular file")

    dest = Path(dest_dir) / (name or Path(member.name).name)
    if dest.exists() and not overwrite:
        raise FileExistsError(f"Refusing to overwrite existing file: {dest}")

    source = archive.extractfile(member)
    if source is None:
        raise ValueError(f"Archive entry '{member.name}' has no content")

    dest.parent.mkdir(parents=True, exist_ok=True)
    with source, open(dest, "wb") as out:
        shutil.copyfileobj(source, out)
    logger.debug("Extracted %s to %s", member.name, dest)
    return dest
