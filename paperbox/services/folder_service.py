"""
Virtuelle Ordner und Sammel-Download
"""
import io
import zipfile
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable, Iterable, List, Optional

from ..models import Category, FileItem
from ..monitoring import get_logger

UNSORTED_FOLDER = 'Unsorted'

logger = get_logger('folder_service')


@dataclass(frozen=True)
class Folder:
    name: str
    count: int


@dataclass
class BulkDownloadResult:
    """Ergebnis eines Sammel-Downloads; archive ist None wenn nichts geladen wurde"""
    archive: Optional[bytes]
    added: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.added)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


def derive_folders(files: Iterable[FileItem], categories: Iterable[Category]) -> List[Folder]:
    """
    Zählt Dateien pro Kategorie plus 'Unsorted'

    Eine Datei mit mehreren Tags zählt in mehreren Ordnern. Tags ohne
    Kategorie erzeugen keinen Ordner.
    """
    counts = {category.name: 0 for category in categories}
    counts.setdefault(UNSORTED_FOLDER, 0)

    for item in files:
        if not item.tags:
            counts[UNSORTED_FOLDER] += 1
            continue
        for tag in item.tags:
            if tag in counts and tag != UNSORTED_FOLDER:
                counts[tag] += 1

    folders = [Folder(name, count) for name, count in counts.items()]
    # Ordner mit Dateien zuerst, dann alphabetisch
    folders.sort(key=lambda folder: (folder.count == 0, folder.name.casefold(), folder.name))
    return folders


def files_in_folder(files: Iterable[FileItem], folder_name: str) -> List[FileItem]:
    if folder_name == UNSORTED_FOLDER:
        return [item for item in files if not item.tags]
    return [item for item in files if folder_name in item.tags]


def unique_archive_name(name: str, used: set) -> str:
    """Hängt bei Namenskollisionen ' (n)' vor der Endung an"""
    candidate = name or 'document.pdf'
    if candidate not in used:
        return candidate

    path = PurePosixPath(candidate)
    stem, suffix = path.stem, path.suffix
    counter = 1
    while f"{stem} ({counter}){suffix}" in used:
        counter += 1
    return f"{stem} ({counter}){suffix}"


def build_archive(files: Iterable[FileItem], fetch: Callable[[str], bytes]) -> BulkDownloadResult:
    """
    Packt die Binärdaten aller Dateien in ein ZIP im Speicher

    Args:
        files: Dateien, deren file_url geladen wird
        fetch: Lädt die Binärdaten zu einer URL, wirft bei Fehlern

    Returns:
        BulkDownloadResult mit Archiv und den Listen geladener und fehlgeschlagener Dateien
    """
    buffer = io.BytesIO()
    used_names = set()
    result = BulkDownloadResult(archive=None)

    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
        for item in files:
            if not item.file_url:
                logger.warning("Skipping file without URL", file_id=item.id)
                result.failed.append(item.id)
                continue

            try:
                content = fetch(item.file_url)
            except Exception as e:
                logger.warning("Skipping file that could not be fetched",
                               file_id=item.id,
                               file_url=item.file_url,
                               exception=e)
                result.failed.append(item.id)
                continue

            archive_name = unique_archive_name(item.name, used_names)
            used_names.add(archive_name)
            archive.writestr(archive_name, content)
            result.added.append(archive_name)

    if result.added:
        result.archive = buffer.getvalue()

    logger.info("Bulk archive built",
                succeeded=result.succeeded_count,
                failed=result.failed_count)
    return result
