"""
Application State Controller

Hält Dateien, Kategorien, Sprache und Navigation im Speicher. Jede Mutation
läuft über eine Command-Methode, die den Zustand ändert, danach den
kompletten Snapshot speichert und die Listener benachrichtigt. Vor dem
ersten abgeschlossenen Laden wird nicht gespeichert, damit der Server-Zustand
nicht mit leeren Defaults überschrieben wird.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Callable, List, Optional, Sequence, Union, BinaryIO

from ..error_handlers import StorageError, safe_execute
from ..models import (
    Category, FileItem, Language, Screen, Snapshot, StateView,
    DEFAULT_FILE_COLOR, DEFAULT_FOLDER, format_size, generate_id
)
from ..monitoring import get_logger, get_error_reporter, log_performance
from ..preferences import PreferenceStore
from .filter_service import files_in_range
from .folder_service import BulkDownloadResult, build_archive, files_in_folder
from .storage_client import StorageClient

CATEGORY_COLOR_PALETTE = ['#38bdf8', '#f97316', '#a855f7', '#22c55e', '#f43f5e', '#eab308', '#14b8a6']

DEFAULT_CATEGORIES = [
    Category('Rechnung', '#38bdf8'),
    Category('Vertrag', '#f97316'),
    Category('Steuer', '#a855f7'),
    Category('Wichtig', '#f43f5e'),
    Category('Sonstiges', '#eab308'),
    Category('Privat', '#14b8a6'),
    Category('Arbeit', '#22c55e'),
]

DEFAULT_LANGUAGE = Language.DE

EDITABLE_FIELDS = {'name', 'date', 'tags', 'color', 'is_starred', 'is_read', 'is_signed'}


@dataclass
class ArchiveInput:
    """Eine hochzuladende Datei; size wird aus content berechnet wenn nicht gesetzt"""
    name: str
    content: Union[bytes, BinaryIO]
    size: Optional[str] = None

    def display_size(self) -> str:
        if self.size:
            return self.size
        if isinstance(self.content, (bytes, bytearray)):
            return format_size(len(self.content))
        return ''


@dataclass
class ArchiveResult:
    archived: List[FileItem] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ViewerDocument:
    """Inhalt für die Viewer-Ansicht; error gesetzt wenn der Platzhalter gezeigt wird"""
    file: Optional[FileItem]
    content: Optional[bytes]
    error: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


Listener = Callable[[StateView], None]


def _as_datetime(value: Union[date, datetime]) -> datetime:
    # Ein reines Datum gilt als Mitternacht
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


class AppStateController:
    """Einzige Quelle des Anwendungszustands"""

    def __init__(self, client: StorageClient, preferences: Optional[PreferenceStore] = None,
                 folder: str = DEFAULT_FOLDER):
        self.client = client
        self.preferences = preferences
        self.folder = folder
        self.logger = get_logger('state_controller')

        self._files: List[FileItem] = []
        self._categories: List[Category] = list(DEFAULT_CATEGORIES)
        self._language = (preferences.language if preferences else None) or DEFAULT_LANGUAGE
        self._screen = Screen.DASHBOARD
        self._selected_file_id: Optional[str] = None

        self._is_ready = False
        self._closed = False
        self._load_token = 0
        self._listeners: List[Listener] = []
        self.notices: List[Notice] = []

    # Read-only accessors

    @property
    def files(self):
        return tuple(item.copy() for item in self._files)

    @property
    def categories(self):
        return tuple(self._categories)

    @property
    def language(self) -> Language:
        return self._language

    @property
    def screen(self) -> Screen:
        return self._screen

    @property
    def is_ready(self) -> bool:
        return self._is_ready

    @property
    def selected_file(self) -> Optional[FileItem]:
        item = self._find(self._selected_file_id) if self._selected_file_id else None
        return item.copy() if item else None

    def snapshot(self) -> StateView:
        return StateView(
            files=self.files,
            categories=self.categories,
            language=self._language,
            screen=self._screen,
            selected_file_id=self._selected_file_id,
            is_ready=self._is_ready,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registriert einen Listener; gibt die Abmelde-Funktion zurück"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def pop_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # Loading

    def begin_load(self) -> int:
        """Startet einen Ladevorgang; nur das Ergebnis des neuesten Tokens wird übernommen"""
        self._load_token += 1
        return self._load_token

    def load(self) -> bool:
        token = self.begin_load()
        try:
            snapshot = self.client.load_state()
        except StorageError as e:
            self.logger.warning("State load failed, falling back to defaults", exception=e)
            snapshot = None
        return self.hydrate(snapshot, token)

    def hydrate(self, snapshot: Optional[Snapshot], token: int) -> bool:
        """Übernimmt einen geladenen Snapshot, sofern er nicht veraltet ist"""
        if self._closed or token != self._load_token:
            self.logger.info("Discarding stale state load",
                             token=token,
                             current_token=self._load_token,
                             closed=self._closed)
            return False

        if snapshot is not None:
            self._files = [item.copy() for item in snapshot.files]
            if snapshot.categories:
                self._categories = list(snapshot.categories)
            elif snapshot.available_tags:
                self._categories = [
                    Category(tag, CATEGORY_COLOR_PALETTE[index % len(CATEGORY_COLOR_PALETTE)])
                    for index, tag in enumerate(snapshot.available_tags)
                ]
            if snapshot.language is not None:
                self._language = snapshot.language

        self._is_ready = True
        self.logger.info("State hydrated",
                         files=len(self._files),
                         categories=len(self._categories),
                         from_storage=snapshot is not None)
        self._notify()
        return True

    def close(self):
        """Ab jetzt werden späte Ladeergebnisse verworfen"""
        self._closed = True
        self._listeners.clear()

    # Persistence

    def _persist(self):
        if not self._is_ready:
            self.logger.debug("Skipping save before initial load")
            return

        try:
            self.client.save_state(self._files, self._categories, self._language)
        except StorageError as e:
            get_error_reporter().report_error('state_save_failed', str(e),
                                              {'files': len(self._files)})
            self.notices.append(Notice('error', 'Changes could not be saved'))

    def _notify(self):
        view = self.snapshot()
        for listener in list(self._listeners):
            safe_execute(lambda: listener(view), error_message="State listener failed")

    def _commit(self):
        self._persist()
        self._notify()

    def _find(self, file_id: str) -> Optional[FileItem]:
        return next((item for item in self._files if item.id == file_id), None)

    # File commands

    @log_performance("archive_files")
    def archive(self, inputs: Sequence[ArchiveInput], archive_date: Union[date, datetime],
                tags: Sequence[str]) -> ArchiveResult:
        """Lädt jede Datei hoch und stellt die erfolgreichen an den Anfang der Liste"""
        archive_date = _as_datetime(archive_date)

        result = ArchiveResult()
        for archive_input in inputs:
            file_id = generate_id()
            try:
                upload = self.client.upload_file(file_id, archive_input.content,
                                                 folder=self.folder,
                                                 filename=archive_input.name)
            except StorageError as e:
                self.logger.error("Upload failed, skipping file",
                                  file_name=archive_input.name,
                                  exception=e)
                result.failed.append(archive_input.name)
                self.notices.append(Notice('error', f"Upload failed: {archive_input.name}"))
                continue

            result.archived.append(FileItem(
                id=file_id,
                name=archive_input.name,
                size=archive_input.display_size(),
                date=archive_date,
                uploaded_at=datetime.now(),
                tags=list(tags),
                color=DEFAULT_FILE_COLOR,
                storage_path=upload.storage_path,
                file_url=upload.file_url,
            ))

        self._files = result.archived + self._files
        self._screen = Screen.DASHBOARD
        self.logger.info("Files archived",
                         archived=len(result.archived),
                         failed=len(result.failed))
        self._commit()
        return result

    def delete(self, file_id: str) -> bool:
        item = self._find(file_id)
        if item is None:
            return False

        if item.storage_path:
            # Fire-and-forget: Fehler werden nur geloggt
            safe_execute(lambda: self.client.delete_file(item.storage_path),
                         error_message="PDF delete failed")

        self._files = [f for f in self._files if f.id != file_id]
        if self._selected_file_id == file_id:
            self._selected_file_id = None
            self._screen = Screen.DASHBOARD

        self.logger.info("File deleted", file_id=file_id)
        self._commit()
        return True

    def _toggle(self, file_id: str, flag: str) -> bool:
        item = self._find(file_id)
        if item is None:
            return False
        setattr(item, flag, not getattr(item, flag))
        self._commit()
        return True

    def toggle_star(self, file_id: str) -> bool:
        return self._toggle(file_id, 'is_starred')

    def toggle_read(self, file_id: str) -> bool:
        return self._toggle(file_id, 'is_read')

    def update_file(self, file_id: str, **fields) -> bool:
        """Übernimmt die angegebenen Felder, alle anderen bleiben unverändert"""
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        item = self._find(file_id)
        if item is None:
            return False

        if 'date' in fields:
            fields['date'] = _as_datetime(fields['date'])
        updated = item.copy(**fields)
        self._files = [updated if f.id == file_id else f for f in self._files]
        self._commit()
        return True

    # Category commands

    def add_category(self, category: Category) -> bool:
        if not category.name or any(c.name == category.name for c in self._categories):
            return False
        self._categories = self._categories + [category]
        self._commit()
        return True

    def edit_category(self, old_name: str, new_category: Category) -> bool:
        """Ersetzt eine Kategorie; bei Umbenennung werden die Tags aller Dateien angepasst"""
        if not new_category.name:
            return False
        renamed = old_name != new_category.name
        if renamed and any(c.name == new_category.name for c in self._categories):
            return False

        self._categories = [new_category if c.name == old_name else c for c in self._categories]
        if renamed:
            self._files = [
                item.copy(tags=[new_category.name if tag == old_name else tag for tag in item.tags])
                for item in self._files
            ]
            self.logger.info("Category renamed", old_name=old_name, new_name=new_category.name)

        self._commit()
        return True

    def delete_category(self, name: str) -> bool:
        """Entfernt nur die Kategorie; Tags auf Dateien bleiben als Historie erhalten"""
        remaining = [c for c in self._categories if c.name != name]
        if len(remaining) == len(self._categories):
            return False
        self._categories = remaining
        self._commit()
        return True

    def set_language(self, language: Language):
        self._language = language
        if self.preferences is not None:
            self.preferences.language = language
        self._commit()

    # Navigation

    def navigate(self, screen: Screen):
        self._screen = screen
        self._notify()

    def open_file(self, file_id: str) -> bool:
        if self._find(file_id) is None:
            return False
        self._selected_file_id = file_id
        self._screen = Screen.VIEWER
        self._notify()
        return True

    def back_from_export(self):
        self._screen = Screen.VIEWER if self._selected_file_id else Screen.DASHBOARD
        self._notify()

    def view_file(self, file_id: str) -> ViewerDocument:
        """Lädt die Binärdaten für den Viewer; Fehler ergeben einen Platzhalter"""
        item = self._find(file_id)
        if item is None:
            return ViewerDocument(file=None, content=None, error='File not found')

        try:
            content = self.client.fetch_file(item.file_url)
        except StorageError as e:
            self.logger.warning("PDF could not be loaded for viewer",
                                file_id=file_id, exception=e)
            return ViewerDocument(file=item.copy(), content=None, error='PDF could not be loaded')

        return ViewerDocument(file=item.copy(), content=content)

    # Downloads

    def _download(self, items: List[FileItem]) -> BulkDownloadResult:
        result = build_archive(items, self.client.fetch_file)

        if result.archive is None:
            self.notices.append(Notice('error', 'No files could be downloaded'))
        elif result.failed:
            self.notices.append(Notice(
                'warning',
                f"Downloaded {result.succeeded_count} of {len(items)} files, "
                f"{result.failed_count} failed"
            ))
        else:
            self.notices.append(Notice('info', f"Downloaded {result.succeeded_count} files"))
        return result

    def download_folder(self, folder_name: str) -> BulkDownloadResult:
        return self._download(files_in_folder(self._files, folder_name))

    def download_range(self, start: Optional[date], end: Optional[date]) -> BulkDownloadResult:
        items = [item for item in files_in_range(self._files, start, end) if item.file_url]
        if not items:
            self.notices.append(Notice('info', 'No files in the selected range'))
            return BulkDownloadResult(archive=None)
        return self._download(items)
