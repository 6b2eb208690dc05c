"""
Datenmodelle für archivierte Dokumente und Kategorien
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple

STORAGE_VERSION = 2
DEFAULT_FOLDER = 'pdfs'
DEFAULT_FILE_COLOR = 'text-primary bg-primary/20'


class Language(Enum):
    EN = "EN"
    DE = "DE"
    CN = "CN"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional['Language']:
        """Gibt die Sprache zurück oder None bei unbekanntem Code"""
        try:
            return cls(value)
        except ValueError:
            return None


class Screen(Enum):
    DASHBOARD = "dashboard"
    VIEWER = "viewer"
    UPLOAD = "upload"
    EXPORT = "export"
    FOLDERS = "folders"
    STARRED = "starred"
    SETTINGS = "settings"


class ReadStatusFilter(Enum):
    ALL = "all"
    READ = "read"
    UNREAD = "unread"


@dataclass(frozen=True)
class Category:
    """Benannte, farbige Tag-Definition"""
    name: str
    color: str

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'color': self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(name=data['name'], color=data.get('color', ''))


@dataclass
class FileItem:
    """Metadaten eines archivierten PDFs"""
    id: str
    name: str
    size: str
    date: datetime
    uploaded_at: datetime
    tags: List[str] = field(default_factory=list)
    is_starred: bool = False
    is_read: bool = False
    is_signed: bool = False
    color: str = DEFAULT_FILE_COLOR
    storage_path: Optional[str] = None
    file_url: str = ''
    type: str = 'pdf'

    def to_record(self) -> Dict[str, Any]:
        """Serialisiert für das Server-Dokument; file_url wird nie gespeichert"""
        return {
            'id': self.id,
            'name': self.name,
            'size': self.size,
            'date': self.date.isoformat(),
            'uploadedAt': self.uploaded_at.isoformat(),
            'type': self.type,
            'tags': list(self.tags),
            'isSigned': self.is_signed,
            'isStarred': self.is_starred,
            'isRead': self.is_read,
            'color': self.color,
            'storagePath': self.storage_path or default_storage_path(self.id),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], file_url: str = '') -> 'FileItem':
        return cls(
            id=record['id'],
            name=record.get('name', ''),
            size=record.get('size', ''),
            date=parse_timestamp(record['date']),
            uploaded_at=parse_timestamp(record.get('uploadedAt') or record['date']),
            tags=list(record.get('tags') or []),
            is_starred=bool(record.get('isStarred', False)),
            is_read=bool(record.get('isRead', False)),
            is_signed=bool(record.get('isSigned', False)),
            color=record.get('color', DEFAULT_FILE_COLOR),
            storage_path=record.get('storagePath'),
            file_url=file_url,
            type=record.get('type', 'pdf'),
        )

    def copy(self, **changes) -> 'FileItem':
        changes['tags'] = list(changes.get('tags', self.tags))
        return replace(self, **changes)


@dataclass
class Snapshot:
    """Vollständiger Anwendungszustand, der als Einheit gespeichert wird"""
    files: List[FileItem] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    language: Optional[Language] = None
    available_tags: List[str] = field(default_factory=list)

    def to_payload(self, updated_at: Optional[datetime] = None) -> Dict[str, Any]:
        payload = {
            'version': STORAGE_VERSION,
            'updatedAt': (updated_at or datetime.now()).isoformat(),
            'categories': [category.to_dict() for category in self.categories],
            'files': [item.to_record() for item in self.files],
        }
        if self.language is not None:
            payload['language'] = self.language.value
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], resolve_url=None) -> 'Snapshot':
        if not isinstance(payload, dict):
            raise ValueError(f"State document must be an object, got {type(payload).__name__}")

        files = []
        for record in payload.get('files') or []:
            storage_path = record.get('storagePath') or default_storage_path(record['id'])
            url = f"/{storage_path}"
            files.append(FileItem.from_record(record, resolve_url(url) if resolve_url else url))

        return cls(
            files=files,
            categories=[Category.from_dict(c) for c in payload.get('categories') or []],
            language=Language.parse(payload.get('language')),
            available_tags=list(payload.get('availableTags') or []),
        )


@dataclass(frozen=True)
class StateView:
    """Schreibgeschützte Sicht auf den Zustand für Konsumenten"""
    files: Tuple[FileItem, ...]
    categories: Tuple[Category, ...]
    language: Language
    screen: Screen
    selected_file_id: Optional[str]
    is_ready: bool


def generate_id() -> str:
    return uuid.uuid4().hex


def default_storage_path(file_id: str, folder: str = DEFAULT_FOLDER) -> str:
    return f"data/{folder}/{file_id}.pdf"


def format_size(num_bytes: int) -> str:
    """Menschenlesbare Größe wie in der Upload-Ansicht, z.B. '1.25 MB'"""
    return f"{num_bytes / 1024 / 1024:.2f} MB"


def parse_timestamp(value: str) -> datetime:
    """Parst ISO-Zeitstempel; Zeitzonen werden in lokale naive Zeit umgerechnet"""
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
