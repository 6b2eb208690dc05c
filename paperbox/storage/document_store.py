"""
Dateisystem-Ablage für das State-Dokument und die PDF-Binärdaten
"""
import copy
import json
import os
import re
import uuid
from pathlib import Path
from typing import Dict, Any, Optional

from werkzeug.utils import secure_filename

from ..monitoring import get_logger

DEFAULT_STATE = {
    'version': 1,
    'updatedAt': '',
    'categories': [],
    'availableTags': [],
    'files': [],
}

# storagePath-Werte und die statische Route beginnen immer mit diesem Präfix
PUBLIC_PREFIX = 'data'

_FOLDER_PATTERN = re.compile(r'[^a-zA-Z0-9_-]')


def sanitize_folder(folder: Optional[str], default: str = 'pdfs') -> str:
    """Entfernt alles außer Buchstaben, Ziffern, Bindestrich und Unterstrich"""
    safe = _FOLDER_PATTERN.sub('', folder or '')
    return safe or default


class DocumentStore:
    """Speichert ein JSON-Dokument und PDFs unterhalb eines Datenverzeichnisses"""

    def __init__(self, data_dir, state_file: str = 'db.sqlite.json',
                 default_folder: str = 'pdfs'):
        self.data_dir = Path(data_dir).resolve()
        self.tmp_dir = self.data_dir / 'tmp'
        self.state_path = self.data_dir / state_file
        self.default_folder = default_folder
        self.logger = get_logger('document_store')

    def read_state(self) -> Dict[str, Any]:
        """Liest das State-Dokument, legt bei Bedarf das Default-Dokument an"""
        try:
            with open(self.state_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning("State document unavailable, writing default",
                                state_path=str(self.state_path),
                                reason=type(e).__name__)
            default = copy.deepcopy(DEFAULT_STATE)
            self.write_state(default)
            return default

    def write_state(self, payload: Any) -> None:
        """Ersetzt das State-Dokument vollständig"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.state_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

        self.logger.info("State document written",
                         files=len(payload.get('files') or []) if isinstance(payload, dict) else None)

    def save_pdf(self, upload, file_id: Optional[str] = None,
                 folder: Optional[str] = None) -> Dict[str, str]:
        """
        Speichert eine hochgeladene Datei als {folder}/{id}.pdf

        Args:
            upload: werkzeug FileStorage
            file_id: Dateikennung; Default ist der Name der Upload-Datei ohne Endung
            folder: Zielordner, wird bereinigt

        Returns:
            Dict mit storagePath und fileUrl
        """
        safe_folder = sanitize_folder(folder, self.default_folder)
        raw_id = file_id or Path(upload.filename or '').stem
        safe_id = secure_filename(raw_id) or uuid.uuid4().hex

        target_dir = self.data_dir / safe_folder
        target_dir.mkdir(parents=True, exist_ok=True)
        self.tmp_dir.mkdir(parents=True, exist_ok=True)

        # Erst vollständig in tmp schreiben, dann atomar verschieben
        tmp_path = self.tmp_dir / f"{uuid.uuid4().hex}.upload"
        upload.save(str(tmp_path))
        target_path = target_dir / f"{safe_id}.pdf"
        os.replace(tmp_path, target_path)

        storage_path = f"{PUBLIC_PREFIX}/{safe_folder}/{safe_id}.pdf"
        self.logger.info("PDF stored",
                         storage_path=storage_path,
                         size=target_path.stat().st_size)

        return {
            'storagePath': storage_path,
            'fileUrl': f"/{storage_path}",
        }

    def resolve_storage_path(self, storage_path: str) -> Optional[Path]:
        """Löst einen storagePath auf; None wenn er außerhalb des Datenverzeichnisses liegt"""
        parts = Path(storage_path.lstrip('/')).parts
        if parts and parts[0] == PUBLIC_PREFIX:
            parts = parts[1:]
        if not parts:
            return None

        candidate = self.data_dir.joinpath(*parts).resolve()
        try:
            candidate.relative_to(self.data_dir)
        except ValueError:
            return None
        return candidate

    def _is_stored_pdf(self, path: Path) -> bool:
        """Nur {folder}/{datei} in einem gültigen Upload-Ordner, nie tmp oder das State-Dokument"""
        parts = path.relative_to(self.data_dir).parts
        if len(parts) != 2:
            return False
        folder = parts[0]
        return folder != self.tmp_dir.name and sanitize_folder(folder, default='') == folder

    def delete_pdf(self, storage_path: str) -> bool:
        """Löscht die Datei; False wenn sie nicht existiert"""
        path = self.resolve_storage_path(storage_path)
        if path is None or not self._is_stored_pdf(path) or not path.is_file():
            self.logger.warning("PDF delete requested for missing file",
                                storage_path=storage_path)
            return False

        path.unlink()
        self.logger.info("PDF deleted", storage_path=storage_path)
        return True
