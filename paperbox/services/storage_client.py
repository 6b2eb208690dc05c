"""
Storage Client für den Paperbox Storage Service
"""
from dataclasses import dataclass
from typing import List, Optional, Union, BinaryIO

import requests

from ..error_handlers import StorageError
from ..models import Category, FileItem, Language, Snapshot, DEFAULT_FOLDER
from ..monitoring import get_logger
from ..settings import config as default_config


@dataclass(frozen=True)
class UploadResult:
    storage_path: str
    file_url: str


class StorageClient:
    """HTTP-Client für State-Dokument und PDF-Binärdaten"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or default_config.storage_url).rstrip('/')
        self.api_base = f"{self.base_url}/api"
        self.timeout = timeout or default_config.request_timeout
        self.session = session or requests.Session()
        self.logger = get_logger('storage_client')

    def resolve_url(self, url: str) -> str:
        """Macht relative Pfade des Services zu absoluten URLs"""
        if not url:
            return url
        if url.startswith(('http://', 'https://')):
            return url
        if url.startswith('/'):
            return f"{self.base_url}{url}"
        return f"{self.base_url}/{url}"

    def _request(self, operation: str, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            self.logger.error(f"Storage request failed: {operation}",
                              operation=operation,
                              url=url,
                              exception=e)
            raise StorageError(f"{operation} failed: {e}", operation=operation) from e

    def upload_file(self, file_id: str, binary: Union[bytes, BinaryIO],
                    folder: str = DEFAULT_FOLDER, filename: Optional[str] = None) -> UploadResult:
        """Lädt ein PDF hoch; wirft StorageError bei jedem Nicht-Erfolg"""
        response = self._request(
            'upload_file', 'POST', f"{self.api_base}/pdfs",
            files={'file': (filename or f"{file_id}.pdf", binary, 'application/pdf')},
            data={'id': file_id, 'folder': folder}
        )
        if not response.ok:
            self.logger.error("PDF upload rejected",
                              file_id=file_id,
                              status_code=response.status_code)
            raise StorageError('Failed to save PDF', operation='upload_file',
                               status_code=response.status_code)

        try:
            data = response.json()
            result = UploadResult(
                storage_path=data['storagePath'],
                file_url=self.resolve_url(data['fileUrl'])
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self.logger.error("PDF upload returned an unusable response",
                              file_id=file_id,
                              exception=e)
            raise StorageError('Failed to save PDF', operation='upload_file',
                               status_code=response.status_code) from e

        self.logger.info("PDF uploaded", file_id=file_id, storage_path=result.storage_path)
        return result

    def delete_file(self, storage_path: str) -> bool:
        """Löscht ein PDF; False wenn der Service die Datei nicht kennt"""
        response = self._request(
            'delete_file', 'POST', f"{self.api_base}/pdfs/delete",
            json={'storagePath': storage_path}
        )
        if response.status_code == 404:
            self.logger.warning("PDF to delete not found", storage_path=storage_path)
            return False
        if not response.ok:
            raise StorageError('Failed to delete PDF', operation='delete_file',
                               status_code=response.status_code)
        return True

    def save_state(self, files: List[FileItem], categories: List[Category],
                   language: Optional[Language] = None) -> None:
        """Überschreibt das komplette State-Dokument"""
        payload = Snapshot(files=list(files), categories=list(categories),
                           language=language).to_payload()
        response = self._request('save_state', 'POST', f"{self.api_base}/state", json=payload)
        if not response.ok:
            self.logger.error("State save rejected", status_code=response.status_code)
            raise StorageError('Failed to save state', operation='save_state',
                               status_code=response.status_code)

        self.logger.debug("State saved",
                          files=len(payload['files']),
                          categories=len(payload['categories']))

    def load_state(self) -> Optional[Snapshot]:
        """Lädt das State-Dokument; None bei jeder Nicht-Erfolgs-Antwort"""
        response = self._request('load_state', 'GET', f"{self.api_base}/state")
        if not response.ok:
            self.logger.warning("State load returned no data", status_code=response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            self.logger.warning("State load returned invalid JSON")
            return None

        try:
            snapshot = Snapshot.from_payload(payload, resolve_url=self.resolve_url)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self.logger.warning("State load returned a malformed document", exception=e)
            return None

        self.logger.info("State loaded",
                         files=len(snapshot.files),
                         categories=len(snapshot.categories))
        return snapshot

    def fetch_file(self, url: str) -> bytes:
        """Lädt die Binärdaten einer Datei"""
        if not url:
            raise StorageError('File has no URL', operation='fetch_file')

        response = self._request('fetch_file', 'GET', self.resolve_url(url))
        if not response.ok:
            raise StorageError(f"Failed to fetch {url}", operation='fetch_file',
                               status_code=response.status_code)
        return response.content
