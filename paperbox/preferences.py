"""
Lokale Einstellungen außerhalb des State-Dokuments
"""
import json
from pathlib import Path
from typing import Dict, Optional

from .models import Language
from .monitoring import get_logger

THEMES = ('light', 'dark')


class PreferenceStore:
    """Sprache, Theme und PDF-Vorschau als einzelne Werte in einer JSON-Datei"""

    def __init__(self, path):
        self.path = Path(path)
        self.logger = get_logger('preferences')
        self._values: Dict[str, str] = {}
        self._load()

    def _load(self):
        # Nur einmal beim Start gelesen
        if not self.path.exists():
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning("Preferences unreadable, using defaults",
                                path=str(self.path), exception=e)
            return
        if isinstance(data, dict):
            self._values = {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self._values, f, indent=2)

    def _set(self, key: str, value: str):
        self._values[key] = value
        self._write()

    @property
    def language(self) -> Optional[Language]:
        return Language.parse(self._values.get('language'))

    @language.setter
    def language(self, value: Language):
        self._set('language', value.value)

    @property
    def theme(self) -> Optional[str]:
        theme = self._values.get('theme')
        return theme if theme in THEMES else None

    @theme.setter
    def theme(self, value: str):
        if value not in THEMES:
            raise ValueError(f"Unknown theme: {value}")
        self._set('theme', value)

    @property
    def pdf_preview_default(self) -> bool:
        return self._values.get('pdfPreviewDefault') == 'on'

    @pdf_preview_default.setter
    def pdf_preview_default(self, enabled: bool):
        self._set('pdfPreviewDefault', 'on' if enabled else 'off')
