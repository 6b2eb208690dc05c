"""
Test configuration and fixtures
"""
import io
import shutil
import tempfile
from datetime import datetime
from urllib.parse import urlparse

import pytest

from paperbox.models import Category, FileItem
from paperbox.production_config import ProductionConfig
from paperbox.server import create_app
from paperbox.services.storage_client import StorageClient

STORAGE_URL = 'http://storage.test:8089'


@pytest.fixture
def temp_dirs():
    """Create temporary directories for testing"""
    data_dir = tempfile.mkdtemp(prefix='test_data_')
    prefs_dir = tempfile.mkdtemp(prefix='test_prefs_')

    yield {
        'data_dir': data_dir,
        'prefs_dir': prefs_dir
    }

    shutil.rmtree(data_dir, ignore_errors=True)
    shutil.rmtree(prefs_dir, ignore_errors=True)


@pytest.fixture
def sample_pdf_file():
    """Create a sample PDF file for testing"""
    return b"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>
endobj
trailer
<< /Size 4 /Root 1 0 R >>
%%EOF
"""


@pytest.fixture
def storage_app(temp_dirs):
    """Storage service app writing into a temporary data directory"""
    config = ProductionConfig(data_dir=temp_dirs['data_dir'], testing=True, max_file_size_mb=5)
    app = create_app(config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(storage_app):
    """Create test client"""
    with storage_app.test_client() as client:
        yield client


class FlaskResponseAdapter:
    """Minimal requests.Response stand-in for a Flask test response"""

    def __init__(self, response):
        self.status_code = response.status_code
        self.ok = response.status_code < 400
        self.content = response.data
        self._response = response

    def json(self):
        data = self._response.get_json(silent=True)
        if data is None:
            raise ValueError("Response body is not JSON")
        return data


class FlaskSession:
    """Routes StorageClient requests into the Flask test client"""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, timeout=None, files=None, data=None, json=None):
        path = urlparse(url).path
        self.calls.append((method, path))

        kwargs = {}
        if files:
            form = dict(data or {})
            for field_name, (filename, content, mimetype) in files.items():
                stream = io.BytesIO(content) if isinstance(content, bytes) else content
                form[field_name] = (stream, filename, mimetype)
            kwargs['data'] = form
            kwargs['content_type'] = 'multipart/form-data'
        elif json is not None:
            kwargs['json'] = json

        response = self.test_client.open(path, method=method, **kwargs)
        return FlaskResponseAdapter(response)


@pytest.fixture
def flask_session(client):
    return FlaskSession(client)


@pytest.fixture
def storage_client(flask_session):
    """StorageClient talking to the in-process storage service"""
    return StorageClient(base_url=STORAGE_URL, timeout=5, session=flask_session)


@pytest.fixture
def make_file():
    """Factory for FileItem instances"""
    counter = {'n': 0}

    def _make(name='document.pdf', date=None, tags=None, is_read=False, is_starred=False,
              file_url=None, storage_path=None):
        counter['n'] += 1
        file_id = f"file{counter['n']}"
        return FileItem(
            id=file_id,
            name=name,
            size='0.10 MB',
            date=date or datetime(2024, 3, 1, 10, 0),
            uploaded_at=datetime(2024, 3, 1, 12, 0),
            tags=list(tags or []),
            is_read=is_read,
            is_starred=is_starred,
            storage_path=storage_path or f"data/pdfs/{file_id}.pdf",
            file_url=file_url if file_url is not None else f"{STORAGE_URL}/data/pdfs/{file_id}.pdf",
        )

    return _make


@pytest.fixture
def categories():
    return [
        Category('Invoice', '#38bdf8'),
        Category('Contract', '#f97316'),
        Category('Tax', '#a855f7'),
    ]
