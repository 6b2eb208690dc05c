"""
Tests for the storage service HTTP endpoints
"""
import io
import json
from pathlib import Path

import pytest

from paperbox.storage import DocumentStore, sanitize_folder


def upload(client, content, file_id='abc123', folder='pdfs', filename='scan.pdf'):
    data = {'file': (io.BytesIO(content), filename)}
    if file_id is not None:
        data['id'] = file_id
    if folder is not None:
        data['folder'] = folder
    return client.post('/api/pdfs', data=data, content_type='multipart/form-data')


class TestStateEndpoints:
    """Test cases for /api/state"""

    def test_get_state_initializes_default_document(self, client, temp_dirs):
        """Missing document is created lazily and returned"""
        response = client.get('/api/state')
        assert response.status_code == 200

        data = json.loads(response.data)
        assert data['version'] == 1
        assert data['files'] == []
        assert data['categories'] == []
        assert data['availableTags'] == []
        assert (Path(temp_dirs['data_dir']) / 'db.sqlite.json').exists()

    def test_post_state_replaces_document(self, client):
        """POST overwrites the whole document without merging"""
        first = {'version': 2, 'files': [{'id': 'a'}], 'categories': [{'name': 'X', 'color': '#fff'}]}
        second = {'version': 2, 'files': [], 'language': 'EN'}

        assert client.post('/api/state', json=first).get_json() == {'ok': True}
        client.post('/api/state', json=second)

        data = client.get('/api/state').get_json()
        assert data == second
        assert 'categories' not in data

    def test_post_state_rejects_invalid_json(self, client):
        response = client.post('/api/state', data='not json', content_type='application/json')
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_corrupted_document_falls_back_to_default(self, client, temp_dirs):
        (Path(temp_dirs['data_dir']) / 'db.sqlite.json').write_text('{broken')

        data = client.get('/api/state').get_json()
        assert data['files'] == []
        assert data['version'] == 1


class TestPdfEndpoints:
    """Test cases for /api/pdfs"""

    def test_upload_stores_file(self, client, temp_dirs, sample_pdf_file):
        response = upload(client, sample_pdf_file)
        assert response.status_code == 200

        data = response.get_json()
        assert data == {
            'storagePath': 'data/pdfs/abc123.pdf',
            'fileUrl': '/data/pdfs/abc123.pdf'
        }
        stored = Path(temp_dirs['data_dir']) / 'pdfs' / 'abc123.pdf'
        assert stored.read_bytes() == sample_pdf_file

    def test_upload_sanitizes_folder(self, client, temp_dirs, sample_pdf_file):
        response = upload(client, sample_pdf_file, folder='../my folder!')
        data = response.get_json()

        assert data['storagePath'] == 'data/myfolder/abc123.pdf'
        assert (Path(temp_dirs['data_dir']) / 'myfolder' / 'abc123.pdf').exists()

    def test_upload_defaults_id_and_folder(self, client, sample_pdf_file):
        response = upload(client, sample_pdf_file, file_id=None, folder=None, filename='invoice.pdf')
        assert response.get_json()['storagePath'] == 'data/pdfs/invoice.pdf'

    def test_upload_overwrites_existing_file(self, client, temp_dirs):
        upload(client, b'first version')
        upload(client, b'second version')

        stored = Path(temp_dirs['data_dir']) / 'pdfs' / 'abc123.pdf'
        assert stored.read_bytes() == b'second version'

    def test_upload_leaves_no_staging_files(self, client, temp_dirs, sample_pdf_file):
        upload(client, sample_pdf_file)
        assert list((Path(temp_dirs['data_dir']) / 'tmp').iterdir()) == []

    def test_upload_without_file_is_rejected(self, client):
        response = client.post('/api/pdfs', data={'id': 'x'}, content_type='multipart/form-data')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing file'

    def test_uploaded_file_is_served(self, client, sample_pdf_file):
        upload(client, sample_pdf_file)

        response = client.get('/data/pdfs/abc123.pdf')
        assert response.status_code == 200
        assert response.data == sample_pdf_file
        assert response.mimetype == 'application/pdf'

    def test_missing_static_file_is_404(self, client):
        assert client.get('/data/pdfs/nothing.pdf').status_code == 404

    def test_delete_removes_file(self, client, temp_dirs, sample_pdf_file):
        upload(client, sample_pdf_file)

        response = client.post('/api/pdfs/delete', json={'storagePath': 'data/pdfs/abc123.pdf'})
        assert response.status_code == 200
        assert response.get_json() == {'ok': True}
        assert not (Path(temp_dirs['data_dir']) / 'pdfs' / 'abc123.pdf').exists()

    def test_delete_missing_file_is_404(self, client):
        response = client.post('/api/pdfs/delete', json={'storagePath': 'data/pdfs/nope.pdf'})
        assert response.status_code == 404

    def test_delete_without_storage_path_is_400(self, client):
        response = client.post('/api/pdfs/delete', json={})
        assert response.status_code == 400

    def test_delete_outside_data_dir_is_404(self, client, temp_dirs):
        outside = Path(temp_dirs['prefs_dir']) / 'secret.pdf'
        outside.write_bytes(b'keep me')

        response = client.post('/api/pdfs/delete',
                               json={'storagePath': f"data/../{Path(temp_dirs['prefs_dir']).name}/secret.pdf"})
        assert response.status_code == 404
        assert outside.exists()

    def test_delete_cannot_remove_state_document(self, client, temp_dirs):
        client.get('/api/state')
        state_path = Path(temp_dirs['data_dir']) / 'db.sqlite.json'
        assert state_path.exists()

        response = client.post('/api/pdfs/delete', json={'storagePath': 'data/db.sqlite.json'})
        assert response.status_code == 404
        assert state_path.exists()

    def test_delete_cannot_touch_staging_files(self, client, temp_dirs):
        staged = Path(temp_dirs['data_dir']) / 'tmp' / 'pending.pdf'
        staged.parent.mkdir(parents=True, exist_ok=True)
        staged.write_bytes(b'in flight')

        response = client.post('/api/pdfs/delete', json={'storagePath': 'data/tmp/pending.pdf'})
        assert response.status_code == 404
        assert staged.exists()

    def test_delete_rejects_nested_paths(self, client, temp_dirs):
        nested = Path(temp_dirs['data_dir']) / 'pdfs' / 'sub' / 'inner.pdf'
        nested.parent.mkdir(parents=True, exist_ok=True)
        nested.write_bytes(b'nested')

        response = client.post('/api/pdfs/delete', json={'storagePath': 'data/pdfs/sub/inner.pdf'})
        assert response.status_code == 404
        assert nested.exists()


class TestDocumentStore:
    """Test cases for DocumentStore helpers"""

    @pytest.mark.parametrize('folder,expected', [
        ('pdfs', 'pdfs'),
        ('my-folder_2', 'my-folder_2'),
        ('../etc', 'etc'),
        ('', 'pdfs'),
        (None, 'pdfs'),
        ('!!!', 'pdfs'),
    ])
    def test_sanitize_folder(self, folder, expected):
        assert sanitize_folder(folder) == expected

    def test_resolve_storage_path(self, temp_dirs):
        store = DocumentStore(temp_dirs['data_dir'])

        resolved = store.resolve_storage_path('data/pdfs/a.pdf')
        assert resolved == Path(temp_dirs['data_dir']).resolve() / 'pdfs' / 'a.pdf'
        assert store.resolve_storage_path('/data/pdfs/a.pdf') == resolved
        assert store.resolve_storage_path('data') is None


class TestMonitoringEndpoints:
    """Test cases for health and status endpoints"""

    def test_health(self, client):
        response = client.get('/api/monitoring/health')
        assert response.status_code == 200

        data = response.get_json()
        assert data['status'] == 'healthy'
        assert 'timestamp' in data
        assert 'version' in data
        assert data['storage']['writable'] is True

    def test_status_counts_requests(self, client):
        client.get('/api/state')
        client.get('/api/unknown')

        data = client.get('/api/monitoring/status').get_json()
        assert data['performance']['total_requests'] >= 2
        assert '404' in data['performance']['errors_by_status']

    def test_unknown_route_returns_json_error(self, client):
        response = client.get('/api/does-not-exist')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Not Found'

    def test_response_headers(self, client):
        response = client.get('/api/state')
        assert 'X-Response-Time' in response.headers
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
