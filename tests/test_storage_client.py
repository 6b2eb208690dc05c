"""
Tests for StorageClient against the in-process storage service
"""
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from paperbox.error_handlers import StorageError
from paperbox.models import Category, Language
from paperbox.services.storage_client import StorageClient

STORAGE_URL = 'http://storage.test:8089'


class TestResolveUrl:
    """Test cases for URL resolution"""

    def test_relative_paths_get_base_url(self):
        client = StorageClient(base_url='http://host:8089/', session=MagicMock())

        assert client.resolve_url('/data/pdfs/a.pdf') == 'http://host:8089/data/pdfs/a.pdf'
        assert client.resolve_url('data/pdfs/a.pdf') == 'http://host:8089/data/pdfs/a.pdf'

    def test_absolute_urls_unchanged(self):
        client = StorageClient(base_url='http://host:8089', session=MagicMock())
        assert client.resolve_url('https://cdn.example.com/x.pdf') == 'https://cdn.example.com/x.pdf'

    def test_empty_url(self):
        client = StorageClient(base_url='http://host:8089', session=MagicMock())
        assert client.resolve_url('') == ''


class TestStorageRoundTrip:
    """Test cases running the client against the Flask test client"""

    def test_upload_returns_absolute_url(self, storage_client, sample_pdf_file):
        result = storage_client.upload_file('doc1', sample_pdf_file, folder='pdfs')

        assert result.storage_path == 'data/pdfs/doc1.pdf'
        assert result.file_url == f"{STORAGE_URL}/data/pdfs/doc1.pdf"

    def test_fetch_uploaded_file(self, storage_client, sample_pdf_file):
        result = storage_client.upload_file('doc1', sample_pdf_file)
        assert storage_client.fetch_file(result.file_url) == sample_pdf_file

    def test_fetch_missing_file_raises(self, storage_client):
        with pytest.raises(StorageError):
            storage_client.fetch_file('/data/pdfs/missing.pdf')

    def test_fetch_without_url_raises(self, storage_client):
        with pytest.raises(StorageError):
            storage_client.fetch_file('')

    def test_delete_file(self, storage_client, sample_pdf_file):
        storage_client.upload_file('doc1', sample_pdf_file)

        assert storage_client.delete_file('data/pdfs/doc1.pdf') is True
        assert storage_client.delete_file('data/pdfs/doc1.pdf') is False

    def test_save_and_load_state(self, storage_client, make_file, categories):
        first = make_file(name='Invoice March.pdf', tags=['Invoice'], is_starred=True)
        second = make_file(name='Lease.pdf', date=datetime(2024, 1, 15, 8, 30))

        storage_client.save_state([first, second], categories, Language.EN)
        snapshot = storage_client.load_state()

        assert [f.id for f in snapshot.files] == [first.id, second.id]
        assert snapshot.files[0].tags == ['Invoice']
        assert snapshot.files[0].is_starred is True
        assert snapshot.files[1].date == datetime(2024, 1, 15, 8, 30)
        assert snapshot.categories == categories
        assert snapshot.language == Language.EN

    def test_loaded_urls_are_derived_from_storage_path(self, storage_client, make_file):
        item = make_file(file_url='http://stale.example/old.pdf', storage_path='data/archive/x1.pdf')

        storage_client.save_state([item], [])
        snapshot = storage_client.load_state()

        assert snapshot.files[0].file_url == f"{STORAGE_URL}/data/archive/x1.pdf"

    def test_saved_document_has_no_file_urls(self, storage_client, client, make_file):
        storage_client.save_state([make_file()], [])

        document = client.get('/api/state').get_json()
        assert document['version'] == 2
        assert 'updatedAt' in document
        assert 'fileUrl' not in document['files'][0]
        assert 'language' not in document

    def test_load_default_document(self, storage_client):
        snapshot = storage_client.load_state()

        assert snapshot.files == []
        assert snapshot.categories == []
        assert snapshot.language is None

    def test_load_non_object_document_returns_none(self, storage_client, client):
        client.post('/api/state', json=[1, 2, 3])
        assert storage_client.load_state() is None

    def test_load_record_with_bad_timestamp_returns_none(self, storage_client, client):
        client.post('/api/state', json={'files': [{'id': 'x', 'date': 'yesterday'}]})
        assert storage_client.load_state() is None

    def test_requests_use_expected_routes(self, storage_client, flask_session, sample_pdf_file):
        storage_client.upload_file('doc1', sample_pdf_file)
        storage_client.load_state()

        assert flask_session.calls == [('POST', '/api/pdfs'), ('GET', '/api/state')]


class TestStorageFailures:
    """Test cases for transport and service failures"""

    def _client_with_response(self, status_code, json_error=False):
        session = MagicMock()
        response = MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        if json_error:
            response.json.side_effect = ValueError("bad json")
        session.request.return_value = response
        return StorageClient(base_url='http://host', timeout=1, session=session), session

    def test_connection_error_becomes_storage_error(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("refused")
        client = StorageClient(base_url='http://host', timeout=1, session=session)

        with pytest.raises(StorageError) as exc_info:
            client.load_state()
        assert exc_info.value.operation == 'load_state'

    def test_load_state_server_error_returns_none(self):
        client, _ = self._client_with_response(500)
        assert client.load_state() is None

    def test_load_state_invalid_json_returns_none(self):
        client, _ = self._client_with_response(200, json_error=True)
        assert client.load_state() is None

    def test_upload_rejected(self):
        client, _ = self._client_with_response(500)

        with pytest.raises(StorageError) as exc_info:
            client.upload_file('doc1', b'data')
        assert exc_info.value.status_code == 500

    def test_upload_without_json_body_raises_storage_error(self):
        client, _ = self._client_with_response(200, json_error=True)

        with pytest.raises(StorageError) as exc_info:
            client.upload_file('doc1', b'data')
        assert exc_info.value.operation == 'upload_file'

    def test_upload_response_missing_fields_raises_storage_error(self):
        client, _ = self._client_with_response(200)
        client.session.request.return_value.json.return_value = {'storagePath': 'data/pdfs/doc1.pdf'}

        with pytest.raises(StorageError):
            client.upload_file('doc1', b'data')

    def test_save_state_rejected(self):
        client, _ = self._client_with_response(503)

        with pytest.raises(StorageError):
            client.save_state([], [Category('A', '#000')])

    def test_delete_server_error_raises(self):
        client, _ = self._client_with_response(500)

        with pytest.raises(StorageError):
            client.delete_file('data/pdfs/x.pdf')

    def test_timeout_is_passed_to_session(self):
        client, session = self._client_with_response(200)
        client.delete_file('data/pdfs/x.pdf')

        _, kwargs = session.request.call_args
        assert kwargs['timeout'] == 1
