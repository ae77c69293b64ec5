"""
Pytest configuration and fixtures for testing the vocabulary image service.
"""

import base64
import os
import sys
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from vocab_images import create_app, db
from vocab_images.services import image_generation, storage

fake = Faker()

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 16
PNG_DATA_URL = 'data:image/png;base64,' + base64.b64encode(PNG_BYTES).decode()
STORAGE_BASE_URL = 'https://project.supabase.co/storage/v1/object/public/vocabulary-images'


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app('testing', overrides={
        'AI_GATEWAY_API_KEY': 'test-gateway-key',
        'AI_GATEWAY_URL': 'https://gateway.test/v1/chat/completions',
        'IMAGE_GENERATION_TIMEOUT': 5,
        'SUPABASE_URL': None,
        'SUPABASE_SERVICE_KEY': None,
    })

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


class FakeGatewayResponse:
    """Stand-in for a requests.Response from the AI gateway."""

    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError('No JSON body')
        return self._payload


def gateway_payload(image=PNG_DATA_URL):
    """Chat completion body carrying one generated image."""
    images = [{'type': 'image_url', 'image_url': {'url': image}}] if image else []
    return {
        'choices': [
            {
                'message': {
                    'role': 'assistant',
                    'content': 'Here is your illustration.',
                    'images': images,
                }
            }
        ]
    }


class FakeGateway:
    """Records gateway calls and replays a configured outcome."""

    def __init__(self):
        self.calls = []
        self.response = FakeGatewayResponse(200, gateway_payload())
        self.exception = None

    def respond(self, status_code=200, payload=None, text=''):
        self.response = FakeGatewayResponse(status_code, payload, text)

    def raise_error(self, exception):
        self.exception = exception

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        if self.exception is not None:
            raise self.exception
        return self.response


class FakeStorage:
    """Records uploads instead of talking to Supabase Storage."""

    def __init__(self):
        self.uploads = []
        self.deleted = []
        self.error = None

    def fail_with(self, message):
        self.error = message

    def upload_file(self, file_data, file_name, content_type='image/png'):
        self.uploads.append({'data': file_data, 'file_name': file_name, 'content_type': content_type})
        if self.error:
            return None, self.error
        return f'{STORAGE_BASE_URL}/{file_name}', None

    def delete_file(self, file_url):
        self.deleted.append(file_url)
        return True, None


@pytest.fixture
def gateway(monkeypatch):
    """Replace the HTTP call to the AI gateway."""
    fake_gateway = FakeGateway()
    monkeypatch.setattr(image_generation.requests, 'post', fake_gateway.post)
    return fake_gateway


@pytest.fixture
def bucket(monkeypatch):
    """Replace Supabase Storage uploads."""
    fake_storage = FakeStorage()
    monkeypatch.setattr(storage, 'upload_file', fake_storage.upload_file)
    monkeypatch.setattr(storage, 'delete_file', fake_storage.delete_file)
    return fake_storage


@pytest.fixture
def random_word():
    return fake.word()
