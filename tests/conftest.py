# tests/conftest.py

"""Shared fixtures: an app on in-memory SQLite with a temporary upload folder."""

import io

import pytest
from werkzeug.datastructures import FileStorage

import accounts
import catalog
from app import create_app
from models import db

PASSWORD = 'secret123'

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def upload_dir(app):
    return app.config['UPLOAD_FOLDER']


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make(username=None, email=None, password=PASSWORD):
        counter['n'] += 1
        username = username or f'user{counter["n"]}'
        email = email or f'{username}@example.com'
        return accounts.register(username, email, password)
    return _make


@pytest.fixture
def seller(make_user):
    return make_user('seller', 'seller@example.com')


@pytest.fixture
def buyer(make_user):
    return make_user('buyer', 'buyer@example.com')


def product_form(**overrides):
    form = {
        'title': 'Bike',
        'description': 'Good condition',
        'category': 'Sports',
        'price': '250',
    }
    form.update(overrides)
    return form


@pytest.fixture
def make_product(app):
    def _make(seller_id, image_refs=None, **overrides):
        return catalog.create_product(seller_id, product_form(**overrides), image_refs)
    return _make


def image_file(name='photo.png', mimetype='image/png', data=PNG_BYTES):
    return FileStorage(stream=io.BytesIO(data), filename=name, content_type=mimetype)


def image_upload(name='photo.png', mimetype='image/png', data=PNG_BYTES):
    """Multipart tuple for the Flask test client."""
    return (io.BytesIO(data), name, mimetype)


def login(client, identifier, password=PASSWORD):
    return client.post('/auth/login', data={'email': identifier, 'password': password})
