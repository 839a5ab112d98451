import os

import pytest

from userapi.factory import create_web_app
from userapi.services import users


@pytest.fixture()
def app():
    os.environ['DATABASE_URI'] = 'sqlite://'
    os.environ['JWT_SECRET'] = 'foosecret'
    app = create_web_app()
    with app.app_context():
        users.create_all()
    return app


@pytest.fixture()
def client(app):
    return app.test_client(use_cookies=False)


@pytest.fixture()
def request_context(app):
    yield app.test_request_context()
