import pytest

from event_portal import create_app
from event_portal.models import Actor, ActorType
from event_portal.sheets import MemorySheetStore

ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'admin-pass'


class FakeImageHost:
    """Records uploads instead of calling GitHub."""

    def __init__(self):
        self.uploads = []

    def resolve(self, image, name_hint, folder):
        if not image:
            return None
        if image.startswith(('http://', 'https://')):
            return image
        self.uploads.append((name_hint, folder, image))
        return f"https://images.test/{folder}/{name_hint}.jpg"


def login_as(client, actor):
    with client.session_transaction() as sess:
        sess.update(actor.to_session())


@pytest.fixture
def store():
    return MemorySheetStore()


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def app(store, image_host):
    return create_app({
        'TESTING': True,
        'FLASK_SECRET_KEY': 'test-secret',
        'SHEET_BACKEND': 'memory',
        'COMPANIES_SHEET_NAME': 'companies',
        'ADMIN_USERNAME': ADMIN_USERNAME,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
    }, store=store, image_host=image_host)


@pytest.fixture
def services(app):
    return app.extensions['event_portal']


@pytest.fixture
def companies(services):
    return services['companies']


@pytest.fixture
def events(services):
    return services['events']


@pytest.fixture
def registrations(services):
    return services['registrations']


@pytest.fixture
def admin():
    return Actor(id='admin', type=ActorType.ADMIN, name=ADMIN_USERNAME)


@pytest.fixture
def acme(companies):
    return companies.create('Acme', 'acme', 'acme-pass')


@pytest.fixture
def acme_actor(acme):
    return Actor(id=acme.id, type=ActorType.COMPANY, name=acme.name)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client, admin):
    login_as(client, admin)
    return client


@pytest.fixture
def acme_client(client, acme_actor):
    login_as(client, acme_actor)
    return client


@pytest.fixture
def registration_data():
    return {
        'name': 'Ali Hassan',
        'phone': '01012345678',
        'email': 'Ali@Example.com',
        'gender': 'male',
        'college': 'Engineering',
        'status': 'student',
        'nationalId': '29801011234567',
    }
