import pytest

from event_portal.errors import Conflict, Forbidden, NotFound, NotValid, Unauthorized
from event_portal.models import Actor, ActorType
from event_portal.row_codec import EVENT_HEADERS


@pytest.fixture
def spring(events, acme_actor):
    return events.create(acme_actor, 'Acme', 'Spring Fair')


def test_created_event_is_listed_with_zero_registrations(events, spring):
    listed = events.list('Acme')
    assert [e.to_dict() for e in listed] == [{'id': 'Spring Fair', 'name': 'Spring Fair', 'company': 'Acme',
                                              'registrations': 0, 'image': None, 'enabled': True}]


def test_created_event_layout(store, spring):
    rows = store.sheets['Acme']
    assert rows[0] == ['Spring Fair'] + [''] * (len(EVENT_HEADERS) - 1)
    assert rows[1] == EVENT_HEADERS
    assert rows[2][EVENT_HEADERS.index('Enabled')] == 'true'
    assert rows[2][0] == ''


def test_create_with_image(events, image_host, acme_actor):
    event = events.create(acme_actor, 'Acme', 'Career Day', image='aGVsbG8=')
    assert event.image == 'https://images.test/events/Acme_Career Day.jpg'
    assert events.get('Acme', 'Career Day').image == event.image


def test_create_by_admin_for_any_company(events, admin, acme):
    events.create(admin, 'Acme', 'Admin Event')
    assert events.get('Acme', 'Admin Event').enabled is True


@pytest.mark.parametrize('name', ['', '   ', 'Registrations', 'Registration 2024'])
def test_create_rejects_bad_names(events, acme_actor, name):
    with pytest.raises(NotValid):
        events.create(acme_actor, 'Acme', name)


def test_create_duplicate_is_conflict(events, image_host, acme_actor, spring):
    with pytest.raises(Conflict):
        events.create(acme_actor, 'Acme', 'Spring Fair', image='aGVsbG8=')
    assert image_host.uploads == []


def test_create_for_unknown_company(events, admin):
    with pytest.raises(NotFound):
        events.create(admin, 'Nobody', 'Spring Fair')


def test_company_cannot_touch_other_company(events, companies, acme_actor):
    companies.create('Globex', 'globex', 'pw')
    with pytest.raises(Forbidden):
        events.create(acme_actor, 'Globex', 'Sneaky')
    with pytest.raises(Unauthorized):
        events.create(None, 'Acme', 'Anonymous')


def test_set_enabled_and_image(events, store, acme_actor, spring):
    events.set_enabled(acme_actor, 'Acme', 'Spring Fair', False)
    assert events.get('Acme', 'Spring Fair').enabled is False
    assert store.sheets['Acme'][2][EVENT_HEADERS.index('Enabled')] == 'false'

    events.set_image(acme_actor, 'Acme', 'Spring Fair', 'https://img/fair.png')
    event = events.get('Acme', 'Spring Fair')
    assert event.image == 'https://img/fair.png'
    assert event.enabled is False
    assert event.registrations == 0


def test_update_missing_event(events, acme_actor, acme):
    with pytest.raises(NotFound):
        events.set_enabled(acme_actor, 'Acme', 'Missing', False)


def test_update_legacy_table_adds_columns_and_metadata_row(store, events, admin, acme):
    store.sheets['Acme'] = [
        ['Old Event', '', ''],
        ['Name', 'Phone', 'Email'],
        ['Ali', '01012345678', 'ali@example.com'],
    ]
    before = events.get('Acme', 'Old Event')
    assert (before.enabled, before.registrations) == (True, 1)

    events.set_enabled(admin, 'Acme', 'Old Event', False)
    assert store.sheets['Acme'] == [
        ['Old Event', '', ''],
        ['Name', 'Phone', 'Email', 'Image', 'Enabled'],
        ['', '', '', '', 'false'],
        ['Ali', '01012345678', 'ali@example.com'],
    ]
    after = events.get('Acme', 'Old Event')
    assert (after.enabled, after.registrations) == (False, 1)


def test_delete_event(events, acme_actor, spring):
    events.create(acme_actor, 'Acme', 'Career Day')
    events.delete(acme_actor, 'Acme', 'Spring Fair')
    assert [e.name for e in events.list('Acme')] == ['Career Day']
    with pytest.raises(NotFound):
        events.delete(acme_actor, 'Acme', 'Spring Fair')


def test_list_all_companies_skips_broken_sheet(events, companies, store, admin, spring):
    companies.create('Globex', 'globex', 'pw')
    events.create(admin, 'Globex', 'Hackathon')
    companies.create('Initech', 'initech', 'pw')
    del store.sheets['Initech']
    assert sorted((e.company, e.name) for e in events.list()) == [('Acme', 'Spring Fair'), ('Globex', 'Hackathon')]


def test_registrations_listing(events, registrations, companies, admin, acme_actor, spring, registration_data):
    registrations.register('Acme', 'Spring Fair', registration_data)
    second = dict(registration_data, email='mona@example.com', phone='01112345678', nationalId='2990', name='Mona')
    registrations.register('Acme', 'Spring Fair', second)

    records = events.registrations(acme_actor, 'Acme', 'Spring Fair')
    assert [(r['id'], r['name']) for r in records] == [(1, 'Ali Hassan'), (2, 'Mona')]
    assert records[0]['email'] == 'ali@example.com'
    assert records[0]['nationalid'] == '29801011234567'
    assert 'enabled' not in records[0]

    # admin without a company name: found by scanning
    assert events.registrations(admin, None, 'Spring Fair') == records
    # company actor without a company name: its own
    assert events.registrations(acme_actor, '', 'Spring Fair') == records

    companies.create('Globex', 'globex', 'pw')
    globex = Actor(id='x', type=ActorType.COMPANY, name='Globex')
    with pytest.raises(Forbidden):
        events.registrations(globex, 'Acme', 'Spring Fair')
    with pytest.raises(NotFound):
        events.registrations(admin, None, 'Missing')
    with pytest.raises(Unauthorized):
        events.registrations(None, 'Acme', 'Spring Fair')


def test_normalize_event_flags(store, events, acme):
    store.sheets['Acme'] = [
        ['Old', ''] + [''] * 8,
        list(EVENT_HEADERS),
        [''] * 9 + ['معطل'],
        [''] * 10,
        ['New'] + [''] * 9,
        list(EVENT_HEADERS),
        [''] * 9 + ['true'],
    ]
    assert events.normalize_flags('Acme') == 1
    assert store.sheets['Acme'][2][9] == 'false'
    assert events.get('Acme', 'Old').enabled is False
