import base64

import pytest
import requests

from event_portal import images
from event_portal.errors import NotValid, UpstreamFailure
from event_portal.images import GitHubImageHost, safe_file_part

PNG_B64 = base64.b64encode(b'\x89PNG fake image bytes').decode('ascii')


class FakeResponse:
    def __init__(self, status_code, text=''):
        self.status_code = status_code
        self.text = text


@pytest.fixture
def host():
    return GitHubImageHost(token='tok', repo='acme/cdn', branch='main', base_dir='images')


def test_resolve_passes_through_empty_and_urls(host):
    assert host.resolve(None, 'x', 'events') is None
    assert host.resolve('', 'x', 'events') is None
    assert host.resolve('https://example.com/a.png', 'x', 'events') == 'https://example.com/a.png'


def test_upload_requires_configuration():
    with pytest.raises(NotValid):
        GitHubImageHost().resolve(PNG_B64, 'x', 'events')


def test_upload_rejects_bad_base64(host):
    with pytest.raises(NotValid):
        host.resolve('not base64 at all!', 'x', 'events')


def test_upload_success(host, monkeypatch):
    calls = []

    def fake_put(url, json=None, headers=None, timeout=None):
        calls.append((url, json, headers))
        return FakeResponse(201)

    monkeypatch.setattr(images.requests, 'put', fake_put)
    url = host.resolve(f'data:image/png;base64,{PNG_B64}', 'Acme Spring/Fair', 'events')

    assert len(calls) == 1
    api_url, payload, headers = calls[0]
    assert api_url.startswith('https://api.github.com/repos/acme/cdn/contents/images/events/Acme_Spring_Fair_')
    assert payload['content'] == PNG_B64
    assert payload['branch'] == 'main'
    assert headers['Authorization'] == 'token tok'
    assert url.startswith('https://raw.githubusercontent.com/acme/cdn/main/images/events/Acme_Spring_Fair_')
    assert url.endswith('.jpg')


def test_upload_error_status_is_upstream_failure(host, monkeypatch):
    monkeypatch.setattr(images.requests, 'put', lambda *a, **kw: FakeResponse(422, 'sha missing'))
    with pytest.raises(UpstreamFailure):
        host.resolve(PNG_B64, 'x', 'companies')


def test_upload_network_error_is_upstream_failure(host, monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError('down')

    monkeypatch.setattr(images.requests, 'put', boom)
    with pytest.raises(UpstreamFailure):
        host.resolve(PNG_B64, 'x', 'companies')


def test_safe_file_part():
    assert safe_file_part('Acme Spring/Fair') == 'Acme_Spring_Fair'
    assert safe_file_part('___') == 'image'
    assert safe_file_part('event-1_a') == 'event-1_a'
