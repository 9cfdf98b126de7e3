"""Integration tests for the catalog web page."""

import re

import pytest
from fastapi.testclient import TestClient

from oss_directory.application.catalog_service import CatalogQueryService
from oss_directory.infrastructure.config import AppConfig
from oss_directory.web.app import create_app
from tests.conftest import FailingStore, InMemoryStore, make_entry


@pytest.fixture
def client(service):
    return TestClient(create_app(service, AppConfig(static_url="/assets")))


def _positions(html, *names):
    return [html.index(f'<p class="app-title">{name}</p>') for name in names]


def test_health_check(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_lists_all_entries_alphabetically(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    html = response.text
    assert "<strong>4 results</strong>" in html
    positions = _positions(html, "Gitea", "Jellyfin", "Nextcloud", "Syncthing")
    assert positions == sorted(positions)
    assert '<option value="alphabetical" selected>' in html


def test_filters_and_sorts(client):
    html = client.get("/", params={"tags": "self-hosted", "sort": "stars"}).text

    assert "<strong>3 results</strong>" in html
    positions = _positions(html, "Gitea", "Jellyfin", "Nextcloud")
    assert positions == sorted(positions)
    assert "Syncthing" not in html
    assert '<option value="stars" selected>' in html


def test_keyword_is_echoed_in_form(client):
    html = client.get("/", params={"q": "cloud"}).text

    assert 'name="q" placeholder="Name, description, license, language or tag" value="cloud"' in html
    assert "<strong>1 results</strong>" in html


def test_entry_card_details(client):
    html = client.get("/", params={"q": "syncthing"}).text

    assert 'src="/assets/icons/syncthing.webp"' in html
    assert '<a href="https://github.com/example/syncthing">GitHub</a> ⭐ 62000' in html
    assert '<span class="tag">files</span>' in html
    assert re.search(r'<span title="2024-10-10T08:00:00">\d+ \w+ ago</span>', html)


def test_last_activity_is_relative_in_page_language(client):
    html = client.get("/", params={"q": "syncthing", "lang": "de"}).text
    assert re.search(r'<span title="2024-10-10T08:00:00">vor \d+ \w+</span>', html)


def test_nul_in_keyword_is_ignored(client):
    response = client.get("/?q=%00")

    assert response.status_code == 200
    assert "<strong>4 results</strong>" in response.text


def test_localized_page(client):
    html = client.get("/", params={"lang": "de", "q": "git"}).text

    assert "<title>Verzeichnis quelloffener Anwendungen</title>" in html
    assert 'href="?q=git&amp;lang=fr">Français</a>' in html
    assert '<input type="hidden" name="lang" value="de">' in html


def test_unknown_locale_uses_english_labels(client):
    html = client.get("/", params={"lang": "xx"}).text
    assert "<title>Open Source App Directory</title>" in html


def test_output_is_escaped():
    service = CatalogQueryService(InMemoryStore([
        make_entry("<script>alert(1)</script>", description="a & b"),
    ]))
    client = TestClient(create_app(service))

    html = client.get("/").text
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "a &amp; b" in html

    html = client.get("/", params={"q": '"><b>'}).text
    assert 'value="&#34;&gt;&lt;b&gt;"' in html


def test_query_failure_returns_500():
    client = TestClient(create_app(CatalogQueryService(FailingStore())))

    response = client.get("/", params={"q": "anything"})

    assert response.status_code == 500
    assert response.text == "Catalog query failed"
