"""Tests for src/catalog/provider.py - static and HTTP catalog providers."""

from unittest.mock import MagicMock

import httpx
import pytest

from src.catalog.provider import HttpCatalogProvider, StaticCatalogProvider
from src.engine.errors import CatalogLoadError


def response(payload) -> MagicMock:
    resp = MagicMock()
    resp.json.return_value = payload
    return resp


@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def provider(mock_client, sleeps) -> HttpCatalogProvider:
    return HttpCatalogProvider(
        "https://words.example.com/",
        client=mock_client,
        max_retries=2,
        base_delay=0.5,
        sleep=sleeps.append,
    )


class TestStaticCatalogProvider:
    def test_returns_copy(self, small_catalog):
        provider = StaticCatalogProvider(small_catalog)
        loaded = provider.load()
        loaded["easy"]["animals"].append("dog")
        assert small_catalog["easy"]["animals"] == ["cat"]


class TestHttpCatalogProvider:
    def test_fetches_each_difficulty(self, provider, mock_client):
        mock_client.get.side_effect = [
            response({"animals": ["cat"]}),
            response({"animals": ["tiger"]}),
            response({"science": ["molecule"]}),
        ]
        catalog = provider.load()
        assert catalog == {
            "easy": {"animals": ["cat"]},
            "medium": {"animals": ["tiger"]},
            "hard": {"science": ["molecule"]},
        }
        urls = [c.args[0] for c in mock_client.get.call_args_list]
        assert urls == [
            "https://words.example.com/easy.json",
            "https://words.example.com/medium.json",
            "https://words.example.com/hard.json",
        ]

    def test_retries_with_backoff(self, provider, mock_client, sleeps):
        mock_client.get.side_effect = [
            httpx.ConnectError("down"),
            httpx.ConnectError("down"),
            response({"animals": ["cat"]}),
            response({"animals": ["tiger"]}),
            response({"animals": ["rhinoceros"]}),
        ]
        catalog = provider.load()
        assert sleeps == [0.5, 1.0]
        assert catalog["easy"] == {"animals": ["cat"]}

    def test_partial_catalog_kept(self, provider, mock_client, caplog):
        def get(url):
            if "medium" in url:
                raise httpx.ConnectError("down")
            return response({"animals": ["cat"]})

        mock_client.get.side_effect = get
        catalog = provider.load()
        assert sorted(catalog) == ["easy", "hard"]
        assert "Partial catalog, missing: medium" in caplog.text

    def test_everything_failing_raises(self, provider, mock_client, sleeps):
        mock_client.get.side_effect = httpx.ConnectError("down")
        with pytest.raises(CatalogLoadError, match="easy, medium, hard"):
            provider.load()
        assert mock_client.get.call_count == 9
        assert sleeps == [0.5, 1.0] * 3

    def test_http_status_error_retried(self, provider, mock_client, sleeps):
        bad = MagicMock()
        bad.raise_for_status.side_effect = httpx.HTTPStatusError(
            "503", request=MagicMock(), response=MagicMock()
        )
        mock_client.get.side_effect = [bad] + [response({"animals": ["cat"]})] * 3
        provider.load()
        assert sleeps == [0.5]

    def test_non_object_body_rejected(self, provider, mock_client, sleeps):
        mock_client.get.return_value = response(["cat", "dog"])
        with pytest.raises(CatalogLoadError):
            provider.load()
        assert sleeps == []
