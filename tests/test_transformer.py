"""Tests for the document transformer and auth handlers."""

import pytest

from content_mapper.models import LoadPhase
from content_mapper.transformer import (ApiKeyAuthHandler, DocumentTransformer,
                                        NoAuthHandler)


class FakeProvider:
    def __init__(self, document):
        self.document = document
        self.calls = []

    async def fetch(self, url, headers=None):
        self.calls.append((url, dict(headers or {})))
        return self.document


@pytest.mark.asyncio
async def test_populate_uses_sample_data(session):
    transformer = DocumentTransformer(session)
    summary = await transformer.populate()
    assert summary.applied == 5
    assert sorted(session.store.content.values()) == ["url1", "url2", "url3", "url4", "url5"]
    assert set(session.completed_phases) >= {
        LoadPhase.CONTENT_LOADED,
        LoadPhase.MAPPINGS_LOADED,
        LoadPhase.CONTENT_PROCESSED,
    }


@pytest.mark.asyncio
async def test_get_data_fetches_urls_with_auth_headers(session, feed):
    provider = FakeProvider(feed)
    transformer = DocumentTransformer(session, provider, ApiKeyAuthHandler("secret"))
    data = await transformer.get_data("https://example.test/feed")
    assert data == feed
    assert provider.calls == [("https://example.test/feed", {"Authorization": "ApiKey secret"})]

    transformer.do_mappings(6, "data[*].feed.id", "data[*].feed.id", "data[*].feed.url")
    assert dict(session.store.mappings) == {"1": 1, "2": 2}


@pytest.mark.asyncio
async def test_get_data_without_provider(session):
    transformer = DocumentTransformer(session)
    with pytest.raises(RuntimeError):
        await transformer.get_data("https://example.test/feed")


def test_policy_setters_reach_the_session(session):
    transformer = DocumentTransformer(session)
    transformer.set_fail_fast(True)
    transformer.set_overwrite_key_values(False)
    assert session.fail_fast is True
    assert session.overwrite_key_values is False
    assert transformer.locale == session.locale


def test_mapped_content_and_mappings(session):
    transformer = DocumentTransformer(session)
    transformer.set_mapped_content({1: "a", 2: "b"})
    summary = transformer.set_mapped_mappings({"x": 1, "y": [1, 2], "z": 3})
    assert session.store.resolve("y") == ["a", "b"]
    assert summary.skipped_keys == ["z"]
    assert LoadPhase.MAPPINGS_LOADED in session.completed_phases


def test_auth_handlers():
    assert NoAuthHandler().authenticate() == {}
    assert ApiKeyAuthHandler().authenticate({"api_key": "k"}) == {"Authorization": "ApiKey k"}
    with pytest.raises(ValueError):
        ApiKeyAuthHandler().authenticate()
