"""Tests for the OAuth2 token cache and provider."""

import asyncio
from datetime import timedelta

import httpx

from src.feed.components.token_cache import OAuthTokenProvider, TokenCache

from tests.helpers import AUTH_URL, RUN_TIME, TOKEN_PATH, token_response


def test_cache_validity_follows_the_clock():
    cache = TokenCache()
    key = ("id", "secret")
    cache.set(key, "abc", RUN_TIME + timedelta(minutes=5))

    assert cache.is_valid(key, RUN_TIME)
    assert cache.get(key, RUN_TIME + timedelta(minutes=4)) == "abc"
    assert cache.get(key, RUN_TIME + timedelta(minutes=5)) is None
    assert cache.get(("other", "pair"), RUN_TIME) is None


def test_second_call_within_lifetime_uses_cache(api, token_provider):
    api.add(TOKEN_PATH, token_response("tok-1", expires_in=1800))

    first = asyncio.run(token_provider.get_token(RUN_TIME))
    second = asyncio.run(token_provider.get_token(RUN_TIME + timedelta(minutes=10)))

    assert first == second == "tok-1"
    assert len(api.calls(TOKEN_PATH)) == 1


def test_token_refreshed_sixty_seconds_before_expiry(api, token_provider):
    api.add(TOKEN_PATH, token_response("tok-1", expires_in=300), token_response("tok-2", expires_in=300))

    assert asyncio.run(token_provider.get_token(RUN_TIME)) == "tok-1"
    assert asyncio.run(token_provider.get_token(RUN_TIME + timedelta(seconds=239))) == "tok-1"
    assert asyncio.run(token_provider.get_token(RUN_TIME + timedelta(seconds=240))) == "tok-2"
    assert len(api.calls(TOKEN_PATH)) == 2


def test_token_request_is_client_credentials_form(api, token_provider):
    api.add(TOKEN_PATH, token_response())

    asyncio.run(token_provider.get_token(RUN_TIME))

    body = api.calls(TOKEN_PATH)[0].content.decode()
    assert "grant_type=client_credentials" in body
    assert "client_id=feed-client" in body
    assert "client_secret=s3cret" in body


def test_missing_credentials_yield_none_without_io(api, fetcher):
    provider = OAuthTokenProvider(fetcher, client_id=None, client_secret=None, auth_url=AUTH_URL)

    assert asyncio.run(provider.get_token(RUN_TIME)) is None
    assert api.requests == []


def test_rejected_credentials_disable_the_provider(api, token_provider, sleeps):
    api.add(TOKEN_PATH, httpx.Response(401, json={"error": "invalid_client"}))

    assert asyncio.run(token_provider.get_token(RUN_TIME)) is None
    assert asyncio.run(token_provider.get_token(RUN_TIME)) is None

    assert token_provider.disabled
    assert len(api.calls(TOKEN_PATH)) == 1
    assert sleeps.delays == []


def test_transient_failure_is_retried_on_next_call_only(api, token_provider, sleeps):
    api.add(TOKEN_PATH, httpx.Response(502), token_response("tok-ok"))

    assert asyncio.run(token_provider.get_token(RUN_TIME)) is None
    assert len(api.calls(TOKEN_PATH)) == 1
    assert sleeps.delays == []

    assert asyncio.run(token_provider.get_token(RUN_TIME)) == "tok-ok"
    assert not token_provider.disabled


def test_shared_cache_is_keyed_by_credential_pair(api, fetcher, token_cache):
    api.add(TOKEN_PATH, token_response("tok-a"), token_response("tok-b"))
    first = OAuthTokenProvider(fetcher, cache=token_cache, client_id="a", client_secret="1", auth_url=AUTH_URL)
    second = OAuthTokenProvider(fetcher, cache=token_cache, client_id="b", client_secret="2", auth_url=AUTH_URL)

    assert asyncio.run(first.get_token(RUN_TIME)) == "tok-a"
    assert asyncio.run(second.get_token(RUN_TIME)) == "tok-b"
    assert asyncio.run(first.get_token(RUN_TIME)) == "tok-a"
    assert len(api.calls(TOKEN_PATH)) == 2
