import asyncio

import httpx

from app.services.moderation import check_moderation

from fakes import moderation_body


def _check(client, settings, text="hola"):
    return asyncio.run(check_moderation(client, text, settings=settings))


def test_flagged_verdict(upstream, settings):
    upstream.on("/v1/moderations", lambda request: httpx.Response(200, json=moderation_body(flagged=True)))

    verdict = _check(upstream.client(), settings)

    assert verdict.flagged is True
    assert verdict.raw_result["flagged"] is True
    assert upstream.bodies("/v1/moderations") == [{"input": "hola", "model": "omni-moderation-latest"}]


def test_network_error_fails_open(upstream, settings):
    def _refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.on("/v1/moderations", _refuse)

    assert _check(upstream.client(), settings).flagged is False


def test_error_status_fails_open(upstream, settings):
    upstream.on("/v1/moderations", lambda request: httpx.Response(503, json={"error": {"message": "down"}}))

    assert _check(upstream.client(), settings).flagged is False


def test_malformed_response_fails_open(upstream, settings):
    upstream.on("/v1/moderations", lambda request: httpx.Response(200, json={"results": []}))
    assert _check(upstream.client(), settings).flagged is False

    upstream.on("/v1/moderations", lambda request: httpx.Response(200, text="<html>oops</html>"))
    assert _check(upstream.client(), settings).flagged is False


def test_unconfigured_or_disabled_skips_call(upstream, make_settings):
    assert _check(None, make_settings()).flagged is False
    assert _check(upstream.client(), make_settings(moderation_enabled=False)).flagged is False
    assert upstream.calls == []


def test_flagged_with_unexpected_categories_shape(upstream, settings):
    body = {"id": "modr-1", "results": [{"flagged": True, "categories": ["violence"]}]}
    upstream.on("/v1/moderations", lambda request: httpx.Response(200, json=body))

    assert _check(upstream.client(), settings).flagged is True
