import asyncio
import json

import httpx
import pytest

from visit_agenda.errors import DecodingError, GatewayUnavailable, InvalidURL, ServerError
from visit_agenda.schemas.visits import VisitPayload
from visit_agenda.services.submission.gateway import HttpVisitGateway

BASE_URL = "http://visits.test/visits"


def _payload() -> VisitPayload:
    return VisitPayload(visit_id=1234, commercial_id=7, date="2025-01-02T09:00:00+00:00", client_ids=[10])


def _run(handler, action, token=None):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            gateway = HttpVisitGateway(base_url=BASE_URL, token=token, client=client)
            return await action(gateway)

    return asyncio.run(scenario())


def test_submit_visit_posts_payload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"ok": True})

    _run(handler, lambda gateway: gateway.submit_visit(_payload()), token="secret")

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == BASE_URL
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content) == {
        "visit_id": 1234,
        "commercial_id": 7,
        "date": "2025-01-02T09:00:00+00:00",
        "client_ids": [10],
    }


def test_submit_visit_non_2xx_raises_server_error_with_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Duplicate visit")

    with pytest.raises(ServerError) as excinfo:
        _run(handler, lambda gateway: gateway.submit_visit(_payload()))

    assert excinfo.value.message == "Duplicate visit"
    assert excinfo.value.status_code == 500


def test_fetch_recent_visits_sends_limit_and_decodes():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_payload().model_dump()])

    visits = _run(handler, lambda gateway: gateway.fetch_recent_visits(3))

    assert seen[0].method == "GET"
    assert seen[0].url.params["limit"] == "3"
    assert "Authorization" not in seen[0].headers
    assert visits == [_payload()]


def test_fetch_recent_visits_with_malformed_body_raises_decoding_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"visit_id": "abc"}])

    with pytest.raises(DecodingError):
        _run(handler, lambda gateway: gateway.fetch_recent_visits(3))


def test_transport_failure_raises_gateway_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GatewayUnavailable):
        _run(handler, lambda gateway: gateway.submit_visit(_payload()))


def test_invalid_base_url_is_rejected():
    with pytest.raises(InvalidURL):
        HttpVisitGateway(base_url="not a url")
