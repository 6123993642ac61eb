import json

import httpx
import pytest

from dnsr.errors import ProviderReadError
from dnsr.providers import HttpProvider, InMemoryProvider, Provider

from conftest import rec


def _provider(handler, token=None):
    return HttpProvider("http://dns.test/api/", token=token, transport=httpx.MockTransport(handler))


def test_in_memory_provider_roundtrip():
    p = InMemoryProvider([rec("a.example.com", "1.1.1.1")])
    assert isinstance(p, Provider)
    p.add_record(rec("b.example.com", "2.2.2.2"))
    p.update_record(rec("a.example.com", "3.3.3.3"))
    p.remove_record(rec("b.example.com"))
    p.remove_record(rec("missing.example.com"))
    assert p.list_records() == [rec("a.example.com", "3.3.3.3")]


def test_http_list_records_parses_payload_and_sends_token():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json=[
                {"name": "Web.Stack.Env.Example.com.", "type": "A", "ttl": 300, "values": ["10.0.0.1"]},
                {"name": "x.example.com", "values": []},
            ],
        )

    records = _provider(handler, token="s3cret").list_records()
    assert seen == {"url": "http://dns.test/api/records", "auth": "Bearer s3cret"}
    assert records[0] == rec("web.stack.env.example.com", "10.0.0.1")
    assert records[1].values == () and records[1].ttl == 300


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"records": []}),
        httpx.Response(200, json=[{"values": ["1.1.1.1"]}]),
    ],
)
def test_http_list_records_failures_are_provider_read_errors(response):
    with pytest.raises(ProviderReadError):
        _provider(lambda request: response).list_records()


def test_http_list_records_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProviderReadError):
        _provider(handler).list_records()


def test_http_mutations_use_expected_routes():
    calls = []

    def handler(request):
        body = json.loads(request.content) if request.content else None
        calls.append((request.method, request.url.path, body))
        return httpx.Response(404 if request.method == "DELETE" else 200)

    p = _provider(handler)
    r = rec("web.stack.env.example.com", "10.0.0.1", "10.0.0.2")
    p.add_record(r)
    p.update_record(r, timeout=1.5)
    p.remove_record(r)

    payload = {"name": "web.stack.env.example.com", "type": "A", "ttl": 300, "values": ["10.0.0.1", "10.0.0.2"]}
    assert calls == [
        ("POST", "/api/records", payload),
        ("PUT", "/api/records/web.stack.env.example.com", payload),
        ("DELETE", "/api/records/web.stack.env.example.com", None),
    ]


def test_http_mutation_error_propagates():
    p = _provider(lambda request: httpx.Response(409, text="conflict"))
    with pytest.raises(httpx.HTTPStatusError):
        p.add_record(rec("web.example.com", "1.1.1.1"))


def test_http_timeout_is_capped_by_remaining_time():
    p = _provider(lambda request: httpx.Response(200))
    assert p._timeout(None) == 10.0
    assert p._timeout(2.5) == 2.5
    assert p._timeout(99) == 10.0
    assert p._timeout(-1) > 0
