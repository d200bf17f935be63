import json

import httpx
import pytest

from smallbank_bench.errors import TransportError
from smallbank_bench.transport import HttpTransport


def make_transport(handler, path_prefix="/app"):
    return HttpTransport("http://bank.test", path_prefix=path_prefix, transport=httpx.MockTransport(handler))


def test_submit_posts_json_to_method_path():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"balance": 42})

    with make_transport(handler) as transport:
        response = transport.submit("SmallBank_balance", b'{"account":"3"}')

    assert json.loads(response.body) == {"balance": 42}
    assert response.ok
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/app/SmallBank_balance"
    assert requests[0].headers["content-type"] == "application/json"
    assert json.loads(requests[0].content) == {"account": "3"}


def test_failure_status_and_body_are_returned():
    def handler(request):
        return httpx.Response(500, text="Not enough money in savings account")

    with make_transport(handler) as transport:
        response = transport.submit("SmallBank_transact_savings", b"{}")

    assert not response.ok
    assert response.status == 500
    assert response.text == "Not enough money in savings account"


@pytest.mark.parametrize("path_prefix, expected", [("", "/SmallBank_amalgamate"), ("api/v1/", "/api/v1/SmallBank_amalgamate")])
def test_path_prefix(path_prefix, expected):
    paths = []

    def handler(request):
        paths.append(request.url.path)
        return httpx.Response(200)

    with make_transport(handler, path_prefix) as transport:
        transport.submit("SmallBank_amalgamate", b"{}")

    assert paths == [expected]


def test_network_failure_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with make_transport(handler) as transport:
        with pytest.raises(TransportError, match="SmallBank_balance"):
            transport.submit("SmallBank_balance", b"{}")
