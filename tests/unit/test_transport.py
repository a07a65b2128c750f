"""Unit tests for the HTTP transport."""

import httpx
import pytest

from newsgate.data.transport import HttpTransport, TransportResult


def make_transport(handler, api_key="secret"):
    client = httpx.Client(base_url="https://api.test", transport=httpx.MockTransport(handler))
    return HttpTransport("https://api.test", api_key=api_key, client=client)


class TestTransportResult:
    """Test result helpers."""

    def test_successful_boundary(self):
        assert TransportResult(399).successful
        assert not TransportResult(400).successful

    def test_json_only_for_mappings(self):
        assert TransportResult(200, {'a': 1}).json() == {'a': 1}
        assert TransportResult(200, "plain").json() == {}
        assert TransportResult(200, [1, 2]).json() == {}

    def test_error_message(self):
        assert TransportResult(500, {'message': 'm', 'error': 'e'}).error_message == "m"
        assert TransportResult(500, {'error': 'e'}).error_message == "e"
        assert TransportResult(502, "Bad gateway").error_message == "HTTP 502"


class TestHttpTransport:
    """Test request execution over httpx."""

    def test_get_json(self):
        seen = {}

        def handler(request):
            seen['url'] = request.url
            return httpx.Response(200, json={'data': []})

        result = make_transport(handler).get("/api/news", {'ticker': 'AAPL', 'limit': None})

        assert result == TransportResult(200, {'data': []})
        assert seen['url'].path == "/api/news"
        assert seen['url'].params['ticker'] == "AAPL"
        assert seen['url'].params['api_key'] == "secret"
        assert 'limit' not in seen['url'].params

    def test_list_params_repeat(self):
        seen = {}

        def handler(request):
            seen['sentiment'] = request.url.params.get_list('sentiment')
            return httpx.Response(200, json={})

        make_transport(handler).get("/feed", {'sentiment': ['trumpy', 'grumpy']})

        assert seen['sentiment'] == ['trumpy', 'grumpy']

    def test_no_api_key(self):
        seen = {}

        def handler(request):
            seen['params'] = dict(request.url.params)
            return httpx.Response(200, text="ok")

        make_transport(handler, api_key=None).get("/cdn-cgi/trace")

        assert 'api_key' not in seen['params']

    def test_text_body(self):
        result = make_transport(lambda request: httpx.Response(200, text="fl=1\nip=2")).get("/trace")

        assert result.body == "fl=1\nip=2"

    def test_error_status_returned(self):
        handler = lambda request: httpx.Response(429, json={'message': 'slow down'})

        result = make_transport(handler).get("/api/news")

        assert result.status_code == 429
        assert not result.successful
        assert result.error_message == "slow down"

    def test_network_error_becomes_503(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = make_transport(handler).get("/api/news")

        assert result.status_code == 503
        assert result.body['error'] == "Transport error"
        assert "connection refused" in result.error_message

    def test_context_manager_closes_client(self):
        transport = make_transport(lambda request: httpx.Response(200, json={}))

        with transport:
            pass

        assert transport.client.is_closed
