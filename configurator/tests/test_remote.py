"""Tests for the HTTP CatalogBackend."""

import json
from decimal import Decimal

import httpx
import pytest
from django.core.exceptions import ImproperlyConfigured

from configurator.adapters import RemoteCatalogBackend
from configurator.engine import calculate_price, check_availability, resolve_defaults
from configurator.exceptions import ConfiguratorError, TransientComputationFailure
from configurator.protocols import CatalogBackend


def _backend(handler, **kwargs):
    client = httpx.Client(base_url="https://catalog.test/api", transport=httpx.MockTransport(handler))
    kwargs.setdefault("retry_wait", 0)
    return RemoteCatalogBackend(client=client, **kwargs)


class Recorder:
    """Replays queued responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class TestConstruction:
    def test_implements_protocol(self):
        assert isinstance(_backend(Recorder()), CatalogBackend)

    def test_uses_configured_base_url(self):
        backend = RemoteCatalogBackend()

        assert str(backend.client.base_url).startswith("https://catalog.test/api")
        assert backend.max_attempts == 2
        backend.close()

    def test_requires_base_url(self, settings):
        settings.CONFIGURATOR = {}

        with pytest.raises(ImproperlyConfigured):
            RemoteCatalogBackend()


class TestEndpoints:
    def test_definition(self, rig):
        recorder = Recorder(httpx.Response(200, json=rig.as_dict()))

        definition = _backend(recorder).get_product_definition(rig.id)

        assert definition == rig
        assert recorder.requests[0].method == "GET"
        assert recorder.requests[0].url.path == "/api/products/3/definition"

    def test_definition_not_found(self):
        assert _backend(Recorder(httpx.Response(404))).get_product_definition(1) is None

    def test_price_posts_selection(self, desk):
        selection = resolve_defaults(desk)
        selection.set_value(desk.axis(10), 102)
        breakdown = calculate_price(desk, selection)
        recorder = Recorder(httpx.Response(200, json=breakdown.as_dict()))

        result = _backend(recorder).calculate_price(desk.id, selection)

        assert result == breakdown
        assert json.loads(recorder.requests[0].content) == selection.to_dict()
        assert recorder.requests[0].url.path == "/api/products/1/price"

    def test_availability(self, rig):
        selection = resolve_defaults(rig)
        verdict = check_availability(rig, selection)
        recorder = Recorder(httpx.Response(200, json=verdict.as_dict()))

        assert _backend(recorder).check_availability(rig.id, selection) == verdict

    def test_bundle_item_stock(self):
        recorder = Recorder(httpx.Response(200, json={"available": 4}))

        assert _backend(recorder).get_bundle_item_stock(50, {60: 601}) == 4
        assert json.loads(recorder.requests[0].content) == {"selection": {"60": 601}}

    def test_unknown_bundle_item(self):
        with pytest.raises(ConfiguratorError) as exc:
            _backend(Recorder(httpx.Response(404))).get_bundle_item_stock(50, {})

        assert exc.value.code == "UNKNOWN_BUNDLE_ITEM"


class TestRetries:
    def test_retries_once_on_server_error(self, desk):
        breakdown = calculate_price(desk, resolve_defaults(desk))
        recorder = Recorder(httpx.Response(503), httpx.Response(200, json=breakdown.as_dict()))

        result = _backend(recorder).calculate_price(desk.id, resolve_defaults(desk))

        assert result.total == Decimal("400.00")
        assert len(recorder.requests) == 2

    def test_gives_up_after_second_failure(self, desk):
        recorder = Recorder(httpx.Response(502), httpx.Response(503), httpx.Response(200, json={}))

        with pytest.raises(TransientComputationFailure) as exc:
            _backend(recorder).calculate_price(desk.id, resolve_defaults(desk))

        assert len(recorder.requests) == 2
        assert exc.value.code == "TRANSIENT_FAILURE"

    def test_connection_errors_are_transient(self, desk):
        recorder = Recorder(httpx.ConnectError("refused"), httpx.ReadTimeout("slow"))

        with pytest.raises(TransientComputationFailure):
            _backend(recorder).check_availability(desk.id, resolve_defaults(desk))

        assert len(recorder.requests) == 2

    def test_rate_limit_is_retried(self):
        recorder = Recorder(httpx.Response(429), httpx.Response(200, json={"available": None}))

        assert _backend(recorder).get_bundle_item_stock(1, {}) is None
        assert len(recorder.requests) == 2

    def test_client_errors_are_not_retried(self, desk):
        recorder = Recorder(httpx.Response(422, json={"code": "INVALID_VALUE", "message": "Unknown option 7"}))

        with pytest.raises(ConfiguratorError) as exc:
            _backend(recorder).calculate_price(desk.id, resolve_defaults(desk))

        assert exc.value.code == "INVALID_VALUE"
        assert exc.value.message == "Unknown option 7"
        assert exc.value.data["status"] == 422
        assert len(recorder.requests) == 1

    def test_single_attempt_configuration(self, desk):
        recorder = Recorder(httpx.Response(500), httpx.Response(500))

        with pytest.raises(TransientComputationFailure):
            _backend(recorder, max_attempts=1).calculate_price(desk.id, resolve_defaults(desk))

        assert len(recorder.requests) == 1
