"""
CatalogBackend implementation over HTTP.

Price and stock come from the remote service, which is authoritative.
Transport errors, timeouts, 429 and 5xx responses are retried once (see
REMOTE_MAX_ATTEMPTS) and then surface as TransientComputationFailure, which
the recalculation coordinator turns into a stale-price warning.

Endpoints (relative to CONFIGURATOR["REMOTE_BASE_URL"]):
    GET  /products/{id}/definition      -> ProductDefinition.as_dict()
    POST /bundle-items/{id}/stock       {"selection": {...}} -> {"available": int | null}
    POST /products/{id}/price           SelectionState.to_dict() -> PriceBreakdown.as_dict()
    POST /products/{id}/availability    SelectionState.to_dict() -> AvailabilityVerdict.as_dict()
"""

import logging

import httpx
from django.core.exceptions import ImproperlyConfigured
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed

from configurator.conf import configurator_settings
from configurator.exceptions import ConfiguratorError, TransientComputationFailure
from configurator.protocols import AvailabilityVerdict, CatalogBackend, PriceBreakdown, ProductDefinition
from configurator.selection import SelectionState

logger = logging.getLogger(__name__)


class RetryableResponse(Exception):
    """A response worth asking again for (429 or 5xx)."""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code} from {response.request.url}")


TRANSIENT_ERRORS = (httpx.TransportError, RetryableResponse)


class RemoteCatalogBackend:
    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        retry_wait: float | None = None,
    ):
        """
        Args:
            base_url: Service root; defaults to CONFIGURATOR["REMOTE_BASE_URL"]
            client: Preconfigured httpx.Client (tests pass one on a MockTransport)
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per call, 2 = one retry
            retry_wait: Seconds between attempts
        """
        if client is None:
            base_url = base_url or configurator_settings.REMOTE_BASE_URL
            if not base_url:
                raise ImproperlyConfigured("CONFIGURATOR['REMOTE_BASE_URL'] is required for RemoteCatalogBackend")
            client = httpx.Client(
                base_url=base_url,
                timeout=timeout if timeout is not None else configurator_settings.REMOTE_TIMEOUT_SECONDS,
            )
        self.client = client
        self.max_attempts = max_attempts or configurator_settings.REMOTE_MAX_ATTEMPTS
        self.retry_wait = retry_wait if retry_wait is not None else configurator_settings.REMOTE_RETRY_WAIT_SECONDS

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    response = self.client.request(method, path, **kwargs)
                    if response.status_code == 429 or response.is_server_error:
                        raise RetryableResponse(response)
        except TRANSIENT_ERRORS as e:
            logger.warning("%s %s failed after %d attempt(s): %s", method, path, self.max_attempts, e)
            raise TransientComputationFailure(method=method, path=path, reason=str(e)) from e
        return response

    def _raise_for_status(self, response: httpx.Response, **data) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        if response.status_code == 404:
            code = body.get("code") or "PRODUCT_NOT_FOUND"
        else:
            code = body.get("code") or "INVALID_CONFIGURATION"
        raise ConfiguratorError(code, body.get("message", ""), status=response.status_code, **data)

    # ------------------------------------------------------------------
    # CatalogBackend
    # ------------------------------------------------------------------

    def get_product_definition(self, product_id: int) -> ProductDefinition | None:
        response = self._request("GET", f"/products/{product_id}/definition")
        if response.status_code == 404:
            return None
        self._raise_for_status(response, product_id=product_id)
        return ProductDefinition.from_dict(response.json())

    def get_bundle_item_stock(self, bundle_item_id: int, nested_selection: dict) -> int | None:
        payload = {"selection": {str(axis_id): value for axis_id, value in (nested_selection or {}).items()}}
        response = self._request("POST", f"/bundle-items/{bundle_item_id}/stock", json=payload)
        if response.status_code == 404:
            raise ConfiguratorError("UNKNOWN_BUNDLE_ITEM", bundle_item_id=bundle_item_id)
        self._raise_for_status(response, bundle_item_id=bundle_item_id)
        return response.json().get("available")

    def calculate_price(self, product_id: int, selection: SelectionState) -> PriceBreakdown:
        response = self._request("POST", f"/products/{product_id}/price", json=selection.to_dict())
        self._raise_for_status(response, product_id=product_id)
        return PriceBreakdown.from_dict(response.json())

    def check_availability(self, product_id: int, selection: SelectionState) -> AvailabilityVerdict:
        response = self._request("POST", f"/products/{product_id}/availability", json=selection.to_dict())
        self._raise_for_status(response, product_id=product_id)
        return AvailabilityVerdict.from_dict(response.json())


# Verify implementation at import time
if not issubclass(RemoteCatalogBackend, CatalogBackend):
    raise TypeError("RemoteCatalogBackend does not implement CatalogBackend protocol")
