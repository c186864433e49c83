from dataclasses import dataclass, field
from decimal import Decimal
import json
from typing import Any, Dict, Optional

import httpx

from storefront.api.constants import logger
from storefront.common.custom_exceptions import TransportFailure, classify_http_error
from storefront.config.settings import Settings, config_settings


@dataclass
class ClientRequest:
    """One outgoing call as seen by the middleware stack."""
    method: str
    path: str
    body: Any = None
    params: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    # credential attached by the auth middleware, if any
    token: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.token is not None


def _json_default(value: Any) -> Any:
    # amounts go out as their exact decimal text, never through float
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def _decode_body(resp: httpx.Response) -> Any:
    if not resp.content or not resp.content.strip():
        return None
    # incoming amounts are parsed straight into Decimal
    return json.loads(resp.content, parse_float=Decimal)


class Transport:
    """
    Executes requests against the configured base URL.
    Bodies are sent and received as JSON; non-2xx statuses and transport level
    errors are raised as classified ShopClientError subclasses.
    """

    def __init__(self, settings: Settings = config_settings, http_client: Optional[httpx.AsyncClient] = None):
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=settings.API_BASE_URL,
                timeout=settings.REQUEST_TIMEOUT,
                headers={"Accept": "application/json"},
            )
        self._client = http_client

    async def request(self, method: str, path: str, body: Any = None, params: Optional[Dict[str, Any]] = None,
                      headers: Optional[Dict[str, str]] = None) -> Any:
        return await self.send(ClientRequest(method=method, path=path, body=body, params=params, headers=dict(headers or {})))

    async def send(self, request: ClientRequest) -> Any:
        kwargs: Dict[str, Any] = {"headers": request.headers}
        if request.params:
            kwargs["params"] = request.params
        if request.body is not None:
            kwargs["content"] = json.dumps(request.body, default=_json_default)
            request.headers.setdefault("Content-Type", "application/json")

        try:
            resp = await self._client.request(request.method, request.path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("transport.timeout", extra={"method": request.method, "path": request.path})
            raise TransportFailure("request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("transport.unreachable", extra={"method": request.method, "path": request.path,
                                                          "reason": type(exc).__name__})
            raise TransportFailure(f"network error: {type(exc).__name__}") from exc

        if not resp.is_success:
            try:
                payload = _decode_body(resp)
            except ValueError:
                payload = resp.text
            err = classify_http_error(resp.status_code, payload)
            logger.info("transport.failed_status", extra={"method": request.method, "path": request.path,
                                                         "status_code": resp.status_code,
                                                         "failure": type(err).__name__})
            raise err

        try:
            data = _decode_body(resp)
        except ValueError as exc:
            logger.error("transport.malformed_response", extra={"method": request.method, "path": request.path,
                                                               "status_code": resp.status_code})
            raise TransportFailure("malformed response body", status_code=resp.status_code) from exc

        logger.debug("transport.ok", extra={"method": request.method, "path": request.path,
                                           "status_code": resp.status_code})
        return data

    async def aclose(self):
        await self._client.aclose()
