"""
HTTP transports for JSON-RPC 2.0.

``RpcTransport`` blocks the calling thread; ``AsyncRpcTransport`` suspends
the calling task and accepts a cancellation event. Both own one pooled
httpx client for their lifetime and hold no other mutable state than the
request-id counter.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
import time
from typing import Any, Optional, Sequence, Union

import httpx

from ..config import EndpointConfig
from ..errors import ProtocolError, TransportError, TransportErrorKind
from .envelope import build_request, parse_response

logger = logging.getLogger(__name__)

# Methods whose params must not reach the logs.
_REDACTED_METHODS = frozenset({"personal_unlockAccount"})

_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


def _loggable_params(method: str, params: Sequence[Any]) -> Any:
    if method in _REDACTED_METHODS:
        return "<redacted>"
    return list(params)


def _transport_error(exc: httpx.HTTPError) -> TransportError:
    if isinstance(exc, httpx.TimeoutException):
        kind = TransportErrorKind.TIMEOUT
    elif isinstance(exc, httpx.ConnectError):
        kind = TransportErrorKind.CONNECT
    else:
        kind = TransportErrorKind.IO
    return TransportError(kind, str(exc) or type(exc).__name__)


def _deadline_error(timeout: float) -> TransportError:
    return TransportError(TransportErrorKind.TIMEOUT, f"no response within {timeout}s")


def _check_status(response: httpx.Response) -> None:
    if not response.is_success:
        raise TransportError(
            TransportErrorKind.HTTP_STATUS,
            f"HTTP {response.status_code} from {response.request.url}",
            status_code=response.status_code,
        )


def _decode_body(body: bytes) -> Any:
    # Parsed regardless of the response Content-Type.
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(f"Response body is not valid JSON: {exc}") from exc


class _BaseTransport:
    def __init__(
        self,
        endpoint: Union[str, EndpointConfig],
        timeout: Optional[float] = None,
    ) -> None:
        if isinstance(endpoint, EndpointConfig):
            config = endpoint if timeout is None else EndpointConfig(endpoint.url, timeout)
        elif timeout is None:
            config = EndpointConfig(endpoint)
        else:
            config = EndpointConfig(endpoint, timeout)
        self.config = config
        # next() on itertools.count is atomic under the GIL.
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def timeout(self) -> float:
        return self.config.timeout

    def _next_request(self, method: str, params: Sequence[Any]) -> dict[str, Any]:
        request = build_request(method, params, next(self._ids))
        logger.debug(
            "rpc request id=%d method=%s params=%s",
            request["id"],
            method,
            _loggable_params(method, params),
        )
        return request

    def _finish(self, body: bytes, request: dict[str, Any]) -> Any:
        try:
            return parse_response(_decode_body(body), request["id"])
        except ProtocolError as exc:
            logger.debug("rpc failure id=%d method=%s: %s", request["id"], request["method"], exc)
            raise


class RpcTransport(_BaseTransport):
    """
    Blocking JSON-RPC 2.0 client for one HTTP endpoint.

    Safe to share between threads: the id counter is the only mutable state
    and the underlying ``httpx.Client`` pools connections across threads.
    The configured timeout bounds the whole request, including a body the
    server trickles out slowly.
    """

    def __init__(
        self,
        endpoint: Union[str, EndpointConfig],
        timeout: Optional[float] = None,
        *,
        headers: Optional[dict[str, str]] = None,
        verify: Any = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(endpoint, timeout)
        self._client = httpx.Client(
            timeout=self.config.timeout,
            headers={**_HEADERS, **(headers or {})},
            verify=verify,
            transport=transport,
        )

    def call(self, method: str, params: Sequence[Any] = ()) -> Any:
        """
        Invoke ``method`` and return the ``result`` member of the response.

        Raises:
            TransportError: Connection failure, timeout, I/O error or non-2xx status
            ProtocolError: Body is not JSON or not a JSON-RPC 2.0 response
            RpcError: The node answered with an error object
        """
        request = self._next_request(method, params)
        try:
            body = self._post(request)
        except httpx.HTTPError as exc:
            error = _transport_error(exc)
            logger.debug("rpc failure id=%d method=%s: %s", request["id"], method, error)
            raise error from exc
        except TransportError as exc:
            logger.debug("rpc failure id=%d method=%s: %s", request["id"], method, exc)
            raise
        return self._finish(body, request)

    def _post(self, request: dict[str, Any]) -> bytes:
        # httpx timeouts apply per phase, so the body is read against a deadline.
        deadline = time.monotonic() + self.config.timeout
        with self._client.stream("POST", self.config.url, content=json.dumps(request)) as response:
            _check_status(response)
            chunks = []
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise _deadline_error(self.config.timeout)
        if time.monotonic() > deadline:
            raise _deadline_error(self.config.timeout)
        return b"".join(chunks)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RpcTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncRpcTransport(_BaseTransport):
    """
    asyncio JSON-RPC 2.0 client for one HTTP endpoint.

    The configured timeout bounds the whole request. Passing ``cancel``
    lets another task abort an in-flight request by setting the event.
    """

    def __init__(
        self,
        endpoint: Union[str, EndpointConfig],
        timeout: Optional[float] = None,
        *,
        headers: Optional[dict[str, str]] = None,
        verify: Any = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(endpoint, timeout)
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout,
            headers={**_HEADERS, **(headers or {})},
            verify=verify,
            transport=transport,
        )

    async def _post(self, request: dict[str, Any]) -> bytes:
        try:
            response = await asyncio.wait_for(
                self._client.post(self.config.url, content=json.dumps(request)),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise _deadline_error(self.config.timeout) from exc
        except httpx.HTTPError as exc:
            raise _transport_error(exc) from exc
        _check_status(response)
        return response.content

    async def call(
        self,
        method: str,
        params: Sequence[Any] = (),
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Any:
        """
        Invoke ``method`` and return the ``result`` member of the response.

        Setting ``cancel`` while the request is in flight aborts it and
        raises ``TransportError`` with kind ``canceled``.
        """
        request = self._next_request(method, params)
        if cancel is not None and cancel.is_set():
            raise TransportError(TransportErrorKind.CANCELED, f"{method} canceled before sending")

        pending = asyncio.ensure_future(self._post(request))
        try:
            if cancel is None:
                body = await pending
            else:
                body = await self._race(pending, cancel, method)
        except TransportError as exc:
            logger.debug("rpc failure id=%d method=%s: %s", request["id"], method, exc)
            raise
        finally:
            if not pending.done():
                pending.cancel()
        return self._finish(body, request)

    @staticmethod
    async def _race(
        pending: "asyncio.Future[bytes]",
        cancel: asyncio.Event,
        method: str,
    ) -> bytes:
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({pending, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
        if pending.done():
            return pending.result()
        pending.cancel()
        try:
            await pending
        except asyncio.CancelledError:
            pass
        raise TransportError(TransportErrorKind.CANCELED, f"{method} canceled in flight")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncRpcTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
