"""
Request Dispatcher

Executes one logical API request against the shared transport: attaches the
authentication headers, retries failed attempts according to the request
policy and promotes terminal 4xx/5xx responses to ApiError when the client
is fatal.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import httpx

from .auth import build_headers, masked
from .base_client import BODYLESS_METHODS, HTTPMethod, Transaction, parse_body
from .config import ClientConfig
from .exceptions import ApiError, NameAPIError, RequestTimeoutError, TransportError

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """
    Transport-facing half of the client.

    Holds no state between calls, so one instance is shared by every resource
    client derived from the same root and may run requests concurrently.
    """

    async def execute(self,
                      verb: Union[HTTPMethod, str],
                      path: str,
                      query: Optional[Mapping[str, Any]],
                      data: Any,
                      config: ClientConfig,
                      transport: httpx.AsyncClient,
                      headers: Optional[Mapping[str, str]] = None) -> Tuple[Any, Transaction]:
        """
        Issue a request, retrying on 4xx/5xx responses and transport errors

        Args:
            verb: HTTP method
            path: Resource path below the API root, e.g. /api/domains
            query: Query string parameters
            data: JSON body, ignored for GET and HEAD
            config: Shared client configuration
            transport: Shared HTTP client
            headers: Additional headers, the fixed ones override them

        Returns:
            Parsed response body and the raw transaction

        Raises:
            ProtocolError: If the verb is not supported
            TransportError: If the last attempt failed at the network level
            ApiError: If the last response was 4xx/5xx and the policy is fatal
        """
        method = verb if isinstance(verb, HTTPMethod) else HTTPMethod.parse(verb)
        policy = config.policy

        json_data = data if data is not None and method not in BODYLESS_METHODS else None
        request_headers = build_headers(config.credentials, headers)
        request_headers.setdefault("User-Agent", config.identifier)
        # Per-request settings so an injected transport still honours the config
        request = transport.build_request(
            method.value,
            f"{config.url}{path}",
            params=query or None,
            json=json_data,
            headers=request_headers,
            timeout=httpx.Timeout(policy.timeout),
        )
        descriptor = {"method": method.value, "url": str(request.url)}
        transaction = Transaction(request=request)

        last_exception: Optional[NameAPIError] = None
        for attempt in range(policy.retries + 1):
            transaction.attempts = attempt + 1
            last_exception = None

            if policy.debug:
                self._log_request(request)

            try:
                logger.debug(f"Making {method.value} request to {request.url} (attempt {attempt + 1})")
                response = await transport.send(request)

            except httpx.TimeoutException as e:
                last_exception = RequestTimeoutError(
                    f"Request timeout after {policy.timeout} seconds",
                    timeout_duration=policy.timeout,
                    request=descriptor,
                    attempts=attempt + 1,
                )
                logger.warning(f"Request timeout on attempt {attempt + 1}: {e}")

            except httpx.TransportError as e:
                last_exception = TransportError(
                    f"Network error: {str(e)}",
                    request=descriptor,
                    attempts=attempt + 1,
                )
                logger.warning(f"Network error on attempt {attempt + 1}: {e}")

            else:
                transaction.response = response
                if policy.debug:
                    self._log_response(response)

                if transaction.success:
                    return parse_body(response), transaction

                logger.warning(
                    f"{method.value} {request.url} returned {response.status_code} "
                    f"(attempt {attempt + 1}/{policy.retries + 1})"
                )

            # Don't retry on the last attempt
            if attempt < policy.retries:
                delay = policy.backoff_delay(attempt)
                if delay:
                    logger.info(f"Retrying in {delay} seconds...")
                    await asyncio.sleep(delay)

        if last_exception is not None:
            logger.error(f"{method.value} {request.url} failed after {transaction.attempts} attempts: {last_exception}")
            raise last_exception

        return self._finish(transaction, descriptor, policy.fatal)

    def _finish(self, transaction: Transaction, descriptor: Dict[str, str],
                fatal: bool) -> Tuple[Any, Transaction]:
        """Turn a terminal error response into a result or an ApiError"""
        response = transaction.response
        body = parse_body(response)

        if fatal:
            logger.error(
                f"{descriptor['method']} {descriptor['url']} failed with status "
                f"{response.status_code} after {transaction.attempts} attempts"
            )
            raise ApiError(
                f"{descriptor['method']} {descriptor['url']} failed with status {response.status_code}",
                status_code=response.status_code,
                response_data=body,
                request=descriptor,
            )

        return body, transaction

    @staticmethod
    def _log_request(request: httpx.Request) -> None:
        body = request.content.decode("utf-8", errors="replace")
        logger.info(f">>> {request.method} {request.url}\n{masked(request.headers)}\n{body}")

    @staticmethod
    def _log_response(response: httpx.Response) -> None:
        logger.info(f"<<< {response.status_code} {response.reason_phrase}\n{dict(response.headers)}\n{response.text}")
