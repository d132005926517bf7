"""OpenAI client wrapper that posts chat payloads to a resolved URL."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
import openai
from openai import Omit, OpenAI  # type: ignore

from .errors import EndpointRejected, TransportFailure
from .service_config import EndpointCredential

logger = logging.getLogger(__name__)


class OpenAIClientWrapper:
    """Thin wrapper around the OpenAI Python SDK.

    The configured ``chat_url`` is a full URL rather than a base URL, so the
    request goes through the SDK's raw ``post()`` with an absolute URL. The SDK
    still supplies the bearer ``Authorization`` header and JSON encoding.
    """

    def __init__(self, client: OpenAI):
        self.client = client

    @classmethod
    def for_credential(
        cls,
        credential: EndpointCredential,
        *,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> "OpenAIClientWrapper":
        client_kwargs: Dict[str, Any] = {
            "api_key": credential.api_key,
            # Retry policy belongs to the caller.
            "max_retries": 0,
            # The SDK fills these from OPENAI_ORG_ID / OPENAI_PROJECT_ID; the
            # chat URL may not be OpenAI's, so only the bearer key is sent.
            "default_headers": {
                "OpenAI-Organization": Omit(),
                "OpenAI-Project": Omit(),
            },
        }
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if http_client is not None:
            client_kwargs["http_client"] = http_client
        return cls(OpenAI(**client_kwargs))  # type: ignore[arg-type]

    def post_chat(self, url: str, payload: Dict[str, Any]) -> Any:
        """POST *payload* to *url* and return the decoded JSON body.

        Raises :class:`EndpointRejected` for non-2xx answers and
        :class:`TransportFailure` for everything that prevents a readable
        response (connection errors, timeouts, non-JSON bodies).
        """
        try:
            response = self.client.post(url, body=payload, cast_to=httpx.Response)
        except openai.APIStatusError as e:
            logger.warning("Endpoint rejected request with status %s", e.status_code)
            raise EndpointRejected(e.status_code, e.message) from e
        except openai.APIConnectionError as e:  # includes APITimeoutError
            logger.warning("Request to %s failed: %s", url, e)
            raise TransportFailure(f"Network Error: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(f"Network Error: undecodable response body: {e}") from e

    def close(self) -> None:
        self.client.close()
