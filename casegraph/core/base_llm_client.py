import asyncio
from typing import Any, Dict, List, Optional

import httpx
from httpx import HTTPStatusError, TimeoutException

from casegraph.core.exceptions import APIClientError, APITimeoutError
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseLLMClient:
    """Client for OpenAI-compatible chat-completion endpoints.

    Handles HTTP requests, retries with exponential backoff, timeout
    management and error logging. Callers get either a response payload or
    an ``APIClientError``; nothing else escapes.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        timeout: int = 60,
        max_retries: int = 3,
        retry_delay: int = 2,
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for authentication
            base_url: Full chat-completions URL
            model: Model identifier sent with every request
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts
            retry_delay: Base delay for exponential backoff
        """
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.logger = LOGGER

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.0) -> str:
        """Run one chat completion and return the assistant message text.

        Raises:
            APIClientError: If the call fails or the response has no content
        """
        payload = {
            "model": self.model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        data = await self.call_api(payload=payload)

        choices: List[Dict[str, Any]] = data.get("choices") or []
        if not choices:
            raise APIClientError("LLM response contained no choices")
        content = (choices[0].get("message") or {}).get("content")
        if not content:
            raise APIClientError("LLM response contained an empty message")
        return content

    async def call_api(
        self,
        endpoint: str = "",
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST to the API with retry logic.

        Args:
            endpoint: API endpoint (appended to base_url)
            payload: JSON payload
            headers: Additional headers

        Returns:
            Parsed JSON response

        Raises:
            APIClientError: If the API call fails after retries
            APITimeoutError: If the API call times out after retries
        """
        url = f"{self.base_url}{endpoint}" if endpoint else self.base_url

        request_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        self.logger.debug(f"Calling LLM API: {url}", extra={"timeout": self.timeout})

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(self.max_retries):
                try:
                    response = await client.post(url, headers=request_headers, json=payload)
                    response.raise_for_status()
                    return response.json()

                except HTTPStatusError as e:
                    await self._handle_http_error(e, attempt, url)

                except TimeoutException as e:
                    self.logger.warning(
                        f"API Timeout (Attempt {attempt + 1}/{self.max_retries})",
                        extra={"url": url},
                    )
                    if attempt >= self.max_retries - 1:
                        raise APITimeoutError(f"API Timeout after {self.max_retries} attempts", e) from e
                    await self._wait_before_retry(attempt)

                except (httpx.HTTPError, ValueError) as e:
                    self.logger.warning(
                        f"API Error (Attempt {attempt + 1}/{self.max_retries})",
                        extra={"url": url, "error": str(e)},
                    )
                    if attempt >= self.max_retries - 1:
                        raise APIClientError(f"API Error: {str(e)}", e) from e
                    await self._wait_before_retry(attempt)

        raise APIClientError(f"Failed to call API {url} after {self.max_retries} attempts")

    async def _handle_http_error(self, error: HTTPStatusError, attempt: int, url: str):
        """Handle HTTP status errors."""
        status_code = error.response.status_code
        error_body = error.response.text

        self.logger.warning(
            f"API HTTP error (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url, "status_code": status_code, "error_body": error_body[:500]},
        )

        # Client errors are final, except rate limiting
        if 400 <= status_code < 500 and status_code != 429:
            raise APIClientError(f"API Client Error {status_code}: {error_body[:200]}", error) from error

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APIClientError(f"API HTTP Error {status_code} after retries", error) from error

    async def _wait_before_retry(self, attempt: int):
        """Exponential backoff wait."""
        await asyncio.sleep(self.retry_delay * (2 ** attempt))
