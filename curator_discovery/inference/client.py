"""Single-turn completion client with key rotation, backoff and model fallback."""

import asyncio
import logging
import math
import time
from typing import Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import (
    ConfigurationError,
    EmptyCompletionError,
    InferenceError,
    ModelNotFoundError,
    ProviderHTTPError,
)
from .credentials import CredentialRotator, mask
from .providers.base import ProviderAdapter
from .resolver import ModelResolver, ResolvedModel
from .types import CompletionOptions, CompletionResult

logger = logging.getLogger(__name__)

INFERENCE_TIMEOUT = httpx.Timeout(60.0, connect=15.0)

RETRYABLE_ERRORS = (ProviderHTTPError, EmptyCompletionError, httpx.HTTPError, ValueError)

LogFn = Callable[[str], None]
SleepFn = Callable[[float], Awaitable[None]]


def _noop_log(message: str) -> None:
    pass


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Seconds from a ``Retry-After`` header; HTTP-date and non-finite values are ignored."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return max(0.0, seconds)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])[:200]
        if isinstance(error, str):
            return error[:200]
    return response.text[:200]


class InferenceClient:
    """Provider-agnostic completion client.

    One instance per provider; the provider-specific parts are delegated to a
    ``ProviderAdapter``. Rate limits (429/503) cool the key down and retry on
    another key, 404 forces model re-resolution, anything else is retried
    with exponential backoff until the adapter's attempt ceiling.
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        rotator: CredentialRotator,
        resolver: Optional[ModelResolver] = None,
        sleep: SleepFn = asyncio.sleep,
        timeout: httpx.Timeout = INFERENCE_TIMEOUT,
        max_credential_waits: int = 3,
        credential_wait_seconds: float = 2.0,
    ) -> None:
        self._adapter = adapter
        self._rotator = rotator
        self._resolver = resolver
        self._sleep = sleep
        self._timeout = timeout
        self._max_credential_waits = max_credential_waits
        self._credential_wait_seconds = credential_wait_seconds
        self._backoff = wait_exponential(
            multiplier=adapter.base_backoff_seconds,
            max=adapter.max_backoff_seconds,
        )
        self.last_attempts = 0
        self.last_model: Optional[str] = None

    @property
    def provider(self) -> str:
        return self._adapter.name

    @property
    def rotator(self) -> CredentialRotator:
        return self._rotator

    async def complete(
        self,
        prompt: str,
        options: Optional[CompletionOptions] = None,
        log: Optional[LogFn] = None,
    ) -> CompletionResult:
        """Run one completion.

        Raises:
            ConfigurationError: no credentials configured for the provider.
            InferenceError: every attempt failed; carries the last error.
        """
        if self._rotator.count == 0:
            raise ConfigurationError(
                f"No {self._adapter.name} API keys found. Please check .env file."
            )
        options = options or CompletionOptions()
        log = log or _noop_log
        self.last_attempts = 0

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._adapter.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as http:
                async for attempt in retrying:
                    with attempt:
                        result = await self._attempt(http, prompt, options, log)
        except ConfigurationError:
            raise
        except RETRYABLE_ERRORS as exc:
            raise InferenceError(
                f"{self._adapter.name} call failed after {self.last_attempts} attempts. "
                f"Last error: {exc}",
                model=self.last_model,
            ) from exc
        return result

    # ------------------------------------------------------------------
    # One attempt
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        http: httpx.AsyncClient,
        prompt: str,
        options: CompletionOptions,
        log: LogFn,
    ) -> CompletionResult:
        self.last_attempts += 1
        credential = await self._acquire_credential(log)
        model = await self._model_for(http, credential, options, log)
        self.last_model = model.name

        url, headers, payload = self._adapter.build_request(prompt, options, model, credential)
        start = time.monotonic()
        try:
            response = await http.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.warning(
                "inference provider=%s model=%s attempt=%d status=error result=failure error=%s",
                self._adapter.name, model.name, self.last_attempts, exc,
            )
            raise
        duration_ms = (time.monotonic() - start) * 1000
        status = response.status_code

        if status in (429, 503):
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            self._rotator.mark_cooldown(credential, retry_after or self._adapter.cooldown_seconds)
            log(f"⚠️ Rate limit ({status}) on key {mask(credential)}. Retrying...")
            logger.warning(
                "inference provider=%s model=%s attempt=%d status=%d duration_ms=%.0f result=rate_limited",
                self._adapter.name, model.name, self.last_attempts, status, duration_ms,
            )
            raise ProviderHTTPError(status, "rate limited", retry_after=retry_after)

        if status == 404:
            log(f"⚠️ Model {model.name} not found (404). Re-resolving...")
            if self._resolver is not None:
                self._resolver.invalidate()
            raise ModelNotFoundError(model.name)

        if not response.is_success:
            message = _error_message(response)
            logger.warning(
                "inference provider=%s model=%s attempt=%d status=%d duration_ms=%.0f result=failure error=%s",
                self._adapter.name, model.name, self.last_attempts, status, duration_ms, message,
            )
            raise ProviderHTTPError(status, message)

        text, sources = self._adapter.parse_response(response.json())
        logger.info(
            "inference provider=%s model=%s attempt=%d status=%d duration_ms=%.0f result=success",
            self._adapter.name, model.name, self.last_attempts, status, duration_ms,
        )
        return CompletionResult(text=text, sources=sources, model_used=model.name)

    async def _acquire_credential(self, log: LogFn) -> str:
        for _ in range(self._max_credential_waits):
            credential = self._rotator.pick()
            if credential is not None:
                return credential
            log(f"⏳ All {self._adapter.name} keys cooling down. Waiting...")
            await self._sleep(self._credential_wait_seconds)
            self._rotator.reset_all()
        credential = self._rotator.pick()
        if credential is None:
            raise InferenceError(f"All {self._adapter.name} API keys are cooling down")
        return credential

    async def _model_for(
        self,
        http: httpx.AsyncClient,
        credential: str,
        options: CompletionOptions,
        log: LogFn,
    ) -> ResolvedModel:
        if self._resolver is not None:
            return await self._resolver.resolve(http, credential, log)
        return self._adapter.default_model(options.model)

    def _wait(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, ModelNotFoundError):
            return 0.0
        if isinstance(exc, ProviderHTTPError) and exc.retry_after is not None:
            # the key itself stays cooling for the full Retry-After
            return min(exc.retry_after, self._adapter.max_backoff_seconds)
        return self._backoff(retry_state)
