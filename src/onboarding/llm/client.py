"""
Onboarding - LLM Client.

Raw-text completions for the question oracle. Unlike structured-output
clients this returns the model's text untouched; recovery and validation
happen in onboarding.repair. One call per request, never retried here.

OpenAI-library errors are translated into OracleError kinds so callers
never need to import openai.
"""

import logging
import time
from abc import ABC, abstractmethod

import openai
from openai import AsyncOpenAI

from onboarding.config import OnboardingSettings, get_settings
from onboarding.errors import OracleError, OracleErrorKind
from onboarding.fallbacks import generate_mock_response
from onboarding.llm.prompt_logger import log_prompt

logger = logging.getLogger(__name__)


class OracleClient(ABC):
    """Anything that can turn a pair of prompts into completion text."""

    @abstractmethod
    async def complete(self, *, system_prompt: str, user_prompt: str, step: int) -> str:
        """
        Return the raw completion text.

        Raises:
            OracleError: transport, auth, rate-limit or empty-response failure
        """


def classify_openai_error(error: Exception) -> OracleError:
    """Map an openai exception onto the oracle error taxonomy."""
    status = getattr(error, "status_code", None)

    if isinstance(error, openai.APITimeoutError):
        kind = OracleErrorKind.TIMEOUT
    elif isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        kind = OracleErrorKind.AUTH_FAILURE
    elif isinstance(error, openai.RateLimitError):
        kind = OracleErrorKind.RATE_LIMITED
    elif isinstance(error, (openai.BadRequestError, openai.UnprocessableEntityError)):
        kind = OracleErrorKind.BAD_REQUEST
    else:
        kind = OracleErrorKind.UNKNOWN_TRANSPORT_ERROR

    return OracleError(kind, str(error), status_code=status)


class OpenAIOracleClient(OracleClient):
    """Chat-completions client for any OpenAI-compatible endpoint."""

    def __init__(
        self,
        settings: OnboardingSettings | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client or AsyncOpenAI(
            api_key=self._settings.openai_api_key,
            base_url=self._settings.openai_base_url,
            timeout=self._settings.oracle_timeout_seconds,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._settings.oracle_model

    async def complete(self, *, system_prompt: str, user_prompt: str, step: int) -> str:
        start = time.monotonic()
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self._settings.oracle_temperature,
                max_tokens=self._settings.oracle_max_tokens,
            )
        except openai.OpenAIError as e:
            oracle_error = classify_openai_error(e)
            logger.error(f"Oracle call failed ({oracle_error.kind.value}): {e}")
            log_prompt(
                model=self.model,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                step=step,
                error=str(e),
            )
            raise oracle_error from e

        duration_ms = int((time.monotonic() - start) * 1000)
        text = completion.choices[0].message.content if completion.choices else None

        log_prompt(
            model=self.model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            step=step,
            raw_response=text,
            duration_ms=duration_ms,
        )

        if not text:
            raise OracleError(OracleErrorKind.EMPTY_RESPONSE, "No response from oracle")

        logger.debug(f"Oracle responded in {duration_ms} ms ({len(text)} chars)")
        return text


class MockOracleClient(OracleClient):
    """Offline oracle serving canned questions. Used when no API key is set."""

    model = "mock"

    async def complete(self, *, system_prompt: str, user_prompt: str, step: int) -> str:
        response = generate_mock_response(max(step - 1, 0))
        return response.model_dump_json(by_alias=True, exclude_none=True)


def get_oracle_client(settings: OnboardingSettings | None = None) -> OracleClient:
    """Live client when an API key is configured, otherwise the offline one."""
    settings = settings or get_settings()
    if settings.oracle_configured:
        return OpenAIOracleClient(settings)
    logger.info("No oracle API key configured; using offline questions")
    return MockOracleClient()
