"""
Question Oracle Gateway.

Turns session state into the next question. Exactly one outbound call per
request, bounded by a hard timeout. Whatever text comes back is run
through the recovery pipeline; if nothing usable survives, a canned
fallback question is returned instead. The gateway therefore either raises
OracleError (transport failure) or returns a schema-valid OracleResponse.
"""

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .coverage import calculate_progress, strongest_dimensions, weakest_dimensions
from .errors import OracleError, OracleErrorKind, OracleRequestError
from .fallbacks import get_fallback_question
from .llm.client import OracleClient
from .models import Answer, CoverageEntry, OracleResponse, answer_text
from .prompts import NEXT_QUESTION_PROMPT, SYSTEM_PROMPT
from .repair import recover_oracle_response

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass
class OracleContext:
    """Condensed view of the session handed to the oracle alongside coverage."""
    current_step: int
    answer_count: int
    progress_percent: int
    strongest: list[str] = field(default_factory=list)
    weakest: list[str] = field(default_factory=list)
    answer_summary: str = "No previous answers"


def build_context(coverage: Mapping[str, CoverageEntry], answers: Sequence[Answer]) -> OracleContext:
    """Step index, progress, top/bottom three dimensions, and prior answers joined."""
    if answers:
        summary = "; ".join(f"Q{i}: {answer_text(a.value)}" for i, a in enumerate(answers, 1))
    else:
        summary = "No previous answers"

    return OracleContext(
        current_step=len(answers) + 1,
        answer_count=len(answers),
        progress_percent=calculate_progress(coverage),
        strongest=strongest_dimensions(coverage, 3),
        weakest=weakest_dimensions(coverage, 3),
        answer_summary=summary,
    )


def build_user_prompt(
    context: OracleContext,
    coverage: Mapping[str, CoverageEntry],
    profile: Mapping[str, Any] | None = None,
) -> str:
    coverage_json = json.dumps(
        {dimension: entry.model_dump() for dimension, entry in coverage.items()},
        indent=2,
    )
    return NEXT_QUESTION_PROMPT.format(
        current_step=context.current_step,
        answer_count=context.answer_count,
        progress_percent=context.progress_percent,
        answer_summary=context.answer_summary,
        strongest=", ".join(context.strongest),
        weakest=", ".join(context.weakest),
        coverage_json=coverage_json,
        profile_json=json.dumps(profile, default=str) if profile else "None yet",
    )


def validate_request(coverage: Any, answers: Any) -> None:
    """Reject malformed session state before any oracle call is made."""
    if not isinstance(coverage, Mapping) or not coverage:
        raise OracleRequestError("Invalid coverage data: expected a non-empty mapping")
    if not isinstance(answers, Sequence) or isinstance(answers, (str, bytes)):
        raise OracleRequestError("Invalid answers data: expected a list")
    for dimension, entry in coverage.items():
        if not isinstance(entry, CoverageEntry):
            raise OracleRequestError(f"Invalid coverage entry for {dimension!r}")
    for answer in answers:
        if not isinstance(answer, Answer):
            raise OracleRequestError("Invalid answers data: expected Answer records")


class QuestionOracleGateway:
    """
    Obtains the next question, coverage update and tracks from the oracle.

    Args:
        client: Where completions come from (live, offline, or a test fake)
        timeout_seconds: Hard bound on the single outbound call
    """

    def __init__(self, client: OracleClient, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def request_next_question(
        self,
        profile: Mapping[str, Any],
        coverage: Mapping[str, CoverageEntry],
        answers: Sequence[Answer],
    ) -> OracleResponse:
        """
        Ask the oracle for the next question.

        Raises:
            OracleRequestError: coverage or answers are malformed
            OracleError: the call failed (auth, rate limit, bad request, timeout, transport)
        """
        validate_request(coverage, answers)

        context = build_context(coverage, answers)
        user_prompt = build_user_prompt(context, coverage, profile)

        logger.info(
            f"Requesting question for step {context.current_step} "
            f"(progress {context.progress_percent}%, {context.answer_count} answers)"
        )

        try:
            raw_text = await asyncio.wait_for(
                self.client.complete(
                    system_prompt=SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                    step=context.current_step,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise OracleError(
                OracleErrorKind.TIMEOUT,
                f"Oracle did not respond within {self.timeout_seconds:g}s",
            ) from e

        result = recover_oracle_response(raw_text)
        if result.recovered:
            return result.response

        logger.warning(f"Using fallback question for step {context.current_step}")
        return get_fallback_question(len(answers))
