"""
Oracle Response Recovery.

The oracle is a free-text model. Its JSON may come wrapped in prose or code
fences, carry trailing commas, or be slightly broken. Recovery runs ordered
stages, each more aggressive than the last, and stops at the first one whose
output both parses and validates as an OracleResponse.

    raw text
      -> clean      strip fences + trailing commas, take the first {...} span
      -> repair     targeted fixes for known malformations
      -> aggressive drop everything outside the outermost braces, collapse
                    whitespace
      -> None       caller falls back to a canned question
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Callable

from pydantic import ValidationError

from .models import OracleResponse

logger = logging.getLogger(__name__)


# =============================================================================
# Patterns
# =============================================================================

_FENCE_OPEN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_FIRST_OBJECT = re.compile(r"\{[\s\S]*\}")

# "score": title 40  ->  "score": 40
_BARE_WORD_BEFORE_NUMBER = re.compile(r":\s*[A-Za-z_]+\s+(-?\d+(?:\.\d+)?)")
# ""role""  ->  "role"
_DOUBLED_QUOTES = re.compile(r'""([^"]+)""')
_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Stages
# =============================================================================

def strip_fences(text: str) -> str:
    """Remove markdown code-fence markers."""
    return _FENCE_OPEN.sub("", text).replace("```", "")


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def clean_stage(text: str) -> str:
    """Stage a: fences, trailing commas, first top-level {...} span."""
    cleaned = strip_trailing_commas(strip_fences(text)).strip()
    match = _FIRST_OBJECT.search(cleaned)
    return match.group(0) if match else cleaned


def repair_stage(text: str) -> str:
    """Stage b: targeted fixes applied on top of stage a."""
    fixed = clean_stage(text)
    fixed = _BARE_WORD_BEFORE_NUMBER.sub(r": \1", fixed)
    fixed = _DOUBLED_QUOTES.sub(r'"\1"', fixed)
    fixed = strip_trailing_commas(fixed)
    return close_braces(fixed)


def aggressive_stage(text: str) -> str:
    """Stage c: keep only first '{' .. last '}', collapse whitespace."""
    body = strip_fences(text)
    start = body.find("{")
    if start == -1:
        return body.strip()
    end = body.rfind("}")
    body = body[start:end + 1] if end > start else body[start:] + "}"
    body = body.replace("\\n", " ")
    body = _WHITESPACE.sub(" ", body)
    return close_braces(strip_trailing_commas(body)).strip()


def close_braces(text: str) -> str:
    """Append closing braces when the text opens more objects than it closes."""
    depth = _brace_depth(text)
    if depth > 0:
        return text.rstrip() + "}" * depth
    return text


def _brace_depth(text: str) -> int:
    """Net open-brace count, ignoring braces inside string literals."""
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
    return depth


@dataclass(frozen=True)
class RecoveryStage:
    name: str
    transform: Callable[[str], str]


RECOVERY_STAGES: tuple[RecoveryStage, ...] = (
    RecoveryStage("clean", clean_stage),
    RecoveryStage("repair", repair_stage),
    RecoveryStage("aggressive", aggressive_stage),
)


# =============================================================================
# Pipeline
# =============================================================================

@dataclass
class RecoveryResult:
    """Outcome of running the recovery stages over one raw response."""
    response: OracleResponse | None
    stage: str | None = None
    errors: list[str] | None = None

    @property
    def recovered(self) -> bool:
        return self.response is not None


def recover_oracle_response(
    raw_text: str,
    stages: tuple[RecoveryStage, ...] = RECOVERY_STAGES,
) -> RecoveryResult:
    """
    Run the recovery stages in order over raw oracle text.

    Returns the first result that parses and validates. When every stage
    fails the result has response=None and one error string per stage.
    """
    errors: list[str] = []
    for stage in stages:
        candidate = stage.transform(raw_text)
        try:
            parsed = json.loads(candidate)
            response = OracleResponse.model_validate(parsed)
        except json.JSONDecodeError as e:
            errors.append(f"{stage.name}: invalid JSON ({e.msg} at {e.pos})")
            continue
        except ValidationError as e:
            errors.append(f"{stage.name}: schema mismatch ({e.error_count()} errors)")
            continue
        if stage.name != stages[0].name:
            logger.info(f"Oracle response recovered at stage '{stage.name}'")
        return RecoveryResult(response=response, stage=stage.name)

    logger.warning(f"Oracle response unrecoverable: {'; '.join(errors)}")
    return RecoveryResult(response=None, errors=errors)
