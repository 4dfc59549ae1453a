"""
Onboarding - Prompt Logger.

Writes every oracle prompt and raw completion to a markdown file for
debugging model output. Switched on by create_session when the
onboarding_log_prompts setting (ONBOARDING_LOG_PROMPTS) is true, or by the
--log-prompts CLI flag.
"""

from datetime import datetime
from pathlib import Path

# Configuration
LOG_PROMPTS = False
LOG_DIR = Path("prompt_logs")

# Session tracking
_session_id: str | None = None
_call_counter: int = 0


def enable_prompt_logging(enabled: bool = True) -> None:
    """Enable or disable prompt logging."""
    global LOG_PROMPTS
    LOG_PROMPTS = enabled
    if enabled:
        _ensure_log_dir()


def is_enabled() -> bool:
    return LOG_PROMPTS


def _ensure_log_dir() -> None:
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def _get_session_id() -> str:
    global _session_id
    if _session_id is None:
        _session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    return _session_id


def _get_session_dir() -> Path:
    session_dir = LOG_DIR / _get_session_id()
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def log_prompt(
    *,
    model: str,
    system_prompt: str,
    user_prompt: str,
    step: int | None = None,
    raw_response: str | None = None,
    error: str | None = None,
    duration_ms: int | None = None,
) -> Path | None:
    """
    Log one oracle call to a file.

    Args:
        model: Model name sent to the endpoint
        system_prompt: The system prompt
        user_prompt: The user prompt (session context)
        step: Questionnaire step the call was made for
        raw_response: Completion text exactly as received (before recovery)
        error: Transport error, if the call failed
        duration_ms: Round-trip time

    Returns:
        Path to the log file, or None if logging is disabled
    """
    if not LOG_PROMPTS:
        return None

    global _call_counter
    _call_counter += 1

    _ensure_log_dir()
    step_part = f"step{step:02d}" if step is not None else "step"
    filepath = _get_session_dir() / f"{_call_counter:02d}_{step_part}.md"

    timing = f"\n**Duration:** {duration_ms} ms" if duration_ms is not None else ""

    content = f"""# Oracle Call {_call_counter}

**Time:** {datetime.now().isoformat()}
**Model:** {model}{timing}

---

## System Prompt

```
{system_prompt}
```

---

## User Prompt

```
{user_prompt}
```

---

## Response

"""

    if error:
        content += f"**ERROR:** {error}\n"
    elif raw_response is not None:
        content += f"```\n{raw_response}\n```\n"
    else:
        content += "(No response)\n"

    filepath.write_text(content, encoding="utf-8")
    return filepath


def get_session_log_dir() -> Path | None:
    """Get the current session's log directory, if logging is enabled."""
    if not LOG_PROMPTS:
        return None
    return _get_session_dir()


def reset_session() -> None:
    """Reset the session (for testing or a new questionnaire run)."""
    global _session_id, _call_counter
    _session_id = None
    _call_counter = 0
