"""
Adaptive Onboarding Questionnaire.

Asks a user a sequence of adaptive questions, tracks how well ten knowledge
dimensions about their work are covered, and passes through learning-track
recommendations from an LLM question oracle.

Layers (leaf first):
1. Coverage Model - weighted progress and merging (coverage.py)
2. Question Oracle Gateway - one call, JSON recovery, fallback (oracle.py)
3. State Machine - the session and its actions (state.py)
4. Snapshot Persistence - debounced JSON snapshots (storage.py)
"""

__version__ = "0.1.0"

from .errors import OnboardingError, OracleError, OracleErrorKind, OracleRequestError, SessionBusyError
from .models import (
    DIMENSIONS,
    QUICK_PICKS,
    Answer,
    CoverageEntry,
    OnboardingData,
    OracleResponse,
    Question,
    QuickPick,
    Track,
    initial_coverage,
)
from .oracle import QuestionOracleGateway
from .state import OnboardingSession, OnboardingStatus, create_session

__all__ = [
    "__version__",
    "DIMENSIONS",
    "QUICK_PICKS",
    "Answer",
    "CoverageEntry",
    "OnboardingData",
    "OracleResponse",
    "Question",
    "QuickPick",
    "Track",
    "initial_coverage",
    "OnboardingError",
    "OracleError",
    "OracleErrorKind",
    "OracleRequestError",
    "SessionBusyError",
    "QuestionOracleGateway",
    "OnboardingSession",
    "OnboardingStatus",
    "create_session",
]
