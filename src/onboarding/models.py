"""
Onboarding Data Models.

Coverage, questions, answers, tracks and the session aggregate. JSON field
names are camelCase on the wire (the oracle and the snapshot file use them);
Python attributes are snake_case and both spellings are accepted on input.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union, get_args

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Dimensions
# =============================================================================

Dimension = Literal[
    "role",
    "responsibilities",
    "workflows",
    "tools",
    "inputs_outputs",
    "pain_points",
    "metrics_kpis",
    "compliance",
    "collaboration",
    "ai_readiness",
]

DIMENSIONS: tuple[str, ...] = get_args(Dimension)

TrackLevel = Literal["Intro", "Applied", "Security", "Manager"]

UIKind = Literal["chips", "checkbox_list", "toggle_pair", "range", "short_text"]

AnswerValue = Union[str, list[str], float]


class _WireModel(BaseModel):
    """Base for models that round-trip through camelCase JSON."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Coverage
# =============================================================================

class CoverageEntry(_WireModel):
    """How well one dimension of the user's work profile is understood."""
    weight: float = Field(ge=0.0, le=1.0, description="Importance of the dimension")
    score: float = Field(ge=0.0, le=100.0, description="0 = unknown, 100 = fully covered")
    unknowns: list[str] = Field(default_factory=list, description="What we still need to learn")


class CoverageEntryUpdate(_WireModel):
    """Partial coverage entry. Only the fields that were set get merged."""
    weight: float | None = Field(default=None, ge=0.0, le=1.0)
    score: float | None = Field(default=None, ge=0.0, le=100.0)
    unknowns: list[str] | None = None


Coverage = dict[Dimension, CoverageEntry]


def initial_coverage() -> Coverage:
    """Fresh coverage with every score at zero."""
    return {
        "role": CoverageEntry(weight=0.8, score=0, unknowns=["title", "seniority"]),
        "responsibilities": CoverageEntry(weight=1.0, score=0, unknowns=["daily_tasks", "ownership"]),
        "workflows": CoverageEntry(weight=1.0, score=0, unknowns=["processes", "cadence"]),
        "tools": CoverageEntry(weight=0.6, score=0, unknowns=["primary_stack", "integrations"]),
        "inputs_outputs": CoverageEntry(weight=0.7, score=0, unknowns=["data_sources", "deliverables"]),
        "pain_points": CoverageEntry(weight=0.7, score=0, unknowns=["bottlenecks", "frustrations"]),
        "metrics_kpis": CoverageEntry(weight=0.8, score=0, unknowns=["success_metrics", "targets"]),
        "compliance": CoverageEntry(weight=0.9, score=0, unknowns=["regulations", "policies"]),
        "collaboration": CoverageEntry(weight=0.6, score=0, unknowns=["handoffs", "stakeholders"]),
        "ai_readiness": CoverageEntry(weight=0.6, score=0, unknowns=["current_usage", "policies"]),
    }


# =============================================================================
# Questions
# =============================================================================

class ChipsUI(_WireModel):
    kind: Literal["chips"] = "chips"
    options: list[str] = Field(default_factory=list)


class CheckboxListUI(_WireModel):
    kind: Literal["checkbox_list"] = "checkbox_list"
    options: list[str] = Field(default_factory=list)  # 12 by prompt convention


class TogglePairUI(_WireModel):
    kind: Literal["toggle_pair"] = "toggle_pair"
    options: list[str] = Field(default_factory=list)


class RangeUI(_WireModel):
    kind: Literal["range"] = "range"
    min: float | None = None
    max: float | None = None


class ShortTextUI(_WireModel):
    kind: Literal["short_text"] = "short_text"
    placeholder: str | None = None


UISpec = Annotated[
    Union[ChipsUI, CheckboxListUI, TogglePairUI, RangeUI, ShortTextUI],
    Field(discriminator="kind"),
]


class Question(_WireModel):
    """A single question chosen by the oracle (or a fallback)."""
    id: str
    prompt: str = Field(max_length=140)
    context: str | None = None
    ui: UISpec
    targets: list[Dimension] = Field(min_length=1, description="Dimensions this answer covers")


class Answer(_WireModel):
    """A captured answer."""
    question_id: str = Field(alias="questionId")
    value: AnswerValue
    captured_at: datetime = Field(
        alias="capturedAt",
        default_factory=lambda: datetime.now(timezone.utc),
    )


def answer_text(value: AnswerValue) -> str:
    """Flatten an answer value into the text used for summaries and matching."""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# Tracks & Quick Picks
# =============================================================================

class Track(_WireModel):
    """Learning track recommendation. Always oracle-supplied."""
    id: str
    title: str
    level: TrackLevel
    modules: list[str] = Field(default_factory=list)
    rationale: str
    eta_hours: float | None = Field(default=None, alias="etaHours")


class QuickPick(_WireModel):
    """Predefined shortcut answer that bypasses the oracle for one step."""
    id: str
    label: str
    category: Literal["workflows", "tools", "compliance"]
    targets: list[Dimension]
    value: str


QUICK_PICKS: list[QuickPick] = [
    # Workflows
    QuickPick(id="sprint-planning", label="Sprint planning", category="workflows",
              targets=["workflows"], value="Sprint planning"),
    QuickPick(id="bug-triage", label="Bug triage", category="workflows",
              targets=["workflows"], value="Bug triage"),
    QuickPick(id="stakeholder-report", label="Stakeholder report", category="workflows",
              targets=["workflows", "collaboration"], value="Stakeholder reporting"),
    QuickPick(id="weekly-kpi", label="Weekly KPI roll-up", category="workflows",
              targets=["workflows", "metrics_kpis"], value="Weekly KPI roll-up"),
    # Tools
    QuickPick(id="linear", label="Linear", category="tools", targets=["tools"], value="Linear"),
    QuickPick(id="jira", label="Jira", category="tools", targets=["tools"], value="Jira"),
    QuickPick(id="notion", label="Notion", category="tools", targets=["tools"], value="Notion"),
    QuickPick(id="salesforce", label="Salesforce", category="tools", targets=["tools"], value="Salesforce"),
    QuickPick(id="slack", label="Slack", category="tools",
              targets=["tools", "collaboration"], value="Slack"),
    # Compliance
    QuickPick(id="soc2", label="SOC2", category="compliance", targets=["compliance"], value="SOC2"),
    QuickPick(id="hipaa", label="HIPAA", category="compliance", targets=["compliance"], value="HIPAA"),
    QuickPick(id="gdpr", label="GDPR", category="compliance", targets=["compliance"], value="GDPR"),
    QuickPick(id="none-compliance", label="None/Unsure", category="compliance",
              targets=["compliance"], value="None/Unsure"),
]


def get_quick_pick(pick_id: str) -> QuickPick | None:
    return next((p for p in QUICK_PICKS if p.id == pick_id), None)


# =============================================================================
# Oracle Contract
# =============================================================================

class OracleRequest(_WireModel):
    """Session state sent to the oracle."""
    profile: dict[str, Any] = Field(default_factory=dict)
    coverage: dict[str, CoverageEntry]
    answers: list[Answer] = Field(default_factory=list)


class OracleResponse(_WireModel):
    """
    Validated oracle output.

    coverageUpdate keys are not restricted to the ten dimensions here;
    unknown keys are dropped when merged into coverage.
    """
    question: Question
    coverage_update: dict[str, CoverageEntryUpdate] = Field(
        default_factory=dict, alias="coverageUpdate"
    )
    tracks: list[Track] = Field(default_factory=list)
    rationale: str | None = None


# =============================================================================
# Session Aggregate
# =============================================================================

class OnboardingData(_WireModel):
    """
    Everything captured in a session. Owned by OnboardingSession.

    progress_percent is derived from coverage and recomputed by the
    session on every update.
    """
    profile: dict[str, Any] = Field(default_factory=dict)
    coverage: Coverage = Field(default_factory=initial_coverage)
    answers: list[Answer] = Field(default_factory=list)
    tracks: list[Track] = Field(default_factory=list)
    progress_percent: int = Field(default=0, alias="progressPercent")

    def to_json(self) -> str:
        """Serialize to the snapshot JSON format."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, json_str: str) -> "OnboardingData":
        """Deserialize from the snapshot JSON format."""
        return cls.model_validate_json(json_str)


class ProgressMilestone(_WireModel):
    """A dimension crossing the halfway mark for the first time."""
    step: int
    dimension: str
    score: float
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
