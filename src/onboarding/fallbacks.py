"""
Fallback and Offline Questions.

FALLBACK_RESPONSES are served when the oracle's output cannot be recovered.
MOCK_QUESTIONS / MOCK_TRACKS back the offline oracle used when no API key
is configured. Everything here is schema-valid by construction.
"""

from .models import (
    CheckboxListUI,
    ChipsUI,
    CoverageEntryUpdate,
    OracleResponse,
    Question,
    RangeUI,
    ShortTextUI,
    Track,
)


TOOL_OPTIONS = [
    "Slack", "Jira", "Notion", "Google Workspace", "Figma", "GitHub",
    "Salesforce", "Linear", "Asana", "Microsoft Teams", "HubSpot", "Zapier",
]

TEAM_STRUCTURE_OPTIONS = [
    "Individual contributor",
    "Team lead (2-5 people)",
    "Manager (5-15 people)",
    "Director (15-50 people)",
    "VP/Head (50+ people)",
    "Cross-functional lead",
    "Consultant/Freelancer",
]


# =============================================================================
# Fallback Sequence
# =============================================================================

FALLBACK_RESPONSES: tuple[OracleResponse, ...] = (
    OracleResponse(
        question=Question(
            id="role_fallback",
            prompt="Tell us about your role and seniority",
            context=(
                "Help us understand your position and level of experience "
                "(e.g., 'VP of Engineering at Meta' or 'Senior Product Manager at a fintech startup')"
            ),
            ui=ShortTextUI(placeholder="e.g., VP of Engineering at Meta, Senior PM at Stripe..."),
            targets=["role"],
        ),
        coverage_update={
            "role": CoverageEntryUpdate(weight=0.8, score=60, unknowns=["team_structure", "direct_reports"]),
        },
        tracks=[],
        rationale=(
            "Starting with open-ended role and seniority to capture rich context "
            "about their position and experience level."
        ),
    ),
    OracleResponse(
        question=Question(
            id="team_structure_fallback",
            prompt="Tell us about your team structure and scope",
            context="Understanding your leadership context helps us tailor recommendations to your level",
            ui=ChipsUI(options=TEAM_STRUCTURE_OPTIONS),
            targets=["role", "collaboration"],
        ),
        coverage_update={
            "role": CoverageEntryUpdate(weight=0.8, score=85, unknowns=["direct_reports"]),
            "collaboration": CoverageEntryUpdate(
                weight=0.6, score=30, unknowns=["meeting_frequency", "reporting_structure"]
            ),
        },
        tracks=[],
        rationale=(
            "Following up on role with team context to understand scope of "
            "responsibility and collaboration needs."
        ),
    ),
    OracleResponse(
        question=Question(
            id="tools_fallback",
            prompt="What tools do you use most?",
            context="Knowing your tech stack helps us suggest integrations",
            ui=CheckboxListUI(options=TOOL_OPTIONS),
            targets=["tools"],
        ),
        coverage_update={
            "tools": CoverageEntryUpdate(weight=0.6, score=40, unknowns=["integrations"]),
        },
        tracks=[],
        rationale="Understanding your current tech stack for integration opportunities.",
    ),
)


def get_fallback_question(answer_count: int) -> OracleResponse:
    """
    Canned response for the given answer count.

    The index is clamped, so anything past the end repeats the last entry.
    Returns a fresh copy each time.
    """
    index = min(max(answer_count, 0), len(FALLBACK_RESPONSES) - 1)
    return FALLBACK_RESPONSES[index].model_copy(deep=True)


# =============================================================================
# Offline Oracle Content
# =============================================================================

MOCK_QUESTIONS: tuple[Question, ...] = (
    Question(
        id="role-1",
        prompt="Tell us about your role and seniority",
        context=(
            "Help us understand your position and level of experience "
            "(e.g., 'VP of Engineering at Meta' or 'Senior Product Manager at a fintech startup')"
        ),
        ui=ShortTextUI(placeholder="e.g., VP of Engineering at Meta, Senior PM at Stripe..."),
        targets=["role", "responsibilities"],
    ),
    Question(
        id="team-context-1",
        prompt="Tell us about your team structure",
        context="Understanding your team helps us recommend the right collaboration and management tools",
        ui=ChipsUI(options=TEAM_STRUCTURE_OPTIONS),
        targets=["role", "collaboration"],
    ),
    Question(
        id="workflows-1",
        prompt="Which workflows and processes do you handle regularly?",
        context="Select all that you do weekly or monthly - this helps us understand your workload",
        ui=CheckboxListUI(options=[
            "Sprint planning", "Bug triage", "Stakeholder reporting", "Content creation",
            "Email campaigns", "Social media management", "Performance tracking",
            "Team meetings", "Documentation", "Data analysis", "Project management",
            "Quality assurance",
        ]),
        targets=["workflows", "responsibilities"],
    ),
    Question(
        id="pain-points-1",
        prompt="What slows you down or frustrates you most in your daily work?",
        context="Help us identify the biggest friction points we can help solve",
        ui=CheckboxListUI(options=[
            "Too many meetings", "Manual reporting", "Context switching", "Slow approvals",
            "Data quality issues", "Repetitive tasks", "Finding information", "Tool switching",
            "Communication delays", "Unclear priorities", "Technical limitations",
            "Resource constraints",
        ]),
        targets=["pain_points"],
    ),
    Question(
        id="tools-1",
        prompt="Which tools do you use most frequently?",
        context="This helps us understand your tech stack and potential integrations",
        ui=CheckboxListUI(options=TOOL_OPTIONS),
        targets=["tools"],
    ),
    Question(
        id="satisfaction-1",
        prompt="How satisfied are you with your current workflow efficiency?",
        context="Rate your overall satisfaction with how smoothly things run day-to-day",
        ui=RangeUI(min=1, max=10),
        targets=["pain_points", "workflows"],
    ),
)

MOCK_TRACKS: tuple[Track, ...] = (
    Track(
        id="pm-essentials",
        title="AI-Powered Product Management",
        level="Applied",
        modules=["User Story Generation", "Competitive Analysis", "Roadmap Planning"],
        rationale="Based on your PM role and workflow needs",
        eta_hours=8,
    ),
    Track(
        id="data-analysis",
        title="AI Data Analysis Workflows",
        level="Applied",
        modules=["Query Generation", "Report Automation", "Insight Discovery"],
        rationale="Addresses your data quality pain points",
        eta_hours=6,
    ),
)


def generate_mock_response(question_index: int) -> OracleResponse:
    """Offline stand-in for an oracle response, cycling through MOCK_QUESTIONS."""
    question = MOCK_QUESTIONS[question_index % len(MOCK_QUESTIONS)]
    return OracleResponse(
        question=question.model_copy(deep=True),
        coverage_update={
            question.targets[0]: CoverageEntryUpdate(
                weight=0.8,
                score=min(100, (question_index + 1) * 20),
                unknowns=[],
            ),
        },
        tracks=[t.model_copy(deep=True) for t in MOCK_TRACKS[: min(3, question_index + 1)]],
    )
