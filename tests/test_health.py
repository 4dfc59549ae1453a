"""Basic health check tests."""

from typer.testing import CliRunner

from onboarding.main import app

runner = CliRunner()


def test_import_onboarding():
    """Test that onboarding package can be imported."""
    import onboarding
    assert onboarding.__version__ == "0.1.0"


def test_import_models():
    """Test that models can be imported and built."""
    from onboarding.models import DIMENSIONS, Question

    question = Question.model_validate({
        "id": "role-1",
        "prompt": "What do you do?",
        "ui": {"kind": "short_text"},
        "targets": ["role"],
    })
    assert question.ui.kind == "short_text"
    assert len(DIMENSIONS) == 10


def test_cli_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_cli_quick_picks():
    result = runner.invoke(app, ["quick-picks"])

    assert result.exit_code == 0
    assert "HIPAA" in result.output


def test_cli_health():
    result = runner.invoke(app, ["health"])

    assert result.exit_code == 0
    assert "offline mock questions" in result.output
