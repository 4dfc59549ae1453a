"""
Tests for the interactive CLI.
"""

import pytest
from typer.testing import CliRunner

from onboarding.main import app, parse_answer
from onboarding.models import CheckboxListUI, ChipsUI, RangeUI, ShortTextUI

runner = CliRunner()


class TestParseAnswer:
    """Typed input -> answer value."""

    def test_short_text(self):
        assert parse_answer(ShortTextUI(), "Head of Data") == "Head of Data"

    def test_chips_by_number(self):
        assert parse_answer(ChipsUI(options=["Solo", "Team lead"]), "2") == "Team lead"

    def test_chips_free_text(self):
        assert parse_answer(ChipsUI(options=["Solo", "Team lead"]), "Founder") == "Founder"

    def test_checkbox_list(self):
        ui = CheckboxListUI(options=["Jira", "Slack", "Notion"])
        assert parse_answer(ui, "1, 3, Airtable") == ["Jira", "Notion", "Airtable"]

    def test_range(self):
        assert parse_answer(RangeUI(min=1, max=10), "7") == 7.0

    def test_range_out_of_bounds(self):
        with pytest.raises(ValueError):
            parse_answer(RangeUI(min=1, max=10), "11")

    def test_range_not_a_number(self):
        with pytest.raises(ValueError):
            parse_answer(RangeUI(min=1, max=10), "lots")


class TestRunCommand:
    """Offline interactive session."""

    def test_answer_skip_quit(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["run", "--fresh"], input="Product manager\nskip\nquit\n")

        assert result.exit_code == 0, result.output
        assert "Tell us about your role" in result.output
        assert "Goodbye" in result.output
        assert (tmp_path / ".onboarding" / "session.json").exists()
