"""
Tests for oracle response recovery stages.
"""

import json

from conftest import make_response

from onboarding.repair import (
    RECOVERY_STAGES,
    aggressive_stage,
    clean_stage,
    close_braces,
    recover_oracle_response,
    repair_stage,
)


VALID = json.dumps(make_response(question_id="role-1", targets=["role"]))


class TestStages:
    """Individual text transforms."""

    def test_clean_strips_fences_and_prose(self):
        raw = f"Sure! Here is the next question:\n```json\n{VALID}\n```\nLet me know."
        assert json.loads(clean_stage(raw)) == json.loads(VALID)

    def test_clean_strips_trailing_commas(self):
        assert json.loads(clean_stage('{"a": [1, 2,], "b": {"c": 1,},}')) == {"a": [1, 2], "b": {"c": 1}}

    def test_repair_drops_bare_word_before_number(self):
        assert json.loads(repair_stage('{"score": about 40}')) == {"score": 40}

    def test_repair_fixes_doubled_quotes(self):
        assert json.loads(repair_stage('{"targets": [""role""]}')) == {"targets": ["role"]}

    def test_close_braces(self):
        assert close_braces('{"a": {"b": 1}') == '{"a": {"b": 1}}'

    def test_close_braces_ignores_braces_in_strings(self):
        text = '{"a": "{{ not a brace"}'
        assert close_braces(text) == text

    def test_aggressive_keeps_outermost_object(self):
        raw = 'noise { "a": 1,\n\n  "b":   2 } trailing'
        assert json.loads(aggressive_stage(raw)) == {"a": 1, "b": 2}

    def test_stage_order(self):
        assert [s.name for s in RECOVERY_STAGES] == ["clean", "repair", "aggressive"]


class TestRecoverOracleResponse:
    """First stage that parses and validates wins."""

    def test_valid_json_recovers_at_clean(self):
        result = recover_oracle_response(VALID)

        assert result.recovered
        assert result.stage == "clean"
        assert result.response.question.id == "role-1"

    def test_fenced_json_recovers_at_clean(self):
        result = recover_oracle_response(f"```json\n{VALID}\n```")

        assert result.stage == "clean"

    def test_fence_with_trailing_comma_matches_clean_version(self):
        body = make_response(question_id="q-7", targets=["tools"], coverage_update={"tools": {"score": 30}})
        raw = "```json\n" + json.dumps(body)[:-1] + ",}\n```"

        recovered = recover_oracle_response(raw).response
        expected = recover_oracle_response(json.dumps(body)).response

        assert recovered == expected

    def test_bare_word_recovers_at_repair(self):
        body = make_response(coverage_update={"role": {"score": 40}})
        raw = json.dumps(body).replace('"score": 40', '"score": roughly 40')

        result = recover_oracle_response(raw)

        assert result.stage == "repair"
        assert result.response.coverage_update["role"].score == 40

    def test_truncated_response_recovers_at_repair(self):
        raw = VALID[: VALID.index('"coverageUpdate"')].rstrip().rstrip(",")

        result = recover_oracle_response(raw)

        assert result.recovered
        assert result.stage == "repair"
        assert result.response.question.id == "role-1"

    def test_raw_newlines_in_strings_recover_at_aggressive(self):
        raw = VALID.replace("Question role-1?", "Question\nrole-1?")

        result = recover_oracle_response(raw)

        assert result.stage == "aggressive"
        assert result.response.question.prompt == "Question role-1?"

    def test_prose_only_is_unrecoverable(self):
        result = recover_oracle_response("I'm sorry, I can't help with that.")

        assert not result.recovered
        assert result.response is None
        assert len(result.errors) == 3

    def test_schema_mismatch_is_unrecoverable(self):
        result = recover_oracle_response('{"question": {"id": "x"}}')

        assert not result.recovered
        assert all("schema mismatch" in e for e in result.errors)

    def test_prompt_over_140_chars_rejected(self):
        body = make_response()
        body["question"]["prompt"] = "x" * 141

        assert not recover_oracle_response(json.dumps(body)).recovered

    def test_unknown_ui_kind_rejected(self):
        body = make_response()
        body["question"]["ui"] = {"kind": "slider"}

        assert not recover_oracle_response(json.dumps(body)).recovered

    def test_extra_ui_fields_ignored(self):
        body = make_response(kind="range")
        body["question"]["ui"]["options"] = ["ignored"]

        result = recover_oracle_response(json.dumps(body))

        assert result.recovered
        assert result.response.question.ui.kind == "range"
