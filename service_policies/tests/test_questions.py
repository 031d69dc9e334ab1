"""
Unit tests for wizard question visibility, validation and progress.
"""

import pytest

from service_policies.app.questions import (
    Question, calculate_progress, get_visible_question_codes, is_question_visible,
    merge_answers_with_firm_profile, validate_answers,
)


class TestVisibility:
    """Test cases for conditional question display."""

    @pytest.fixture
    def questions(self):
        """Create a small dependent question set."""
        return [
            {"code": "has_peps", "text": "Do you onboard PEPs?", "type": "boolean"},
            {"code": "pep_types", "text": "Which PEPs?", "type": "multiselect",
             "depends_on": {"question_code": "has_peps", "value": True}},
            {"code": "pep_volume", "text": "How many per year?", "type": "number",
             "depends_on": [
                 {"question_code": "has_peps", "value": True},
                 {"question_code": "firm_size", "operator": "in", "value": ["medium", "large"]},
             ]},
        ]

    def test_no_dependencies_always_visible(self, questions):
        """Test questions without dependencies show."""
        assert is_question_visible(questions[0], {}) is True

    def test_single_dependency(self, questions):
        """Test a single dependency defaults to eq."""
        assert is_question_visible(questions[1], {"has_peps": True}) is True
        assert is_question_visible(questions[1], {"has_peps": False}) is False

    def test_unanswered_dependency_hides(self, questions):
        """Test a dependency on an unanswered question hides the question."""
        assert is_question_visible(questions[1], {}) is False

    def test_all_dependencies_must_hold(self, questions):
        """Test every dependency in a list is required."""
        assert is_question_visible(questions[2], {"has_peps": True, "firm_size": "large"}) is True
        assert is_question_visible(questions[2], {"has_peps": True, "firm_size": "small"}) is False

    def test_numeric_dependency(self):
        """Test gt/lt dependencies need numbers."""
        question = {"code": "q", "depends_on": {"question_code": "staff", "operator": "gt", "value": 10}}
        assert is_question_visible(question, {"staff": 11}) is True
        assert is_question_visible(question, {"staff": "11"}) is False

    def test_unsupported_operator_hides(self):
        """Test operators outside the dependency set hide the question."""
        question = {"code": "q", "depends_on": {"question_code": "staff", "operator": "gte", "value": 10}}
        assert is_question_visible(question, {"staff": 11}) is False

    def test_visible_codes(self, questions):
        """Test visible codes keep question order."""
        assert get_visible_question_codes(questions, {"has_peps": True}) == ["has_peps", "pep_types"]


class TestValidation:
    """Test cases for answer validation."""

    @pytest.fixture
    def questions(self):
        return [
            Question.from_dict({"code": "firm_name", "validation": {"required": True}}),
            Question.from_dict({"code": "staff", "validation": {"min": 1, "max": 500}}),
            Question.from_dict({"code": "frn", "validation": {"pattern": r"^\d{6,7}$"}}),
            Question.from_dict({"code": "hidden", "validation": {"required": True},
                                "depends_on": {"question_code": "never", "value": True}}),
        ]

    def test_valid_answers(self, questions):
        """Test valid answers produce no errors."""
        answers = {"firm_name": "Acme", "staff": 20, "frn": "123456"}
        assert validate_answers(questions, answers) == []

    def test_required(self, questions):
        """Test empty required answers are reported once."""
        errors = validate_answers(questions, {"firm_name": ""})
        assert [e.to_dict() for e in errors] == [
            {"field": "firm_name", "message": "This field is required", "code": "REQUIRED"}
        ]

    def test_min_max(self, questions):
        """Test numeric bounds."""
        low = validate_answers(questions, {"firm_name": "Acme", "staff": 0})
        high = validate_answers(questions, {"firm_name": "Acme", "staff": 501})

        assert [(e.code, e.message) for e in low] == [("MIN_VALUE", "Value must be at least 1")]
        assert [(e.code, e.message) for e in high] == [("MAX_VALUE", "Value must be at most 500")]

    def test_pattern(self, questions):
        """Test string patterns."""
        errors = validate_answers(questions, {"firm_name": "Acme", "frn": "12ab"})
        assert [(e.field, e.code, e.message) for e in errors] == [("frn", "PATTERN_MISMATCH", "Invalid format")]

    def test_hidden_questions_skipped(self, questions):
        """Test hidden questions are not validated."""
        errors = validate_answers(questions, {"firm_name": "Acme"}, visible_codes=["firm_name"])
        assert errors == []


class TestProgressAndMerge:
    """Test cases for progress and answer merging."""

    def test_progress_rounds(self):
        """Test progress is a rounded percentage of visible questions."""
        questions = [{"code": "a"}, {"code": "b"}, {"code": "c"}]
        assert calculate_progress(questions, {"a": 1}) == 33
        assert calculate_progress(questions, {"a": 1, "b": 0}) == 67
        assert calculate_progress(questions, {"a": None, "b": ""}) == 0

    def test_progress_rounds_half_up(self):
        """Test halves round up."""
        questions = [{"code": str(i)} for i in range(8)]
        assert calculate_progress(questions, {"0": "x"}) == 13

    def test_progress_without_visible_questions(self):
        """Test no visible questions gives zero."""
        assert calculate_progress([], {}) == 0

    def test_merge_answers_with_firm_profile(self):
        """Test answers override firm attributes."""
        merged = merge_answers_with_firm_profile({"firm_size": "large"}, {"firm_size": "small", "sector": "payments"})
        assert merged == {"firm_size": "large", "sector": "payments"}


class TestMalformedQuestions:
    """Test cases for question records with bad field types."""

    def test_bad_field_types_default(self):
        """Test unusable options, order, metadata and pattern fall back to defaults."""
        question = Question.from_dict({
            "code": "q1", "options": 5, "display_order": "first", "metadata": ["x"],
            "section": 3, "depends_on": 7, "validation": {"pattern": 12},
        })

        assert question.options == ()
        assert question.display_order == 0
        assert question.metadata == {}
        assert question.section is None
        assert question.depends_on == ()
        assert question.validation.pattern is None

    def test_bool_display_order_ignored(self):
        """Test a boolean display order is not taken as an int."""
        assert Question.from_dict({"code": "q", "display_order": True}).display_order == 0
        assert Question.from_dict({"code": "q", "display_order": 4}).display_order == 4

    def test_non_mapping_records_skipped(self):
        """Test records that are not mappings are left out."""
        questions = [{"code": "a", "options": 5}, "junk", None, {"code": "b", "display_order": "first"}]

        assert get_visible_question_codes(questions, {}) == ["a", "b"]
        assert validate_answers(questions, {"a": "x"}) == []
        assert calculate_progress(questions, {"a": "x"}) == 50
