"""
Wizard question visibility, validation and progress.

Dependencies reuse the rule comparators, restricted to the ones questions
may declare. A dependency on an unanswered question is never satisfied.
"""

import math
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from shared.logging import get_logger
from ..rules.conditions import MATCHERS, is_number
from ..rules.models import RuleConditionOperator
from .models import AnswerError, Question

logger = get_logger("policies.questions")

DEPENDENCY_OPERATORS = ("eq", "neq", "in", "nin", "gt", "lt")

QuestionInput = Union[Question, Mapping[str, Any]]


def _coerce(questions: Iterable[QuestionInput]) -> List[Question]:
    coerced: List[Question] = []
    for item in questions or ():
        if isinstance(item, Question):
            coerced.append(item)
        elif isinstance(item, Mapping):
            coerced.append(Question.from_dict(item))
        else:
            logger.warning("Skipping malformed question record", record_type=type(item).__name__)
    return coerced


def _is_empty(answer: Any) -> bool:
    return answer is None or answer == ""


def is_question_visible(question: QuestionInput, answers: Mapping[str, Any]) -> bool:
    """True when every dependency of ``question`` holds for ``answers``."""
    if not isinstance(question, Question):
        question = Question.from_dict(question)

    for dependency in question.depends_on:
        if dependency.question_code not in answers:
            return False
        if dependency.operator not in DEPENDENCY_OPERATORS:
            logger.warning("Unknown dependency operator", question=question.code,
                           operator=dependency.operator)
            return False
        matcher = MATCHERS[RuleConditionOperator(dependency.operator)]
        if not matcher(answers[dependency.question_code], dependency.value):
            return False
    return True


def get_visible_question_codes(questions: Iterable[QuestionInput],
                               answers: Mapping[str, Any]) -> List[str]:
    return [q.code for q in _coerce(questions) if is_question_visible(q, answers)]


def validate_answers(questions: Iterable[QuestionInput], answers: Mapping[str, Any],
                     visible_codes: Optional[Sequence[str]] = None) -> List[AnswerError]:
    """Check answers against each visible question's validation rules.

    Hidden questions are skipped. An empty required answer reports only
    ``REQUIRED``; other checks run only on non-empty answers.
    """
    questions = _coerce(questions)
    if visible_codes is None:
        visible_codes = get_visible_question_codes(questions, answers)

    errors: List[AnswerError] = []
    for question in questions:
        if question.code not in visible_codes or question.validation is None:
            continue
        validation = question.validation
        answer = answers.get(question.code)

        if _is_empty(answer):
            if validation.required:
                errors.append(AnswerError(question.code, "This field is required", "REQUIRED"))
            continue

        if is_number(answer):
            if is_number(validation.min) and answer < validation.min:
                errors.append(AnswerError(
                    question.code, f"Value must be at least {validation.min}", "MIN_VALUE"))
            if is_number(validation.max) and answer > validation.max:
                errors.append(AnswerError(
                    question.code, f"Value must be at most {validation.max}", "MAX_VALUE"))

        if isinstance(answer, str) and validation.pattern:
            try:
                matched = re.search(validation.pattern, answer) is not None
            except re.error as e:
                logger.warning("Invalid validation pattern", question=question.code, error=str(e))
                continue
            if not matched:
                errors.append(AnswerError(question.code, "Invalid format", "PATTERN_MISMATCH"))

    return errors


def calculate_progress(questions: Iterable[QuestionInput], answers: Mapping[str, Any],
                       visible_codes: Optional[Sequence[str]] = None) -> int:
    """Percentage of visible questions answered, rounded half up."""
    questions = _coerce(questions)
    if visible_codes is None:
        visible_codes = get_visible_question_codes(questions, answers)

    visible = [q for q in questions if q.code in visible_codes]
    if not visible:
        return 0
    answered = sum(1 for q in visible if not _is_empty(answers.get(q.code)))
    return int(math.floor(answered * 100.0 / len(visible) + 0.5))


def merge_answers_with_firm_profile(answers: Mapping[str, Any],
                                    firm_attributes: Optional[Mapping[str, Any]] = None) -> dict:
    """Firm attributes act as defaults; wizard answers override them."""
    merged = dict(firm_attributes or {})
    merged.update(answers or {})
    return merged
