"""
Policy wizard questions: conditional visibility, answer validation and
progress.
"""

from .models import AnswerError, Question, QuestionDependency, QuestionValidation
from .visibility import (
    calculate_progress, get_visible_question_codes, is_question_visible,
    merge_answers_with_firm_profile, validate_answers,
)

__all__ = [
    "AnswerError",
    "Question",
    "QuestionDependency",
    "QuestionValidation",
    "calculate_progress",
    "get_visible_question_codes",
    "is_question_visible",
    "merge_answers_with_firm_profile",
    "validate_answers",
]
