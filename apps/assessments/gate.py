"""
The combined completion condition.

A course is complete for an enrollment when every lesson is done and every
required assessment has a positive outcome. The three inputs arrive
independently (learner, quiz grading, instructor review) and in any order, so
every event handler re-evaluates this single predicate instead of keeping its
own copy of the rules.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AssessmentRequirements:
    has_quiz: bool = False
    has_assignment: bool = False


@dataclass(frozen=True)
class QuizOutcome:
    passed: bool = False
    awaiting_grading: bool = False  # An attempt with short answers is not graded yet


@dataclass(frozen=True)
class AssignmentOutcome:
    status: str | None = None  # None when nothing was submitted

    @property
    def approved(self) -> bool:
        from .models import AssignmentSubmission

        return self.status == AssignmentSubmission.Status.APPROVED

    @property
    def awaiting_review(self) -> bool:
        from .models import AssignmentSubmission

        return self.status == AssignmentSubmission.Status.PENDING


def is_combined_condition_met(
    requirements: AssessmentRequirements,
    progress,
    quiz_outcome: QuizOutcome | None,
    assignment_outcome: AssignmentOutcome | None,
) -> bool:
    """True iff lessons are at 100% and every required assessment is satisfied."""
    if progress.percent != 100:
        return False
    if requirements.has_quiz and not (quiz_outcome and quiz_outcome.passed):
        return False
    if requirements.has_assignment and not (
        assignment_outcome and assignment_outcome.approved
    ):
        return False
    return True
