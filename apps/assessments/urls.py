from django.urls import path

from .views import (
    AssignmentReviewView,
    AssignmentSubmitView,
    PendingQuizAttemptListView,
    PendingSubmissionListView,
    QuizAttemptCreateView,
    QuizAttemptGradeView,
    QuizDetailView,
)

app_name = "assessments"

urlpatterns = [
    # Learner
    path(
        "enrollments/<uuid:enrollment_id>/quiz/",
        QuizDetailView.as_view(),
        name="quiz-detail",
    ),
    path(
        "enrollments/<uuid:enrollment_id>/quiz-attempts/",
        QuizAttemptCreateView.as_view(),
        name="quiz-attempt-create",
    ),
    path(
        "enrollments/<uuid:enrollment_id>/assignment-submission/",
        AssignmentSubmitView.as_view(),
        name="assignment-submit",
    ),
    # Instructor review queue
    path(
        "submissions/pending/",
        PendingSubmissionListView.as_view(),
        name="submission-pending-list",
    ),
    path(
        "submissions/<uuid:submission_id>/review/",
        AssignmentReviewView.as_view(),
        name="submission-review",
    ),
    path(
        "quiz-attempts/pending/",
        PendingQuizAttemptListView.as_view(),
        name="quiz-attempt-pending-list",
    ),
    path(
        "quiz-attempts/<uuid:attempt_id>/grade/",
        QuizAttemptGradeView.as_view(),
        name="quiz-attempt-grade",
    ),
]
