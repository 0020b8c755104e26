from rest_framework import serializers

from apps.users.serializers import UserBasicSerializer

from .models import AssignmentSubmission, Quiz, QuizAnswer, QuizAttempt, QuizOption, QuizQuestion


class QuizOptionSerializer(serializers.ModelSerializer):
    # Correctness stays on the server
    class Meta:
        model = QuizOption
        fields = ("id", "text", "order")
        read_only_fields = fields


class QuizQuestionSerializer(serializers.ModelSerializer):
    options = QuizOptionSerializer(many=True, read_only=True)

    class Meta:
        model = QuizQuestion
        fields = ("id", "text", "question_type", "points", "order", "options")
        read_only_fields = fields


class QuizSerializer(serializers.ModelSerializer):
    questions = QuizQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Quiz
        fields = ("id", "course", "title", "passing_percentage", "is_required", "questions")
        read_only_fields = fields


class QuizAnswerSerializer(serializers.ModelSerializer):
    question_text = serializers.CharField(source="question.text", read_only=True)
    question_type = serializers.CharField(source="question.question_type", read_only=True)

    class Meta:
        model = QuizAnswer
        fields = (
            "id",
            "question",
            "question_text",
            "question_type",
            "selected_option",
            "text_answer",
            "is_correct",
            "points_earned",
            "graded_at",
        )
        read_only_fields = fields


class QuizAttemptSerializer(serializers.ModelSerializer):
    answers = QuizAnswerSerializer(many=True, read_only=True)
    awaiting_grading = serializers.BooleanField(read_only=True)

    class Meta:
        model = QuizAttempt
        fields = (
            "id",
            "quiz",
            "enrollment",
            "score_percentage",
            "passed",
            "awaiting_grading",
            "completed_at",
            "graded_at",
            "answers",
        )
        read_only_fields = fields


class QuizAttemptCreateSerializer(serializers.Serializer):
    """Learner responses keyed by question id: an option id, or text for short answers."""

    answers = serializers.DictField(
        child=serializers.CharField(allow_blank=True, max_length=5000), allow_empty=True
    )


class QuizGradeSerializer(serializers.Serializer):
    """Instructor verdicts on short answers keyed by answer id."""

    grades = serializers.DictField(child=serializers.BooleanField(), allow_empty=False)


class AssignmentSubmissionSerializer(serializers.ModelSerializer):
    learner = UserBasicSerializer(source="enrollment.user", read_only=True)
    course_title = serializers.CharField(source="assignment.course.title", read_only=True)
    assignment_title = serializers.CharField(source="assignment.title", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = AssignmentSubmission
        fields = (
            "id",
            "assignment",
            "assignment_title",
            "course_title",
            "enrollment",
            "learner",
            "status",
            "status_display",
            "text_content",
            "file_url",
            "submitted_at",
            "reviewed_at",
            "feedback",
        )
        read_only_fields = fields


class AssignmentSubmissionCreateSerializer(serializers.Serializer):
    text_content = serializers.CharField(required=False, allow_blank=True, default="")
    file_url = serializers.URLField(required=False, allow_null=True, default=None)

    def validate(self, data):
        if not (data.get("text_content") or "").strip() and not data.get("file_url"):
            raise serializers.ValidationError("Provide text_content or file_url.")
        return data


class AssignmentReviewSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    feedback = serializers.CharField(required=False, allow_blank=True, default="")
