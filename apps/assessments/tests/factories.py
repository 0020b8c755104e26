"""Quiz builders shared by the assessment and enrollment tests."""

from apps.assessments.models import Quiz, QuizOption, QuizQuestion


def build_quiz(course, passing_percentage=70, choice_questions=10, short_questions=0, **kwargs):
    """A quiz of one-point questions, so each choice question is worth 10% by default."""
    quiz = Quiz.objects.create(
        course=course,
        title=kwargs.pop("title", "Final quiz"),
        passing_percentage=passing_percentage,
        **kwargs,
    )
    for index in range(choice_questions):
        question = QuizQuestion.objects.create(quiz=quiz, text=f"Question {index + 1}", order=index)
        QuizOption.objects.create(question=question, text="Right", is_correct=True, order=0)
        QuizOption.objects.create(question=question, text="Wrong", order=1)
    for index in range(short_questions):
        QuizQuestion.objects.create(
            quiz=quiz,
            text=f"Explain topic {index + 1}",
            question_type=QuizQuestion.QuestionType.SHORT_ANSWER,
            order=choice_questions + index,
        )
    return quiz


def answer_sheet(quiz, correct):
    """Answers the first ``correct`` choice questions right and the rest wrong."""
    answers = {}
    questions = quiz.questions.prefetch_related("options").order_by("order")
    choice_index = 0
    for question in questions:
        if question.question_type == QuizQuestion.QuestionType.SHORT_ANSWER:
            answers[str(question.id)] = "My written answer"
            continue
        options = {option.is_correct: option for option in question.options.all()}
        answers[str(question.id)] = str(options[choice_index < correct].id)
        choice_index += 1
    return answers
