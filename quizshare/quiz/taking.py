"""
Quiz-taking engine.

A ``QuizSession`` walks a taker through the questions one at a time:

    in_progress --submit()--> results_shown

Answers are kept in memory only. Nothing is written until ``submit()``
succeeds, so an abandoned session leaves no trace.
"""
from quizshare.quiz.results import score_percentage
from quizshare.quiz.store import QuizStore, NotFoundError

IN_PROGRESS = 'in_progress'
RESULTS_SHOWN = 'results_shown'


class QuizUnavailable(Exception):
    """The quiz does not exist, is inactive, is not visible, or has no questions."""


class SubmissionRejected(Exception):
    """The session is not in a state that can be submitted."""


def calculate_score(questions, answers) -> int:
    """Count answers that exactly match (case-sensitive, untrimmed) the correct answer."""
    return sum(
        1 for question, answer in zip(questions, answers)
        if answer == question.correct_answer
    )


class QuizSession:
    """In-memory state of one taker working through one quiz."""

    def __init__(self, quiz, questions):
        self.quiz = quiz
        self.questions = list(questions)
        self.current_question = 0
        self.answers = [''] * len(self.questions)
        self.student_name = ''
        self.student_email = ''
        self.student_register_number = ''
        self.state = IN_PROGRESS
        self.score = None
        self.response = None

    @classmethod
    def load(cls, quiz_id: str, store: QuizStore | None = None) -> "QuizSession":
        """
        Start a session for an active quiz. Loads through an anonymous store
        unless one is given, so takers only ever see active quizzes.
        """
        store = store or QuizStore.anonymous()
        try:
            quiz = store.fetch_one('quizzes', id=quiz_id, is_active=True)
        except NotFoundError:
            raise QuizUnavailable(f"Quiz {quiz_id} is not available") from None
        questions = store.fetch('questions', order_by='order_index', quiz_id=quiz_id)
        if not questions:
            raise QuizUnavailable(f"Quiz {quiz_id} has no questions")
        return cls(quiz, questions)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def is_last_question(self) -> bool:
        return self.current_question == len(self.questions) - 1

    @property
    def percentage(self) -> int:
        return score_percentage(self.score or 0, self.total_questions)

    def _check_in_progress(self) -> None:
        if self.state != IN_PROGRESS:
            raise SubmissionRejected('This quiz has already been submitted')

    def set_student_details(self, name: str, email: str, register_number: str = '') -> bool:
        """Student details are collected on the first question only."""
        self._check_in_progress()
        if self.current_question != 0:
            return False
        self.student_name = name or ''
        self.student_email = email or ''
        self.student_register_number = register_number or ''
        return True

    def select_answer(self, option_text: str) -> bool:
        """
        Pick one of the current question's options, or '' to clear the answer.
        Text that is not an option is ignored; returns whether it was taken.
        """
        self._check_in_progress()
        option_text = option_text or ''
        if option_text and option_text not in self.questions[self.current_question].options:
            return False
        self.answers[self.current_question] = option_text
        return True

    def next(self) -> bool:
        """Advance when the current question has an answer. Returns whether it moved."""
        self._check_in_progress()
        if not self.answers[self.current_question]:
            return False
        if self.is_last_question:
            return False
        self.current_question += 1
        return True

    def previous(self) -> bool:
        self._check_in_progress()
        if self.current_question == 0:
            return False
        self.current_question -= 1
        return True

    def rejection_reason(self) -> str | None:
        """Why the session cannot be submitted right now, or None if it can."""
        if self.state != IN_PROGRESS:
            return 'This quiz has already been submitted'
        if not self.student_name.strip() or not self.student_email.strip():
            return 'Please enter your name and email'
        if any(not answer.strip() for answer in self.answers):
            return 'Please answer all questions before submitting'
        if not self.is_last_question:
            return 'Please go to the last question to submit'
        return None

    def can_submit(self) -> bool:
        return self.rejection_reason() is None

    def submit(self, store: QuizStore | None = None):
        """
        Score the answers and store one response.

        Raises SubmissionRejected when the session is incomplete. A store
        failure propagates and leaves the session in progress for a retry.
        """
        reason = self.rejection_reason()
        if reason is not None:
            raise SubmissionRejected(reason)

        store = store or QuizStore.anonymous()
        score = calculate_score(self.questions, self.answers)
        self.response = store.insert('responses', {
            'quiz_id': self.quiz.id,
            'student_name': self.student_name.strip(),
            'student_email': self.student_email.strip(),
            'student_register_number': self.student_register_number.strip(),
            'answers': list(self.answers),
            'score': score,
            'total_questions': self.total_questions,
        })
        self.score = score
        self.state = RESULTS_SHOWN
        return self.response

    def review(self) -> list[dict]:
        """Per-question comparison of the taker's answer with the correct one."""
        return [
            {
                'question': question.question_text,
                'your_answer': answer,
                'correct_answer': question.correct_answer,
                'is_correct': answer == question.correct_answer,
            }
            for question, answer in zip(self.questions, self.answers)
        ]

    def replay(self, name: str, email: str, answers: list, register_number: str = '') -> None:
        """
        Drive the session with a complete submission: details on the first
        question, then select-and-advance through every answer. Stops at the
        first missing answer or answer that is not one of the options, leaving
        the session not submittable.
        """
        self.set_student_details(name, email, register_number)
        for index in range(self.total_questions):
            answer = answers[index] if index < len(answers) else ''
            if not self.select_answer(answer if isinstance(answer, str) else ''):
                break
            if self.is_last_question or not self.next():
                break
