"""
Quiz authoring model.

A ``QuizDraft`` holds the editable state of a quiz that is being created or
edited. Every edit goes through a method on the draft, so a draft can be
built, mutated and validated without touching the database; persistence
happens only after ``validate()`` passes.

Editing rules:
- a quiz always keeps at least one question;
- a question keeps between 2 and 5 options;
- ``correct_answer`` is always empty or equal to one of the options. When
  the option it points to is removed it is cleared; when that option's text
  is edited the correct answer follows the new text.
- ``order_index`` always matches the question's position.
"""
from quizshare.quiz.store import QuizStore, StoreError

MIN_OPTIONS = 2
MAX_OPTIONS = 5

DIRECTIONS = ('up', 'down')


class ValidationFailure:
    """The first rule a draft violates, ready to be shown next to its field."""

    def __init__(self, field: str, message: str, question_index: int | None = None):
        self.field = field
        self.message = message
        self.question_index = question_index

    def __repr__(self) -> str:
        return f"<ValidationFailure {self.field}: {self.message}>"

    def __eq__(self, other) -> bool:
        if not isinstance(other, ValidationFailure):
            return NotImplemented
        return (self.field, self.message, self.question_index) == (
            other.field, other.message, other.question_index
        )

    def to_dict(self) -> dict:
        return {
            'field': self.field,
            'message': self.message,
            'question_index': self.question_index,
        }


class DraftValidationError(Exception):
    """Raised by the persist operations when the draft is not valid."""

    def __init__(self, failure: ValidationFailure):
        super().__init__(failure.message)
        self.failure = failure


class QuestionDraft:
    def __init__(self, question_text: str = '', options: list[str] | None = None,
                 correct_answer: str = '', order_index: int = 0, id: str | None = None):
        self.id = id
        self.question_text = question_text
        self.options = list(options) if options is not None else ['', '']
        self.correct_answer = correct_answer
        self.order_index = order_index

    def __repr__(self) -> str:
        return f"<QuestionDraft {self.order_index}: {self.question_text[:50]}>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'question_text': self.question_text,
            'options': list(self.options),
            'correct_answer': self.correct_answer,
            'order_index': self.order_index,
        }

    @classmethod
    def from_dict(cls, data: dict, order_index: int = 0) -> "QuestionDraft":
        options = data.get('options')
        return cls(
            question_text=str(data.get('question_text') or ''),
            options=[str(option or '') for option in options] if isinstance(options, list) else None,
            correct_answer=str(data.get('correct_answer') or ''),
            order_index=order_index,
            id=data.get('id'),
        )


class QuizDraft:
    """Editable quiz: title, description and an ordered list of questions."""

    def __init__(self, title: str = '', description: str = '',
                 questions: list[QuestionDraft] | None = None, quiz_id: str | None = None):
        self.quiz_id = quiz_id
        self.title = title
        self.description = description
        self.questions = list(questions) if questions else [QuestionDraft()]
        self._resequence()

    def __repr__(self) -> str:
        return f"<QuizDraft {self.title!r} ({len(self.questions)} questions)>"

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> "QuizDraft":
        """Build a draft from a JSON payload. Missing pieces get empty defaults."""
        questions = data.get('questions')
        drafts = None
        if isinstance(questions, list):
            drafts = [
                QuestionDraft.from_dict(question if isinstance(question, dict) else {}, index)
                for index, question in enumerate(questions)
            ]
        draft = cls(
            title=str(data.get('title') or ''),
            description=str(data.get('description') or ''),
            quiz_id=data.get('quiz_id'),
        )
        # An explicit empty list is kept so that validation can report it
        if drafts is not None:
            draft.questions = drafts
            draft._resequence()
        return draft

    @classmethod
    def from_quiz(cls, quiz, questions) -> "QuizDraft":
        """Load a persisted quiz and its questions (in any order) for editing."""
        ordered = sorted(questions, key=lambda question: question.order_index)
        return cls(
            title=quiz.title,
            description=quiz.description or '',
            questions=[
                QuestionDraft(
                    question_text=question.question_text,
                    options=list(question.options or []),
                    correct_answer=question.correct_answer,
                    id=question.id,
                )
                for question in ordered
            ],
            quiz_id=quiz.id,
        )

    def to_dict(self) -> dict:
        return {
            'quiz_id': self.quiz_id,
            'title': self.title,
            'description': self.description,
            'questions': [question.to_dict() for question in self.questions],
        }

    # ------------------------------------------------------------------
    # Edit operations
    # ------------------------------------------------------------------

    def _resequence(self) -> None:
        for index, question in enumerate(self.questions):
            question.order_index = index

    def _question(self, index: int) -> QuestionDraft | None:
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None

    def set_title(self, title: str) -> None:
        self.title = title

    def set_description(self, description: str) -> None:
        self.description = description

    def add_question(self) -> QuestionDraft:
        question = QuestionDraft(order_index=len(self.questions))
        self.questions.append(question)
        return question

    def remove_question(self, index: int) -> None:
        if len(self.questions) <= 1 or self._question(index) is None:
            return
        del self.questions[index]
        self._resequence()

    def move_question(self, index: int, direction: str) -> None:
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
        new_index = index - 1 if direction == 'up' else index + 1
        if self._question(index) is None or self._question(new_index) is None:
            return
        questions = self.questions
        questions[index], questions[new_index] = questions[new_index], questions[index]
        self._resequence()

    def update_question_text(self, index: int, text: str) -> None:
        question = self._question(index)
        if question is not None:
            question.question_text = text

    def set_correct_answer(self, index: int, option_text: str) -> None:
        """Mark an option as correct. Texts that are not current options are ignored."""
        question = self._question(index)
        if question is None:
            return
        if option_text == '' or option_text in question.options:
            question.correct_answer = option_text

    def add_option(self, question_index: int) -> None:
        question = self._question(question_index)
        if question is None or len(question.options) >= MAX_OPTIONS:
            return
        question.options.append('')

    def remove_option(self, question_index: int, option_index: int) -> None:
        question = self._question(question_index)
        if question is None or len(question.options) <= MIN_OPTIONS:
            return
        if not 0 <= option_index < len(question.options):
            return
        removed = question.options.pop(option_index)
        if question.correct_answer == removed:
            question.correct_answer = ''

    def update_option(self, question_index: int, option_index: int, text: str) -> None:
        question = self._question(question_index)
        if question is None or not 0 <= option_index < len(question.options):
            return
        old_text = question.options[option_index]
        question.options[option_index] = text
        # A blank option is never the correct answer, so filling it in selects nothing
        if old_text and question.correct_answer == old_text:
            question.correct_answer = text

    # ------------------------------------------------------------------
    # Validation & persistence
    # ------------------------------------------------------------------

    def validate(self) -> ValidationFailure | None:
        """Return the first rule this draft violates, or None when it can be saved."""
        if not self.title.strip():
            return ValidationFailure('title', 'Please enter a quiz title')

        if not self.questions:
            return ValidationFailure('questions', 'Please add at least one question')

        for i, question in enumerate(self.questions):
            number = i + 1
            if not question.question_text.strip():
                return ValidationFailure(
                    'question_text', f'Please enter text for question {number}', i
                )
            if not MIN_OPTIONS <= len(question.options) <= MAX_OPTIONS:
                return ValidationFailure(
                    'options',
                    f'Question {number} must have between {MIN_OPTIONS} and {MAX_OPTIONS} options',
                    i,
                )
            if any(not option.strip() for option in question.options):
                return ValidationFailure(
                    'options', f'Please fill in all options for question {number}', i
                )
            if not question.correct_answer.strip():
                return ValidationFailure(
                    'correct_answer', f'Please select a correct answer for question {number}', i
                )
            if question.correct_answer not in question.options:
                return ValidationFailure(
                    'correct_answer',
                    f'The correct answer for question {number} must be one of the provided options',
                    i,
                )
        return None

    def _ensure_valid(self) -> None:
        failure = self.validate()
        if failure is not None:
            raise DraftValidationError(failure)

    def _question_rows(self, quiz_id: str) -> list[dict]:
        return [
            {
                'quiz_id': quiz_id,
                'question_text': question.question_text.strip(),
                'options': [option.strip() for option in question.options],
                'correct_answer': question.correct_answer.strip(),
                'order_index': index,
            }
            for index, question in enumerate(self.questions)
        ]

    def persist_create(self, store: QuizStore, owner_id: int):
        """
        Insert the quiz row, then all of its question rows. Returns the new quiz.

        When the questions cannot be stored the quiz row is removed again and
        the StoreError is re-raised.
        """
        self._ensure_valid()
        quiz = store.insert('quizzes', {
            'title': self.title.strip(),
            'description': self.description.strip() or None,
            'created_by': owner_id,
            'is_active': True,
        })
        try:
            store.insert('questions', self._question_rows(quiz.id))
        except StoreError:
            # Never leave a shared quiz without questions behind
            store.delete('quizzes', id=quiz.id)
            raise
        self.quiz_id = quiz.id
        return quiz

    def persist_update(self, store: QuizStore, quiz_id: str):
        """
        Update the quiz row and replace every question row.

        Questions are deleted and re-inserted rather than merged, so question
        ids change on every save. Responses are unaffected because they store
        answers by position.
        """
        self._ensure_valid()
        quiz = store.update('quizzes', quiz_id, {
            'title': self.title.strip(),
            'description': self.description.strip() or None,
        })
        store.delete('questions', quiz_id=quiz_id)
        store.insert('questions', self._question_rows(quiz_id))
        self.quiz_id = quiz_id
        return quiz


# Named edit operations accepted by apply_operation, with their arguments
OPERATIONS = {
    'set_title': ('title',),
    'set_description': ('description',),
    'add_question': (),
    'remove_question': ('index',),
    'move_question': ('index', 'direction'),
    'update_question_text': ('index', 'text'),
    'set_correct_answer': ('index', 'option_text'),
    'add_option': ('question_index',),
    'remove_option': ('question_index', 'option_index'),
    'update_option': ('question_index', 'option_index', 'text'),
}

_INDEX_ARGUMENTS = {'index', 'question_index', 'option_index'}


def apply_operation(draft: QuizDraft, operation: dict) -> QuizDraft:
    """
    Apply one named edit, e.g. ``{"op": "move_question", "index": 2, "direction": "up"}``.

    Raises ValueError for unknown operations or missing arguments.
    """
    name = operation.get('op')
    if name not in OPERATIONS:
        raise ValueError(f"Unknown operation: {name}")
    args = []
    for arg in OPERATIONS[name]:
        if arg not in operation:
            raise ValueError(f"Operation {name} is missing argument {arg}")
        value = operation[arg]
        if arg in _INDEX_ARGUMENTS:
            value = int(value)
        elif arg != 'direction':
            value = '' if value is None else str(value)
        args.append(value)
    getattr(draft, name)(*args)
    return draft
