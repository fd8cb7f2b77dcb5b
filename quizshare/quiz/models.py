"""
Database models for quizzes, their questions and student responses.

Identifiers are opaque uuid4 strings so that a quiz id can be embedded
in a shareable link without exposing row counts.
"""
import uuid
from datetime import datetime

from quizshare import db


def _new_id() -> str:
    return str(uuid.uuid4())


class Quiz(db.Model):
    """A named, ordered set of multiple-choice questions owned by a teacher."""
    __tablename__ = "quizzes"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # Relationships
    questions = db.relationship(
        "Question", backref="quiz",
        cascade="all, delete-orphan", order_by="Question.order_index"
    )
    responses = db.relationship(
        "Response", backref="quiz", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Quiz {self.id}: {self.title}>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'is_active': self.is_active,
        }


class Question(db.Model):
    """
    One multiple-choice item.

    ``options`` is an ordered list of 2-5 texts and ``correct_answer``
    holds the text of the correct option, not its position.
    """
    __tablename__ = "questions"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    quiz_id = db.Column(db.String(36), db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=False)
    options = db.Column(db.JSON, nullable=False, default=list)
    correct_answer = db.Column(db.Text, nullable=False)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.Index('ix_questions_quiz_order', 'quiz_id', 'order_index'),
    )

    def __repr__(self) -> str:
        return f"<Question {self.id}: {self.question_text[:50]}>"

    def to_dict(self, include_answer: bool = True) -> dict:
        data = {
            'id': self.id,
            'quiz_id': self.quiz_id,
            'question_text': self.question_text,
            'options': list(self.options or []),
            'order_index': self.order_index,
        }
        if include_answer:
            data['correct_answer'] = self.correct_answer
        return data


class Response(db.Model):
    """
    One student's completed attempt. Responses are append-only.

    Answers are stored positionally, so they stay aligned with the quiz
    even though question rows are regenerated whenever the quiz is edited.
    """
    __tablename__ = "responses"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    quiz_id = db.Column(db.String(36), db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    student_name = db.Column(db.String(255), nullable=False)
    student_email = db.Column(db.String(255), nullable=False)
    student_register_number = db.Column(db.String(100), nullable=False, default='')
    answers = db.Column(db.JSON, nullable=False, default=list)
    score = db.Column(db.Integer, nullable=False, default=0)
    total_questions = db.Column(db.Integer, nullable=False, default=0)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Response {self.id}: {self.student_name}, Quiz {self.quiz_id}>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'quiz_id': self.quiz_id,
            'student_name': self.student_name,
            'student_email': self.student_email,
            'student_register_number': self.student_register_number,
            'answers': list(self.answers or []),
            'score': self.score,
            'total_questions': self.total_questions,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
        }
