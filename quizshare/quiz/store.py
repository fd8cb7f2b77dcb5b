"""
Data store access for quizzes, questions and responses.

``QuizStore`` exposes a small generic contract (fetch by equality filter,
insert, update by id, delete, count) over the three quiz collections and
enforces the row-level access rules on every call:

- a quiz owner can read and write the quiz, its questions and its responses;
- anyone can read active quizzes and their questions;
- anyone can insert a response, only the quiz owner can read responses;
- responses are never updated or deleted (except by quiz cascade).

Rows that the caller may not read behave as if they did not exist.
"""
from flask_login import current_user
from sqlalchemy import false, or_, select
from sqlalchemy.exc import SQLAlchemyError

from quizshare import db
from quizshare.quiz.models import Quiz, Question, Response


class StoreError(Exception):
    """A store request failed (connection problem, constraint violation, ...)."""


class NotFoundError(StoreError):
    """The row does not exist or the caller is not allowed to see it."""


class AccessDeniedError(StoreError):
    """The caller can see the row but is not allowed to write it."""


class UnknownTableError(StoreError):
    pass


TABLES = {
    'quizzes': Quiz,
    'questions': Question,
    'responses': Response,
}

# Columns a write may never change
_PROTECTED_COLUMNS = {
    'quizzes': {'id', 'created_by'},
    'questions': {'id', 'quiz_id'},
    'responses': {'id'},
}


class QuizStore:
    """Store handle bound to one caller (``caller_id`` is None for anonymous takers)."""

    def __init__(self, caller_id: int | None = None):
        self.caller_id = caller_id

    @classmethod
    def for_current_user(cls) -> "QuizStore":
        if current_user and current_user.is_authenticated:
            return cls(current_user.id)
        return cls(None)

    @classmethod
    def anonymous(cls) -> "QuizStore":
        return cls(None)

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise UnknownTableError(f"Unknown table: {table}") from None

    def _readable_quiz_condition(self):
        condition = Quiz.is_active.is_(True)
        if self.caller_id is not None:
            condition = or_(Quiz.created_by == self.caller_id, condition)
        return condition

    def _readable_query(self, table: str):
        model = self._model(table)
        query = db.session.query(model)
        if table == 'quizzes':
            return query.filter(self._readable_quiz_condition())
        if table == 'questions':
            readable_ids = select(Quiz.id).where(self._readable_quiz_condition())
            return query.filter(Question.quiz_id.in_(readable_ids))
        # responses
        if self.caller_id is None:
            return query.filter(false())
        owned_ids = select(Quiz.id).where(Quiz.created_by == self.caller_id)
        return query.filter(Response.quiz_id.in_(owned_ids))

    def _owns_quiz(self, quiz: Quiz | None) -> bool:
        return (
            quiz is not None
            and self.caller_id is not None
            and quiz.created_by == self.caller_id
        )

    def _owns_row(self, table: str, row) -> bool:
        if table == 'quizzes':
            return self._owns_quiz(row)
        return self._owns_quiz(row.quiz)

    def _is_readable(self, table: str, row) -> bool:
        return self._readable_query(table).filter_by(id=row.id).count() > 0

    def _check_quiz_owner(self, quiz_id: str) -> Quiz:
        quiz = db.session.get(Quiz, quiz_id)
        if quiz is None or not (self._owns_quiz(quiz) or quiz.is_active):
            raise NotFoundError(f"Quiz {quiz_id} not found")
        if not self._owns_quiz(quiz):
            raise AccessDeniedError(f"Not allowed to modify quiz {quiz_id}")
        return quiz

    def _check_insert(self, table: str, item: dict) -> None:
        if table == 'quizzes':
            if self.caller_id is None:
                raise AccessDeniedError("Sign in to create quizzes")
            item.setdefault('created_by', self.caller_id)
            if item['created_by'] != self.caller_id:
                raise AccessDeniedError("Quizzes can only be created for yourself")
        elif table == 'questions':
            self._check_quiz_owner(item.get('quiz_id'))
        else:
            quiz_id = item.get('quiz_id')
            if not self._readable_query('quizzes').filter_by(id=quiz_id).count():
                raise NotFoundError(f"Quiz {quiz_id} not found")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _commit(self) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e

    def fetch(self, table: str, order_by: str | None = None, descending: bool = False, **filters) -> list:
        """Return readable rows matching all equality ``filters``."""
        model = self._model(table)
        try:
            query = self._readable_query(table).filter_by(**filters)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            return query.all()
        except AttributeError as e:
            raise StoreError(f"Unknown column for {table}: {order_by}") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e

    def fetch_one(self, table: str, **filters):
        rows = self.fetch(table, **filters)
        if not rows:
            raise NotFoundError(f"No {table} row matching {filters}")
        return rows[0]

    def insert(self, table: str, rows):
        """
        Insert one row (a dict) or several rows (a list of dicts) in a
        single commit and return the created object(s).
        """
        model = self._model(table)
        single = isinstance(rows, dict)
        items = [dict(rows)] if single else [dict(row) for row in rows]

        objects = []
        for item in items:
            self._check_insert(table, item)
            try:
                objects.append(model(**item))
            except TypeError as e:
                raise StoreError(f"Invalid {table} row: {e}") from e

        db.session.add_all(objects)
        self._commit()
        return objects[0] if single else objects

    def update(self, table: str, row_id: str, values: dict):
        model = self._model(table)
        if table == 'responses':
            raise AccessDeniedError("Responses cannot be modified")

        row = db.session.get(model, row_id)
        if row is None or not self._is_readable(table, row):
            raise NotFoundError(f"{table} row {row_id} not found")
        if not self._owns_row(table, row):
            raise AccessDeniedError(f"Not allowed to modify {table} row {row_id}")

        for key, value in values.items():
            if key in _PROTECTED_COLUMNS[table] or not hasattr(model, key):
                raise StoreError(f"Column {key} cannot be updated on {table}")
            setattr(row, key, value)
        self._commit()
        return row

    def delete(self, table: str, **filters) -> int:
        """Delete every readable row matching ``filters``; returns how many were deleted."""
        if table == 'responses':
            raise AccessDeniedError("Responses cannot be deleted")
        if not filters:
            raise StoreError("Refusing to delete without a filter")

        rows = self.fetch(table, **filters)
        for row in rows:
            if not self._owns_row(table, row):
                raise AccessDeniedError(f"Not allowed to delete {table} row {row.id}")
        for row in rows:
            db.session.delete(row)
        self._commit()
        return len(rows)

    def count(self, table: str, **filters) -> int:
        try:
            return self._readable_query(table).filter_by(**filters).count()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e
