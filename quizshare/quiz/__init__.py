"""
Quiz module: authoring and results for teachers, taking for anyone with a link.

Teachers create, edit and share quizzes and review the results.
Takers answer a shared quiz without an account.
"""
from flask import Blueprint
from quizshare.config import config

quiz_bp = Blueprint('quiz', __name__, url_prefix=config.QUIZ_URL_PREFIX)

from quizshare.quiz import teacher_routes  # noqa: E402,F401
from quizshare.quiz import student_routes  # noqa: E402,F401
