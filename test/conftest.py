"""
Pytest configuration and fixtures for testing.
Every test gets a fresh application backed by an in-memory SQLite database.
"""
import os

import pytest

# Set test environment variables BEFORE the package reads its configuration
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'test-secret-key-for-the-quiz-suite'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['APP_BASE_URL'] = 'http://quiz.test'
os.environ['MIN_PASSWORD_LENGTH'] = '8'
os.environ['LOG_LEVEL'] = 'WARNING'

from quizshare import create_app, db  # noqa: E402
from quizshare.auth.models import User  # noqa: E402
from quizshare.auth.utils import hash_password  # noqa: E402
from quizshare.security.rate_limiter import get_rate_limiter  # noqa: E402

PASSWORD = 'password123'


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,
        'APP_BASE_URL': 'http://quiz.test',
    })
    get_rate_limiter().reset()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
    get_rate_limiter().reset()


@pytest.fixture
def client(app):
    """Create an anonymous test client (a quiz taker)."""
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    """Run a test inside an application context."""
    with app.app_context():
        yield app


@pytest.fixture
def make_teacher(app_ctx):
    """Factory creating teacher accounts directly in the database; returns the user id."""
    def _make_teacher(email='teacher@example.com', full_name='Test Teacher'):
        user = User(email=email, password_hash=hash_password(PASSWORD), full_name=full_name)
        db.session.add(user)
        db.session.commit()
        return user.id
    return _make_teacher


def _registered_client(app, email, full_name):
    client = app.test_client()
    response = client.post('/api/auth/register', json={
        'email': email,
        'password': PASSWORD,
        'full_name': full_name,
    })
    assert response.status_code == 201, response.get_json()
    return client


@pytest.fixture
def teacher_client(app):
    """A client logged in as a freshly registered teacher."""
    return _registered_client(app, 'teacher@example.com', 'Test Teacher')


@pytest.fixture
def other_teacher_client(app):
    """A second, unrelated teacher."""
    return _registered_client(app, 'other@example.com', 'Other Teacher')


@pytest.fixture
def quiz_payload():
    return {
        'title': 'European Capitals',
        'description': 'A short geography warm-up',
        'questions': [
            {
                'question_text': 'What is the capital of France?',
                'options': ['Paris', 'Lyon', 'Nice'],
                'correct_answer': 'Paris',
            },
            {
                'question_text': 'What is the capital of Italy?',
                'options': ['Milan', 'Rome'],
                'correct_answer': 'Rome',
            },
            {
                'question_text': 'What is the capital of Spain?',
                'options': ['Madrid', 'Seville', 'Valencia', 'Bilbao'],
                'correct_answer': 'Madrid',
            },
        ],
    }


@pytest.fixture
def created_quiz(teacher_client, quiz_payload):
    """Create a quiz through the API and return its id."""
    response = teacher_client.post('/quiz/api/quizzes', json=quiz_payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['quiz']['id']


@pytest.fixture
def submit_answers():
    """Helper posting a taker submission for a quiz."""
    def _submit(client, quiz_id, answers, name='Jane Doe', email='jane@example.com', **extra):
        payload = {'student_name': name, 'student_email': email, 'answers': answers}
        payload.update(extra)
        return client.post(f'/quiz/api/take/{quiz_id}/submit', json=payload)
    return _submit
