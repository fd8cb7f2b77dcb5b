"""
Student routes for taking a shared quiz.

Students do not log in. With the quiz link they can:
- Load an active quiz (questions without their correct answers)
- Submit their answers and get their score back
"""
from flask import current_app, jsonify

from quizshare.config import config
from quizshare.quiz import quiz_bp
from quizshare.quiz.store import StoreError
from quizshare.quiz.taking import QuizSession, QuizUnavailable, SubmissionRejected
from quizshare.quiz.utils import json_payload
from quizshare.security import rate_limit


def _unavailable():
    return jsonify({'success': False, 'error': 'Quiz not found or not available'}), 404


@quiz_bp.route('/api/take/<quiz_id>', methods=['GET'])
def get_quiz_for_taking(quiz_id):
    """
    Public view of an active quiz. Correct answers are never sent to takers.
    """
    try:
        session = QuizSession.load(quiz_id)
    except QuizUnavailable:
        return _unavailable()
    except StoreError as e:
        current_app.logger.exception(f"Failed to load quiz {quiz_id} for taking: {str(e)}")
        return jsonify({'success': False, 'error': current_app.config['MSG_STORE_FAILURE']}), 500

    quiz = session.quiz
    return jsonify({
        'success': True,
        'quiz': {
            'id': quiz.id,
            'title': quiz.title,
            'description': quiz.description,
            'total_questions': session.total_questions,
            'questions': [
                question.to_dict(include_answer=False) for question in session.questions
            ],
        }
    }), 200


@quiz_bp.route('/api/take/<quiz_id>/submit', methods=['POST'])
@rate_limit(
    max_requests=config.SUBMIT_RATE_LIMIT,
    window_seconds=config.SUBMIT_RATE_WINDOW_SECONDS,
    error_message="Too many submissions. Please wait a moment and try again.",
)
def submit_quiz(quiz_id):
    """
    Submit a completed quiz.

    Request body:
    {
        "student_name": "Jane Doe",
        "student_email": "jane@example.com",
        "student_register_number": "optional",
        "answers": ["4", "Paris", ...]  // one per question, in order
    }
    """
    data = json_payload()
    answers = data.get('answers')
    if not isinstance(answers, list):
        return jsonify({'success': False, 'error': 'answers must be a list'}), 400

    try:
        session = QuizSession.load(quiz_id)
    except QuizUnavailable:
        return _unavailable()
    except StoreError as e:
        current_app.logger.exception(f"Failed to load quiz {quiz_id} for submission: {str(e)}")
        return jsonify({'success': False, 'error': current_app.config['MSG_STORE_FAILURE']}), 500

    session.replay(
        name=str(data.get('student_name') or ''),
        email=str(data.get('student_email') or ''),
        register_number=str(data.get('student_register_number') or ''),
        answers=answers,
    )

    try:
        response = session.submit()
    except SubmissionRejected as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except StoreError as e:
        current_app.logger.exception(f"Failed to submit quiz {quiz_id}: {str(e)}")
        return jsonify({
            'success': False,
            'error': 'Failed to submit quiz. Please try again.',
        }), 500

    current_app.logger.info(
        f"Response submitted: quiz={quiz_id}, response={response.id}, "
        f"score={session.score}/{session.total_questions}"
    )
    return jsonify({
        'success': True,
        'message': f'Thank you for taking the quiz, {response.student_name}!',
        'result': {
            'response_id': response.id,
            'score': session.score,
            'total_questions': session.total_questions,
            'percentage': session.percentage,
            'review': session.review(),
        }
    }), 201
