"""
Teacher routes for quiz management.

Teachers can:
- List their quizzes with response counts (dashboard)
- Create, edit, delete and activate/deactivate quizzes
- Edit a draft quiz step by step before saving it
- View results, individual responses and export them as CSV
- Get the shareable link for a quiz
"""
from flask import Response as HttpResponse, current_app, jsonify
from flask_login import login_required, current_user

from quizshare.quiz import quiz_bp
from quizshare.quiz.authoring import QuizDraft, DraftValidationError, apply_operation
from quizshare.quiz.results import (
    compute_stats,
    csv_filename,
    dashboard_summary,
    export_to_csv,
    response_detail,
    response_percentage,
)
from quizshare.quiz.store import QuizStore, StoreError, NotFoundError, AccessDeniedError
from quizshare.quiz.utils import json_payload, share_link
from quizshare.security import SecurityLogger


def _not_found():
    return jsonify({'success': False, 'error': 'Quiz not found or not authorized'}), 404


def _access_denied(resource: str):
    SecurityLogger.log_unauthorized_access(resource, current_user.id)
    return jsonify({'success': False, 'error': 'You are not allowed to change this quiz'}), 403


def _store_failure(action: str, error: Exception):
    current_app.logger.exception(f"Failed to {action}: {str(error)}")
    return jsonify({'success': False, 'error': current_app.config['MSG_STORE_FAILURE']}), 500


def _validation_failure(error: DraftValidationError):
    failure = error.failure
    return jsonify({
        'success': False,
        'error': failure.message,
        'field': failure.field,
        'question_index': failure.question_index,
    }), 400


def _owned_quiz(store: QuizStore, quiz_id: str):
    """Load a quiz only if the current teacher owns it; raises NotFoundError otherwise."""
    return store.fetch_one('quizzes', id=quiz_id, created_by=current_user.id)


def _quiz_questions(store: QuizStore, quiz_id: str):
    return store.fetch('questions', order_by='order_index', quiz_id=quiz_id)


@quiz_bp.route('/api/quizzes', methods=['GET'])
@login_required
def list_quizzes():
    """
    Dashboard: the teacher's quizzes, newest first, with response counts.
    """
    store = QuizStore.for_current_user()
    try:
        quizzes = store.fetch(
            'quizzes', order_by='created_at', descending=True, created_by=current_user.id
        )
        response_counts = {
            quiz.id: store.count('responses', quiz_id=quiz.id) for quiz in quizzes
        }
    except StoreError as e:
        return _store_failure('load quizzes', e)

    quizzes_data = []
    for quiz in quizzes:
        quiz_data = quiz.to_dict()
        quiz_data['response_count'] = response_counts[quiz.id]
        quiz_data['share_link'] = share_link(quiz.id)
        quizzes_data.append(quiz_data)

    return jsonify({
        'success': True,
        'quizzes': quizzes_data,
        'summary': dashboard_summary(quizzes, response_counts),
    }), 200


@quiz_bp.route('/api/quizzes', methods=['POST'])
@login_required
def create_quiz():
    """
    Create a quiz with all of its questions.

    Request body:
    {
        "title": "Quiz Title",
        "description": "Optional description",
        "questions": [
            {"question_text": "2 + 2?", "options": ["3", "4"], "correct_answer": "4"}
        ]
    }
    """
    draft = QuizDraft.from_dict(json_payload())
    store = QuizStore.for_current_user()
    try:
        quiz = draft.persist_create(store, current_user.id)
    except DraftValidationError as e:
        return _validation_failure(e)
    except StoreError as e:
        return _store_failure('create quiz', e)

    current_app.logger.info(
        f"Quiz created: id={quiz.id}, questions={len(draft.questions)}, owner={current_user.id}"
    )
    quiz_data = quiz.to_dict()
    quiz_data['share_link'] = share_link(quiz.id)
    return jsonify({
        'success': True,
        'message': 'Quiz created successfully',
        'quiz': quiz_data,
    }), 201


@quiz_bp.route('/api/quizzes/<quiz_id>', methods=['GET'])
@login_required
def get_quiz(quiz_id):
    """
    Get quiz details including all questions, plus the editable draft form.
    """
    store = QuizStore.for_current_user()
    try:
        quiz = _owned_quiz(store, quiz_id)
        questions = _quiz_questions(store, quiz_id)
    except NotFoundError:
        return _not_found()
    except StoreError as e:
        return _store_failure('load quiz', e)

    quiz_data = quiz.to_dict()
    quiz_data['questions'] = [question.to_dict() for question in questions]
    quiz_data['share_link'] = share_link(quiz.id)
    return jsonify({
        'success': True,
        'quiz': quiz_data,
        'draft': QuizDraft.from_quiz(quiz, questions).to_dict(),
    }), 200


@quiz_bp.route('/api/quizzes/<quiz_id>', methods=['PUT', 'PATCH'])
@login_required
def update_quiz(quiz_id):
    """
    Save an edited quiz. The full question list replaces the stored one.
    """
    draft = QuizDraft.from_dict(json_payload())
    store = QuizStore.for_current_user()
    try:
        _owned_quiz(store, quiz_id)
        quiz = draft.persist_update(store, quiz_id)
    except DraftValidationError as e:
        return _validation_failure(e)
    except NotFoundError:
        return _not_found()
    except AccessDeniedError:
        return _access_denied(f"quiz:{quiz_id}")
    except StoreError as e:
        return _store_failure('update quiz', e)

    current_app.logger.info(f"Quiz updated: id={quiz_id}, questions={len(draft.questions)}")
    return jsonify({
        'success': True,
        'message': 'Quiz updated successfully',
        'quiz': quiz.to_dict(),
    }), 200


@quiz_bp.route('/api/quizzes/<quiz_id>', methods=['DELETE'])
@login_required
def delete_quiz(quiz_id):
    """Delete a quiz together with its questions and responses."""
    store = QuizStore.for_current_user()
    try:
        _owned_quiz(store, quiz_id)
        store.delete('quizzes', id=quiz_id)
    except NotFoundError:
        return _not_found()
    except AccessDeniedError:
        return _access_denied(f"quiz:{quiz_id}")
    except StoreError as e:
        return _store_failure('delete quiz', e)

    current_app.logger.info(f"Quiz deleted: id={quiz_id}, owner={current_user.id}")
    return jsonify({'success': True, 'message': 'Quiz deleted successfully'}), 200


@quiz_bp.route('/api/quizzes/<quiz_id>/toggle', methods=['POST'])
@login_required
def toggle_quiz(quiz_id):
    """Activate or deactivate a quiz. Inactive quizzes cannot be taken."""
    store = QuizStore.for_current_user()
    try:
        quiz = _owned_quiz(store, quiz_id)
        quiz = store.update('quizzes', quiz_id, {'is_active': not quiz.is_active})
    except NotFoundError:
        return _not_found()
    except AccessDeniedError:
        return _access_denied(f"quiz:{quiz_id}")
    except StoreError as e:
        return _store_failure('update quiz status', e)

    current_app.logger.info(f"Quiz {quiz_id} is_active={quiz.is_active}")
    return jsonify({'success': True, 'quiz': quiz.to_dict()}), 200


@quiz_bp.route('/api/quizzes/<quiz_id>/results', methods=['GET'])
@login_required
def quiz_results(quiz_id):
    """
    Responses (newest first, each with its percentage) and summary statistics.
    """
    store = QuizStore.for_current_user()
    try:
        quiz = _owned_quiz(store, quiz_id)
        questions = _quiz_questions(store, quiz_id)
        responses = store.fetch(
            'responses', order_by='submitted_at', descending=True, quiz_id=quiz_id
        )
    except NotFoundError:
        return _not_found()
    except StoreError as e:
        return _store_failure('load results', e)

    responses_data = []
    for response in responses:
        response_data = response.to_dict()
        response_data['percentage'] = response_percentage(response)
        responses_data.append(response_data)

    return jsonify({
        'success': True,
        'quiz': quiz.to_dict(),
        'questions': [question.to_dict() for question in questions],
        'responses': responses_data,
        'stats': compute_stats(responses, len(questions)),
        'share_link': share_link(quiz.id),
    }), 200


@quiz_bp.route('/api/quizzes/<quiz_id>/responses/<response_id>', methods=['GET'])
@login_required
def response_details(quiz_id, response_id):
    """One response lined up against the quiz's questions."""
    store = QuizStore.for_current_user()
    try:
        _owned_quiz(store, quiz_id)
        response = store.fetch_one('responses', id=response_id, quiz_id=quiz_id)
        questions = _quiz_questions(store, quiz_id)
    except NotFoundError:
        return jsonify({'success': False, 'error': 'Response not found or not authorized'}), 404
    except StoreError as e:
        return _store_failure('load response', e)

    response_data = response.to_dict()
    response_data['percentage'] = response_percentage(response)
    return jsonify({
        'success': True,
        'response': response_data,
        'details': response_detail(response, questions),
    }), 200


@quiz_bp.route('/api/quizzes/<quiz_id>/export', methods=['GET'])
@login_required
def export_results(quiz_id):
    """Download all responses as a CSV file."""
    store = QuizStore.for_current_user()
    try:
        quiz = _owned_quiz(store, quiz_id)
        questions = _quiz_questions(store, quiz_id)
        responses = store.fetch(
            'responses', order_by='submitted_at', descending=True, quiz_id=quiz_id
        )
    except NotFoundError:
        return _not_found()
    except StoreError as e:
        return _store_failure('export results', e)

    if not responses:
        return jsonify({'success': False, 'error': 'No responses to export'}), 400

    filename = csv_filename(quiz.title)
    return HttpResponse(
        export_to_csv(responses, questions),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@quiz_bp.route('/api/quizzes/<quiz_id>/link', methods=['GET'])
@login_required
def quiz_link(quiz_id):
    store = QuizStore.for_current_user()
    try:
        quiz = _owned_quiz(store, quiz_id)
    except NotFoundError:
        return _not_found()
    except StoreError as e:
        return _store_failure('load quiz', e)

    return jsonify({
        'success': True,
        'link': share_link(quiz.id),
        'is_active': quiz.is_active,
    }), 200


@quiz_bp.route('/api/drafts/edit', methods=['POST'])
@login_required
def edit_draft():
    """
    Apply authoring operations to a draft without saving it.

    Request body:
    {
        "draft": {"title": "...", "questions": [...]},
        "operations": [
            {"op": "add_question"},
            {"op": "update_option", "question_index": 0, "option_index": 1, "text": "Paris"},
            {"op": "move_question", "index": 1, "direction": "up"}
        ]
    }

    Responds with the resulting draft and the first validation failure, if any.
    """
    data = json_payload()
    draft_data = data.get('draft')
    draft = QuizDraft.from_dict(draft_data) if isinstance(draft_data, dict) else QuizDraft()

    operations = data.get('operations') or []
    if not isinstance(operations, list):
        return jsonify({'success': False, 'error': 'operations must be a list'}), 400

    for position, operation in enumerate(operations):
        if not isinstance(operation, dict):
            return jsonify({
                'success': False,
                'error': f'Operation {position + 1} must be an object',
            }), 400
        try:
            apply_operation(draft, operation)
        except (ValueError, TypeError) as e:
            return jsonify({
                'success': False,
                'error': f'Operation {position + 1}: {str(e)}',
            }), 400

    failure = draft.validate()
    return jsonify({
        'success': True,
        'draft': draft.to_dict(),
        'valid': failure is None,
        'validation': failure.to_dict() if failure else None,
    }), 200
