"""
Test cases for teacher quiz management endpoints.
"""
import csv
import io


class TestCreateQuiz:
    """Creating quizzes."""

    def test_create_quiz(self, teacher_client, quiz_payload):
        response = teacher_client.post('/quiz/api/quizzes', json=quiz_payload)
        assert response.status_code == 201
        quiz = response.get_json()['quiz']
        assert quiz['title'] == 'European Capitals'
        assert quiz['is_active'] is True
        assert quiz['share_link'] == f"http://quiz.test/quiz/{quiz['id']}"

    def test_create_quiz_validation_error(self, teacher_client, quiz_payload):
        quiz_payload['questions'][1]['correct_answer'] = ''
        response = teacher_client.post('/quiz/api/quizzes', json=quiz_payload)
        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'Please select a correct answer for question 2'
        assert data['field'] == 'correct_answer'
        assert data['question_index'] == 1

    def test_create_quiz_without_title(self, teacher_client, quiz_payload):
        quiz_payload['title'] = '   '
        response = teacher_client.post('/quiz/api/quizzes', json=quiz_payload)
        assert response.status_code == 400
        assert response.get_json()['field'] == 'title'
        assert teacher_client.get('/quiz/api/quizzes').get_json()['quizzes'] == []

    def test_create_quiz_requires_login(self, client, quiz_payload):
        assert client.post('/quiz/api/quizzes', json=quiz_payload).status_code == 401


class TestDashboard:
    """Listing a teacher's quizzes."""

    def test_list_quizzes_with_counts(self, teacher_client, client, created_quiz, submit_answers):
        submit_answers(client, created_quiz, ['Paris', 'Rome', 'Madrid'])

        response = teacher_client.get('/quiz/api/quizzes')
        assert response.status_code == 200
        data = response.get_json()
        assert len(data['quizzes']) == 1
        assert data['quizzes'][0]['response_count'] == 1
        assert data['summary'] == {'total_quizzes': 1, 'active_quizzes': 1, 'total_responses': 1}

    def test_list_only_own_quizzes(self, other_teacher_client, created_quiz):
        response = other_teacher_client.get('/quiz/api/quizzes')
        assert response.get_json()['quizzes'] == []

    def test_newest_first(self, teacher_client, quiz_payload):
        for title in ['First', 'Second']:
            quiz_payload['title'] = title
            teacher_client.post('/quiz/api/quizzes', json=quiz_payload)
        titles = [q['title'] for q in teacher_client.get('/quiz/api/quizzes').get_json()['quizzes']]
        assert titles == ['Second', 'First']


class TestEditQuiz:
    """Loading, updating, toggling and deleting a quiz."""

    def test_get_quiz_with_draft(self, teacher_client, created_quiz):
        response = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}')
        assert response.status_code == 200
        data = response.get_json()
        assert [q['order_index'] for q in data['quiz']['questions']] == [0, 1, 2]
        assert data['quiz']['questions'][0]['correct_answer'] == 'Paris'
        assert data['draft']['quiz_id'] == created_quiz
        assert len(data['draft']['questions']) == 3

    def test_other_teacher_gets_404(self, other_teacher_client, created_quiz):
        response = other_teacher_client.get(f'/quiz/api/quizzes/{created_quiz}')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Quiz not found or not authorized'

    def test_update_replaces_questions(self, teacher_client, created_quiz, quiz_payload):
        quiz_payload['title'] = 'Capitals (revised)'
        quiz_payload['questions'] = quiz_payload['questions'][1:]
        response = teacher_client.put(f'/quiz/api/quizzes/{created_quiz}', json=quiz_payload)
        assert response.status_code == 200
        assert response.get_json()['quiz']['title'] == 'Capitals (revised)'

        quiz = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}').get_json()['quiz']
        assert [q['question_text'] for q in quiz['questions']] == [
            'What is the capital of Italy?', 'What is the capital of Spain?',
        ]
        assert [q['order_index'] for q in quiz['questions']] == [0, 1]

    def test_invalid_update_keeps_quiz(self, teacher_client, created_quiz, quiz_payload):
        quiz_payload['questions'][0]['options'] = ['Paris']
        response = teacher_client.put(f'/quiz/api/quizzes/{created_quiz}', json=quiz_payload)
        assert response.status_code == 400
        quiz = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}').get_json()['quiz']
        assert len(quiz['questions']) == 3

    def test_other_teacher_cannot_update(self, other_teacher_client, created_quiz, quiz_payload):
        response = other_teacher_client.put(f'/quiz/api/quizzes/{created_quiz}', json=quiz_payload)
        assert response.status_code == 404

    def test_toggle(self, teacher_client, client, created_quiz):
        response = teacher_client.post(f'/quiz/api/quizzes/{created_quiz}/toggle')
        assert response.status_code == 200
        assert response.get_json()['quiz']['is_active'] is False
        assert client.get(f'/quiz/api/take/{created_quiz}').status_code == 404

        response = teacher_client.post(f'/quiz/api/quizzes/{created_quiz}/toggle')
        assert response.get_json()['quiz']['is_active'] is True
        assert client.get(f'/quiz/api/take/{created_quiz}').status_code == 200

    def test_delete(self, teacher_client, created_quiz):
        response = teacher_client.delete(f'/quiz/api/quizzes/{created_quiz}')
        assert response.status_code == 200
        assert teacher_client.get(f'/quiz/api/quizzes/{created_quiz}').status_code == 404

    def test_other_teacher_cannot_delete(self, other_teacher_client, teacher_client, created_quiz):
        assert other_teacher_client.delete(f'/quiz/api/quizzes/{created_quiz}').status_code == 404
        assert teacher_client.get(f'/quiz/api/quizzes/{created_quiz}').status_code == 200

    def test_share_link(self, teacher_client, created_quiz):
        data = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}/link').get_json()
        assert data['link'] == f'http://quiz.test/quiz/{created_quiz}'
        assert data['is_active'] is True


class TestResults:
    """Viewing and exporting results."""

    def test_results_and_stats(self, teacher_client, client, created_quiz, submit_answers):
        submit_answers(client, created_quiz, ['Paris', 'Rome', 'Madrid'], name='Ann')
        submit_answers(client, created_quiz, ['Lyon', 'Milan', 'Madrid'], name='Ben')
        submit_answers(client, created_quiz, ['Paris', 'Milan', 'Madrid'], name='Cal')

        response = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}/results')
        assert response.status_code == 200
        data = response.get_json()
        assert data['stats'] == {'average_score': 2.0, 'total_responses': 3, 'average_percentage': 67}
        assert sorted(r['percentage'] for r in data['responses']) == [33, 67, 100]
        assert len(data['questions']) == 3

    def test_empty_results(self, teacher_client, created_quiz):
        data = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}/results').get_json()
        assert data['responses'] == []
        assert data['stats'] == {'average_score': 0, 'total_responses': 0, 'average_percentage': 0}

    def test_other_teacher_cannot_see_results(self, other_teacher_client, created_quiz):
        response = other_teacher_client.get(f'/quiz/api/quizzes/{created_quiz}/results')
        assert response.status_code == 404

    def test_response_details(self, teacher_client, client, created_quiz, submit_answers):
        submitted = submit_answers(client, created_quiz, ['Paris', 'Milan', 'Madrid'])
        response_id = submitted.get_json()['result']['response_id']

        response = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}/responses/{response_id}')
        assert response.status_code == 200
        data = response.get_json()
        assert data['response']['percentage'] == 67
        assert [d['is_correct'] for d in data['details']] == [True, False, True]

    def test_export_csv(self, teacher_client, client, created_quiz, submit_answers):
        submit_answers(client, created_quiz, ['Paris', 'Rome', 'Madrid'], name='Jane "JJ" Doe')

        response = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}/export')
        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert response.headers['Content-Disposition'] == (
            'attachment; filename="european_capitals_results.csv"'
        )
        rows = list(csv.reader(io.StringIO(response.get_data(as_text=True))))
        assert rows[1][:4] == ['Jane "JJ" Doe', 'jane@example.com', '3', '100%']
        assert rows[1][5:] == ['Paris', 'Rome', 'Madrid']

    def test_export_without_responses(self, teacher_client, created_quiz):
        response = teacher_client.get(f'/quiz/api/quizzes/{created_quiz}/export')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No responses to export'


class TestDraftEditing:
    """Applying edit operations to an unsaved draft."""

    def test_edit_operations(self, teacher_client):
        response = teacher_client.post('/quiz/api/drafts/edit', json={
            'operations': [
                {'op': 'set_title', 'title': 'Planets'},
                {'op': 'update_question_text', 'index': 0, 'text': 'Largest planet?'},
                {'op': 'update_option', 'question_index': 0, 'option_index': 0, 'text': 'Jupiter'},
                {'op': 'update_option', 'question_index': 0, 'option_index': 1, 'text': 'Mars'},
                {'op': 'set_correct_answer', 'index': 0, 'option_text': 'Jupiter'},
            ],
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['valid'] is True
        assert data['validation'] is None
        assert data['draft']['questions'][0]['correct_answer'] == 'Jupiter'

    def test_edit_reports_first_failure(self, teacher_client):
        response = teacher_client.post('/quiz/api/drafts/edit', json={
            'draft': {'title': 'Planets'},
            'operations': [{'op': 'add_question'}],
        })
        data = response.get_json()
        assert data['valid'] is False
        assert data['validation'] == {
            'field': 'question_text',
            'message': 'Please enter text for question 1',
            'question_index': 0,
        }
        assert len(data['draft']['questions']) == 2

    def test_unknown_operation(self, teacher_client):
        response = teacher_client.post('/quiz/api/drafts/edit', json={
            'operations': [{'op': 'explode'}],
        })
        assert response.status_code == 400
        assert response.get_json()['error'].startswith('Operation 1:')
