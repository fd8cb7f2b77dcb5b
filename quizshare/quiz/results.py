"""
Results aggregation and CSV export for a quiz's responses.

Two different percentage divisors are used on purpose:
- the quiz average divides by the quiz's *current* question count;
- each response's own percentage divides by the ``total_questions`` stored
  with that response.
They disagree when a quiz is edited after responses were recorded.
"""
import csv
import io
import re
from decimal import Decimal, ROUND_HALF_UP

CSV_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

_FILENAME_UNSAFE = re.compile(r'[^a-z0-9]', re.IGNORECASE)


def round_half_up(value: float, places: int = 0):
    """Round halves away from zero (0.5 -> 1, 2.25 -> 2.3), unlike round()."""
    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def score_percentage(score: int, total: int) -> int:
    if not total:
        return 0
    return round_half_up(score / total * 100)


def response_percentage(response) -> int:
    """Percentage for one response, against the question count it was taken with."""
    return score_percentage(response.score, response.total_questions)


def compute_stats(responses, question_count: int) -> dict:
    """Average score (one decimal), response count and average percentage."""
    responses = list(responses)
    if not responses:
        return {'average_score': 0, 'total_responses': 0, 'average_percentage': 0}

    total_score = sum(response.score for response in responses)
    mean_score = total_score / len(responses)
    average_percentage = (
        round_half_up(mean_score / question_count * 100) if question_count else 0
    )
    return {
        'average_score': round_half_up(mean_score, 1),
        'total_responses': len(responses),
        'average_percentage': average_percentage,
    }


def response_detail(response, questions) -> list[dict]:
    """Line up a stored response's answers with the quiz's current questions."""
    answers = list(response.answers or [])
    detail = []
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else ''
        detail.append({
            'question_number': index + 1,
            'question': question.question_text,
            'answer': answer,
            'correct_answer': question.correct_answer,
            'is_correct': answer == question.correct_answer,
        })
    return detail


def dashboard_summary(quizzes, response_counts: dict) -> dict:
    quizzes = list(quizzes)
    return {
        'total_quizzes': len(quizzes),
        'active_quizzes': sum(1 for quiz in quizzes if quiz.is_active),
        'total_responses': sum(response_counts.get(quiz.id, 0) for quiz in quizzes),
    }


def export_to_csv(responses, questions) -> str:
    """
    Render responses as CSV, one row per response in the given order.

    Every cell is quoted and embedded double quotes are doubled, so a name
    like ``Jane "JJ" Doe`` stays in its own column. Answer columns follow the
    quiz's current questions: missing answers are left empty, and answers
    beyond the current question count (recorded before questions were
    removed) are not exported. They stay in ``response.answers``.
    """
    question_count = len(questions)
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(
        ['Student Name', 'Email', 'Score', 'Percentage', 'Submitted At']
        + [f'Question {number}' for number in range(1, question_count + 1)]
    )

    for response in responses:
        answers = list(response.answers or [])[:question_count]
        answers += [''] * (question_count - len(answers))
        submitted_at = (
            response.submitted_at.strftime(CSV_TIMESTAMP_FORMAT) if response.submitted_at else ''
        )
        writer.writerow(
            [
                response.student_name,
                response.student_email,
                response.score,
                f'{response_percentage(response)}%',
                submitted_at,
            ]
            + answers
        )

    return output.getvalue().rstrip('\n')


def csv_filename(title: str) -> str:
    """``"Unit 3: Cells!"`` -> ``"unit_3__cells__results.csv"``."""
    return f"{_FILENAME_UNSAFE.sub('_', title).lower()}_results.csv"
