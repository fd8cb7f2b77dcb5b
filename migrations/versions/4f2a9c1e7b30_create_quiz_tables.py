"""Create users, quizzes, questions and responses tables

Revision ID: 4f2a9c1e7b30
Revises:
Create Date: 2026-10-18 10:12:03.418220

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = '4f2a9c1e7b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    inspector = inspect(op.get_bind())
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('full_name', sa.String(length=255), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    if 'quizzes' not in tables:
        op.create_table('quizzes',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('created_by', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
            sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quizzes_created_by', 'quizzes', ['created_by'], unique=False)
        op.create_index('ix_quizzes_created_at', 'quizzes', ['created_at'], unique=False)
        op.create_index('ix_quizzes_is_active', 'quizzes', ['is_active'], unique=False)

    if 'questions' not in tables:
        op.create_table('questions',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('quiz_id', sa.String(length=36), nullable=False),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('options', sa.JSON(), nullable=False),
            sa.Column('correct_answer', sa.Text(), nullable=False),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_questions_quiz_id', 'questions', ['quiz_id'], unique=False)
        op.create_index('ix_questions_quiz_order', 'questions', ['quiz_id', 'order_index'], unique=False)

    if 'responses' not in tables:
        op.create_table('responses',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('quiz_id', sa.String(length=36), nullable=False),
            sa.Column('student_name', sa.String(length=255), nullable=False),
            sa.Column('student_email', sa.String(length=255), nullable=False),
            sa.Column('student_register_number', sa.String(length=100), nullable=False, server_default=''),
            sa.Column('answers', sa.JSON(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('submitted_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_responses_quiz_id', 'responses', ['quiz_id'], unique=False)
        op.create_index('ix_responses_submitted_at', 'responses', ['submitted_at'], unique=False)


def downgrade():
    op.drop_index('ix_responses_submitted_at', table_name='responses')
    op.drop_index('ix_responses_quiz_id', table_name='responses')
    op.drop_table('responses')
    op.drop_index('ix_questions_quiz_order', table_name='questions')
    op.drop_index('ix_questions_quiz_id', table_name='questions')
    op.drop_table('questions')
    op.drop_index('ix_quizzes_is_active', table_name='quizzes')
    op.drop_index('ix_quizzes_created_at', table_name='quizzes')
    op.drop_index('ix_quizzes_created_by', table_name='quizzes')
    op.drop_table('quizzes')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
