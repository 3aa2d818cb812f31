"""initial schema: user, problem, user_problem

Revision ID: 3f9c2a1d7e40
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9c2a1d7e40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('google_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('profile_picture', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_google_id'), ['google_id'], unique=True)
        batch_op.create_index(batch_op.f('ix_user_email'), ['email'], unique=False)

    op.create_table(
        'problem',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('platform', sa.String(length=20), nullable=False),
        sa.Column('question_id', sa.String(length=50), nullable=False),
        sa.Column('title_slug', sa.String(length=200), nullable=False),
        sa.Column('title', sa.String(length=300), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('difficulty', sa.String(length=10), nullable=False),
        sa.Column('topic_tags_json', sa.Text(), nullable=True),
        sa.Column('problem_url', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('platform', 'title_slug', name='uq_problem_platform_title_slug'),
        sa.UniqueConstraint('platform', 'question_id', name='uq_problem_platform_question_id'),
    )
    with op.batch_alter_table('problem', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_problem_platform'), ['platform'], unique=False)
        batch_op.create_index(batch_op.f('ix_problem_title_slug'), ['title_slug'], unique=False)
        batch_op.create_index(batch_op.f('ix_problem_difficulty'), ['difficulty'], unique=False)

    op.create_table(
        'user_problem',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('problem_id', sa.Integer(), nullable=False),
        sa.Column('problem_link', sa.String(length=500), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('date_solved', sa.DateTime(), nullable=True),
        sa.Column('revision_history_json', sa.Text(), nullable=False),
        sa.Column('last_revision_no', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['problem_id'], ['problem.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'problem_id', name='uq_user_problem_user_problem'),
    )
    with op.batch_alter_table('user_problem', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_problem_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_user_problem_problem_id'), ['problem_id'], unique=False)
        batch_op.create_index('ix_user_problem_user_status', ['user_id', 'status'], unique=False)
        batch_op.create_index(
            'ix_user_problem_user_date_solved', ['user_id', 'date_solved'], unique=False
        )


def downgrade():
    with op.batch_alter_table('user_problem', schema=None) as batch_op:
        batch_op.drop_index('ix_user_problem_user_date_solved')
        batch_op.drop_index('ix_user_problem_user_status')
        batch_op.drop_index(batch_op.f('ix_user_problem_problem_id'))
        batch_op.drop_index(batch_op.f('ix_user_problem_user_id'))
    op.drop_table('user_problem')

    with op.batch_alter_table('problem', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_problem_difficulty'))
        batch_op.drop_index(batch_op.f('ix_problem_title_slug'))
        batch_op.drop_index(batch_op.f('ix_problem_platform'))
    op.drop_table('problem')

    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_user_email'))
        batch_op.drop_index(batch_op.f('ix_user_google_id'))
    op.drop_table('user')
