"""Create profiles, voice_examples and polish_history tables

Revision ID: initial_schema
Revises:
Create Date: 2026-10-18

profiles carries the extracted voice pattern document per user.
voice_examples holds finalized scripts learned from corrections.
polish_history records every rewrite and, later, the user's final version.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('voice_patterns', postgresql.JSONB, nullable=True),
        sa.Column('patterns_extracted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('NOW()'),
        ),
    )

    op.create_table(
        'voice_examples',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('script_text', sa.Text, nullable=False),
        sa.Column('topic_category', sa.String(50), nullable=False, server_default='Other'),
        sa.Column('quality_score', sa.Integer, nullable=False, server_default='0'),
        sa.Column('word_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('NOW()'),
        ),
        sa.CheckConstraint(
            'quality_score >= 0 AND quality_score <= 100',
            name='ck_voice_examples_quality_score_range',
        ),
    )
    op.create_index('ix_voice_examples_user_id', 'voice_examples', ['user_id'])
    op.create_index('ix_voice_examples_user_topic', 'voice_examples', ['user_id', 'topic_category'])

    op.create_table(
        'polish_history',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('raw_script', sa.Text, nullable=False),
        sa.Column('ai_polished_script', sa.Text, nullable=False),
        sa.Column('user_final_script', sa.Text, nullable=True),
        sa.Column(
            'voice_example_id',
            sa.String(36),
            sa.ForeignKey('voice_examples.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('NOW()'),
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('NOW()'),
        ),
    )
    op.create_index('ix_polish_history_user_id', 'polish_history', ['user_id'])


def downgrade():
    op.drop_index('ix_polish_history_user_id', table_name='polish_history')
    op.drop_table('polish_history')
    op.drop_index('ix_voice_examples_user_topic', table_name='voice_examples')
    op.drop_index('ix_voice_examples_user_id', table_name='voice_examples')
    op.drop_table('voice_examples')
    op.drop_table('profiles')
