"""Initial migration: card, item, review_session, review_session_item, review

Revision ID: 001_initial_migration
Revises:
Create Date: 2024-06-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_migration'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'card',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('front', sa.String(), nullable=False),
        sa.Column('back', sa.String(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='card_pkey')
    )

    op.create_table(
        'item',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('card_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('current_srs_stage', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('next_available', sa.DateTime(), nullable=False),
        sa.Column('times_reviewed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('times_correct', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('times_incorrect', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['card_id'], ['card.id'], name='item_card_id_fkey'),
        sa.PrimaryKeyConstraint('id', name='item_pkey'),
        sa.UniqueConstraint('user_id', 'card_id', name='item_user_id_card_id_key'),
        sa.CheckConstraint('current_srs_stage >= 0', name='item_current_srs_stage_check'),
        sa.CheckConstraint('max_streak >= current_streak', name='item_max_streak_check')
    )
    op.create_index(op.f('ix_item_user_id'), 'item', ['user_id'], unique=False)
    op.create_index(op.f('ix_item_next_available'), 'item', ['next_available'], unique=False)

    op.create_table(
        'review_session',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('STARTED', 'COMPLETE', 'CANCELLED', name='reviewsessionstatus'),
            nullable=False
        ),
        sa.PrimaryKeyConstraint('id', name='review_session_pkey')
    )

    op.create_table(
        'review_session_item',
        sa.Column('review_session_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['review_session_id'], ['review_session.id'], name='review_session_item_review_session_id_fkey'),
        sa.ForeignKeyConstraint(['item_id'], ['item.id'], name='review_session_item_item_id_fkey'),
        sa.PrimaryKeyConstraint('review_session_id', 'item_id', name='review_session_item_pkey')
    )

    op.create_table(
        'review',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('starting_srs_stage', sa.Integer(), nullable=False),
        sa.Column('ending_srs_stage', sa.Integer(), nullable=False),
        sa.Column('seconds_elapsed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('times_incorrect', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('card_id', sa.Integer(), nullable=False),
        sa.Column('review_session_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['item_id'], ['item.id'], name='review_item_id_fkey'),
        sa.ForeignKeyConstraint(['card_id'], ['card.id'], name='review_card_id_fkey'),
        sa.ForeignKeyConstraint(['review_session_id'], ['review_session.id'], name='review_review_session_id_fkey'),
        sa.PrimaryKeyConstraint('id', name='review_pkey')
    )
    op.create_index(op.f('ix_review_item_id'), 'review', ['item_id'], unique=False)
    op.create_index(op.f('ix_review_review_session_id'), 'review', ['review_session_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_review_review_session_id'), table_name='review')
    op.drop_index(op.f('ix_review_item_id'), table_name='review')
    op.drop_table('review')
    op.drop_table('review_session_item')
    op.drop_table('review_session')
    op.drop_index(op.f('ix_item_next_available'), table_name='item')
    op.drop_index(op.f('ix_item_user_id'), table_name='item')
    op.drop_table('item')
    op.drop_table('card')
    sa.Enum(name='reviewsessionstatus').drop(op.get_bind(), checkfirst=True)
