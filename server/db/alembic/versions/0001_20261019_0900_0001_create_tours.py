"""Create tours and tour start dates

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table('tours',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=40), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('max_group_size', sa.Integer(), nullable=False),
        sa.Column('difficulty', sa.String(length=20), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('price_discount', sa.Float(), nullable=True),
        sa.Column('ratings_average', sa.Float(), nullable=False),
        sa.Column('ratings_quantity', sa.Integer(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_cover', sa.String(length=255), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('secret_tour', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tours_name'), 'tours', ['name'], unique=True)
    op.create_index(op.f('ix_tours_slug'), 'tours', ['slug'], unique=False)
    op.create_index(op.f('ix_tours_secret_tour'), 'tours', ['secret_tour'], unique=False)

    op.create_table('tour_start_dates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tour_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tour_start_dates_tour_id'), 'tour_start_dates', ['tour_id'], unique=False)
    op.create_index(op.f('ix_tour_start_dates_starts_at'), 'tour_start_dates', ['starts_at'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(op.f('ix_tour_start_dates_starts_at'), table_name='tour_start_dates')
    op.drop_index(op.f('ix_tour_start_dates_tour_id'), table_name='tour_start_dates')
    op.drop_table('tour_start_dates')
    op.drop_index(op.f('ix_tours_secret_tour'), table_name='tours')
    op.drop_index(op.f('ix_tours_slug'), table_name='tours')
    op.drop_index(op.f('ix_tours_name'), table_name='tours')
    op.drop_table('tours')
