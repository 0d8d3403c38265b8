"""initial_admin_schema

Revision ID: 4b1d2c3e5f60
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '4b1d2c3e5f60'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_LIST = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _common_columns() -> list:
    return [
        sa.Column('id', sa.String(length=32), nullable=False, comment='Opaque record identifier'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was last updated (UTC)'),
    ]


def upgrade() -> None:
    """
    Create the admin panel schema.

    Tables:
    1. categories - highlight taxonomy
    2. highlights - news/event items (seq, status, sdg, images, category)
    3. press_releases - press coverage with a single image
    4. subscribers - newsletter sign-ups
    5. users - Google accounts with is_allowed / is_admin flags
    6. sequence_counters - one row per resource backing ``seq``
    """

    # ================================
    # categories
    # ================================
    op.create_table(
        'categories',
        *_common_columns(),
        sa.Column('name', sa.String(length=100), nullable=False, comment='Display name, unique'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_categories')),
        sa.UniqueConstraint('name', name=op.f('uq_categories_name')),
    )

    # ================================
    # highlights
    # ================================
    op.create_table(
        'highlights',
        *_common_columns(),
        sa.Column('seq', sa.Integer(), nullable=False, comment='Sequence number shown in the admin table'),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, comment='Rich text body (HTML)'),
        sa.Column(
            'status',
            sa.Enum('draft', 'published', 'rejected', name='highlight_status', native_enum=False),
            nullable=False,
        ),
        sa.Column('date', sa.Date(), nullable=True, comment='Date of the event the highlight covers'),
        sa.Column('location', sa.String(length=500), nullable=True),
        sa.Column('sdg', JSON_LIST, nullable=False, comment='SDG tags'),
        sa.Column('images', JSON_LIST, nullable=False, comment='CDN image URLs'),
        sa.Column('category_id', sa.String(length=32), nullable=True),
        sa.Column('author_email', sa.String(length=255), nullable=True, comment='Email of the admin user who created the record'),
        sa.ForeignKeyConstraint(
            ['category_id'], ['categories.id'],
            name=op.f('fk_highlights_category_id_categories'),
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_highlights')),
        sa.UniqueConstraint('seq', name=op.f('uq_highlights_seq')),
    )
    op.create_index(op.f('ix_highlights_status'), 'highlights', ['status'])
    op.create_index(op.f('ix_highlights_category_id'), 'highlights', ['category_id'])

    # ================================
    # press_releases
    # ================================
    op.create_table(
        'press_releases',
        *_common_columns(),
        sa.Column('seq', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('publisher', sa.String(length=100), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('link', sa.String(length=2000), nullable=False),
        sa.Column('image', sa.String(length=2000), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_press_releases')),
        sa.UniqueConstraint('seq', name=op.f('uq_press_releases_seq')),
    )

    # ================================
    # subscribers
    # ================================
    op.create_table(
        'subscribers',
        *_common_columns(),
        sa.Column('seq', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_subscribers')),
        sa.UniqueConstraint('seq', name=op.f('uq_subscribers_seq')),
        sa.UniqueConstraint('email', name=op.f('uq_subscribers_email')),
    )

    # ================================
    # users
    # ================================
    op.create_table(
        'users',
        *_common_columns(),
        sa.Column('email', sa.String(length=255), nullable=False, comment="User's email address (from Google)"),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('avatar', sa.String(length=2000), nullable=True, comment='Profile picture URL'),
        sa.Column('google_sub', sa.String(length=255), nullable=True, comment="Google account id (the token's sub claim)"),
        sa.Column('is_allowed', sa.Boolean(), nullable=False, comment='Whether the user may use the admin panel'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, comment='Whether the user may manage other users'),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('google_sub', name=op.f('uq_users_google_sub')),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # ================================
    # sequence_counters
    # ================================
    op.create_table(
        'sequence_counters',
        sa.Column('resource', sa.String(length=50), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('resource', name=op.f('pk_sequence_counters')),
    )


def downgrade() -> None:
    op.drop_table('sequence_counters')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
    op.drop_table('subscribers')
    op.drop_table('press_releases')
    op.drop_index(op.f('ix_highlights_category_id'), table_name='highlights')
    op.drop_index(op.f('ix_highlights_status'), table_name='highlights')
    op.drop_table('highlights')
    op.drop_table('categories')
