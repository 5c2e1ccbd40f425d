"""init

Revision ID: 3a1f9c2b7d10
Revises:
Create Date: 2026-10-18 10:12:31.502217
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '3a1f9c2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MYSQL_OPTS = dict(
    mysql_engine='InnoDB',
    mysql_charset='utf8mb4',
    mysql_collate='utf8mb4_unicode_ci',
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # === users ===
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='usuario'),
        sa.Column('validated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('code_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('verification_code', sa.String(6), nullable=True),
        *_timestamps(),
        **MYSQL_OPTS
    )
    op.create_index('ix_users_deleted_at', 'users', ['deleted_at'])

    # === years ===
    op.create_table(
        'years',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('year', sa.String(5), nullable=False, unique=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        **MYSQL_OPTS
    )
    op.create_index('ix_years_deleted_at', 'years', ['deleted_at'])

    # === degrees ===
    op.create_table(
        'degrees',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('degree', sa.String(255), nullable=False, unique=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        **MYSQL_OPTS
    )
    op.create_index('ix_degrees_deleted_at', 'degrees', ['deleted_at'])

    # === advisors ===
    op.create_table(
        'advisors',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('advisor', sa.String(255), nullable=False, unique=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        **MYSQL_OPTS
    )
    op.create_index('ix_advisors_deleted_at', 'advisors', ['deleted_at'])

    # === tfgs ===
    op.create_table(
        'tfgs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('year_id', sa.Integer(), sa.ForeignKey('years.id'), nullable=False),
        sa.Column('degree_id', sa.Integer(), sa.ForeignKey('degrees.id'), nullable=False),
        sa.Column('advisor_id', sa.Integer(), sa.ForeignKey('advisors.id'), nullable=False),
        sa.Column('student', sa.String(255), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('abstract', sa.Text(), nullable=False),
        sa.Column('link', sa.String(500), nullable=False, server_default='undefined'),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verified_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('download_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
        **MYSQL_OPTS
    )
    op.create_index('ix_tfgs_year_id', 'tfgs', ['year_id'])
    op.create_index('ix_tfgs_degree_id', 'tfgs', ['degree_id'])
    op.create_index('ix_tfgs_advisor_id', 'tfgs', ['advisor_id'])
    op.create_index('ix_tfgs_verified', 'tfgs', ['verified'])
    op.create_index('ix_tfgs_deleted_at', 'tfgs', ['deleted_at'])

    # === tfg_keywords ===
    op.create_table(
        'tfg_keywords',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tfg_id', sa.Integer(), sa.ForeignKey('tfgs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('keyword', sa.String(100), nullable=False),
        **MYSQL_OPTS
    )
    op.create_index('ix_tfg_keywords_tfg_id', 'tfg_keywords', ['tfg_id'])
    op.create_index('ix_tfg_keywords_keyword', 'tfg_keywords', ['keyword'])


def downgrade() -> None:
    op.drop_table('tfg_keywords')
    op.drop_table('tfgs')
    op.drop_table('advisors')
    op.drop_table('degrees')
    op.drop_table('years')
    op.drop_table('users')
