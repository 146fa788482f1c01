"""create_users_and_news_tables

Revision ID: 4c1f0a9e27b3
Revises:
Create Date: 2026-10-19 10:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1f0a9e27b3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and news tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=191), nullable=False),
        sa.Column('email', sa.String(length=191), nullable=False),
        sa.Column('image', sa.String(length=255), nullable=True),
        sa.Column('api_token', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_api_token'), 'users', ['api_token'], unique=True)

    op.create_table(
        'news',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=191), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('image', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_news_user_id'), 'news', ['user_id'], unique=False)


def downgrade() -> None:
    """Drop news and users tables."""
    op.drop_index(op.f('ix_news_user_id'), table_name='news')
    op.drop_table('news')
    op.drop_index(op.f('ix_users_api_token'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
