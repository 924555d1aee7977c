"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

Tenants, memberships, locations, posts with their comments, reactions and
read receipts, attachments, data collection requests and their responses.
User id columns carry no foreign key: accounts live in Supabase Auth and
the users table only mirrors profiles.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _tenant_id():
    return sa.Column(
        'tenant_id', sa.String(36),
        sa.ForeignKey('tenants.id', ondelete='CASCADE'),
        nullable=False, index=True,
    )


def upgrade() -> None:
    op.create_table(
        'tenants',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(256), nullable=False, comment='Human-readable tenant name'),
        sa.Column('slug', sa.String(128), nullable=False, unique=True, comment='URL-safe tenant identifier'),
        sa.Column('plan', sa.String(32), nullable=False, server_default='trial'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active',
                  comment='active, suspended, cancelled'),
        sa.Column('settings', postgresql.JSONB(), nullable=True, comment='Tenant-specific configuration'),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(320), nullable=False, index=True),
        sa.Column('name', sa.String(256), nullable=True),
        sa.Column('avatar_url', sa.String(1024), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'memberships',
        sa.Column('id', sa.String(36), primary_key=True),
        _tenant_id(),
        sa.Column('user_id', sa.String(36), nullable=False, index=True),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active', comment='active, suspended'),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'tenant_id', name='uq_memberships_user_tenant'),
    )
    op.create_index(
        'ix_memberships_tenant_active', 'memberships', ['tenant_id'],
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        'locations',
        sa.Column('id', sa.String(36), primary_key=True),
        _tenant_id(),
        sa.Column('name', sa.String(256), nullable=False),
        sa.Column('address', sa.String(512), nullable=False),
        sa.Column('city', sa.String(128), nullable=False),
        sa.Column('state', sa.String(64), nullable=False),
        sa.Column('zip_code', sa.String(20), nullable=False),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active', comment='active, inactive'),
        sa.Column('settings', postgresql.JSONB(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'location_memberships',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False, index=True),
        sa.Column('location_id', sa.String(36), sa.ForeignKey('locations.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('role', sa.String(32), nullable=False, server_default='staff'),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'location_id', name='uq_location_memberships_user_location'),
    )

    op.create_table(
        'posts',
        sa.Column('id', sa.String(36), primary_key=True),
        _tenant_id(),
        sa.Column('author_user_id', sa.String(36), nullable=False, index=True),
        sa.Column('title', sa.String(500), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('body_rich', postgresql.JSONB(), nullable=True),
        sa.Column('post_type', sa.String(32), nullable=False, server_default='message'),
        sa.Column('targeting', postgresql.JSONB(), nullable=False,
                  server_default=sa.text("'{\"type\": \"global\"}'::jsonb")),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
    )
    op.create_index('ix_posts_tenant_created', 'posts', ['tenant_id', 'created_at'])
    # Feed filter on targeted location ids
    op.create_index(
        'ix_posts_targeting_location_ids', 'posts',
        [sa.text("(targeting -> 'location_ids')")],
        postgresql_using='gin',
    )

    op.create_table(
        'comments',
        sa.Column('id', sa.String(36), primary_key=True),
        _tenant_id(),
        sa.Column('post_id', sa.String(36), sa.ForeignKey('posts.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('parent_comment_id', sa.String(36), sa.ForeignKey('comments.id', ondelete='CASCADE'),
                  nullable=True),
        sa.Column('author_user_id', sa.String(36), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('body_rich', postgresql.JSONB(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'reactions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('post_id', sa.String(36), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('post_id', 'user_id', name='uq_reactions_post_user'),
    )

    op.create_table(
        'read_receipts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('post_id', sa.String(36), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('post_id', 'user_id', name='uq_read_receipts_post_user'),
    )

    op.create_table(
        'attachments',
        sa.Column('id', sa.String(36), primary_key=True),
        _tenant_id(),
        sa.Column('post_id', sa.String(36), sa.ForeignKey('posts.id', ondelete='CASCADE'),
                  nullable=True, index=True),
        sa.Column('comment_id', sa.String(36), sa.ForeignKey('comments.id', ondelete='CASCADE'),
                  nullable=True, index=True),
        sa.Column('uploader_user_id', sa.String(36), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False, unique=True),
        sa.Column('original_filename', sa.String(255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(255), nullable=False),
        sa.Column('storage_path', sa.String(512), nullable=False),
        sa.Column('download_url', sa.String(1024), nullable=False),
        sa.Column('virus_scan_status', sa.String(20), nullable=False, server_default='pending',
                  comment='pending, clean, infected'),
        *_timestamps(),
    )

    op.create_table(
        'requests',
        sa.Column('id', sa.String(36), primary_key=True),
        _tenant_id(),
        sa.Column('post_id', sa.String(36), sa.ForeignKey('posts.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('created_by', sa.String(36), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('fields', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active', comment='active, closed'),
        sa.Column('completion_stats', postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "(completion_stats->>'submitted')::int + (completion_stats->>'pending')::int"
            " + (completion_stats->>'overdue')::int <= (completion_stats->>'total_locations')::int",
            name='ck_requests_completion_stats',
        ),
    )

    op.create_table(
        'request_responses',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('request_id', sa.String(36), sa.ForeignKey('requests.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('location_id', sa.String(36), sa.ForeignKey('locations.id', ondelete='CASCADE'),
                  nullable=False),
        sa.Column('submitted_by', sa.String(36), nullable=False),
        sa.Column('values', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('request_id', 'location_id', name='uq_request_responses_request_location'),
    )


def downgrade() -> None:
    for table in (
        'request_responses',
        'requests',
        'attachments',
        'read_receipts',
        'reactions',
        'comments',
        'posts',
        'location_memberships',
        'locations',
        'memberships',
        'users',
        'tenants',
    ):
        op.drop_table(table)
