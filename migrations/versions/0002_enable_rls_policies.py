"""enable_rls_policies

Revision ID: 0002_enable_rls_policies
Revises: 0001_initial_schema
Create Date: 2026-10-19

Enable PostgreSQL Row-Level Security (RLS) on every application table.
Policies key off the session variable ``app.current_user_id`` set by
``core.database.get_db``:

1. Tenant-owned rows are visible to active members of that tenant
2. Child rows (reactions, read receipts, responses, location
   memberships) follow the visibility of their parent row
3. ``app.is_admin`` bypasses everything (onboarding, scanner callbacks,
   the overdue sweep)
"""
from alembic import op
from sqlalchemy import text


# revision identifiers, used by Alembic.
revision = '0002_enable_rls_policies'
down_revision = '0001_initial_schema'
branch_labels = None
depends_on = None


CURRENT_USER = "current_setting('app.current_user_id', true)"
IS_ADMIN = "coalesce(nullif(current_setting('app.is_admin', true), ''), 'false')::boolean"

# Tables with tenant_id
TENANT_TABLES = [
    'locations',
    'posts',
    'comments',
    'attachments',
    'requests',
]

# Tables scoped through a parent row: (table, column, parent table)
CHILD_TABLES = [
    ('reactions', 'post_id', 'posts'),
    ('read_receipts', 'post_id', 'posts'),
    ('request_responses', 'request_id', 'requests'),
    ('location_memberships', 'location_id', 'locations'),
]

ALL_TABLES = ['tenants', 'users', 'memberships'] + TENANT_TABLES + [t for t, _, _ in CHILD_TABLES]


def _enable(table: str) -> None:
    op.execute(text(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY"))
    # Force RLS even for table owner
    op.execute(text(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY"))
    op.execute(text(f"""
        CREATE POLICY admin_bypass_{table} ON {table}
        FOR ALL
        USING ({IS_ADMIN})
        WITH CHECK ({IS_ADMIN})
    """))


def upgrade() -> None:
    """Enable RLS and create membership-based policies."""
    # SECURITY DEFINER so the memberships policy can call it without
    # recursing into itself.
    op.execute(text(f"""
        CREATE OR REPLACE FUNCTION app_member_tenant_ids()
        RETURNS SETOF varchar
        LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public
        AS $$
            SELECT tenant_id FROM memberships
            WHERE user_id = {CURRENT_USER} AND status = 'active'
        $$
    """))

    for table in ALL_TABLES:
        _enable(table)

    op.execute(text("""
        CREATE POLICY member_read_tenants ON tenants
        FOR SELECT
        USING (id IN (SELECT app_member_tenant_ids()))
    """))

    op.execute(text(f"""
        CREATE POLICY self_users ON users
        FOR ALL
        USING (id = {CURRENT_USER})
        WITH CHECK (id = {CURRENT_USER})
    """))
    op.execute(text("""
        CREATE POLICY colleague_read_users ON users
        FOR SELECT
        USING (id IN (
            SELECT user_id FROM memberships
            WHERE tenant_id IN (SELECT app_member_tenant_ids())
        ))
    """))

    op.execute(text(f"""
        CREATE POLICY member_read_memberships ON memberships
        FOR SELECT
        USING (user_id = {CURRENT_USER} OR tenant_id IN (SELECT app_member_tenant_ids()))
    """))

    for table in TENANT_TABLES:
        op.execute(text(f"""
            CREATE POLICY tenant_isolation_{table} ON {table}
            FOR ALL
            USING (tenant_id IN (SELECT app_member_tenant_ids()))
            WITH CHECK (tenant_id IN (SELECT app_member_tenant_ids()))
        """))

    # Parent tables are themselves RLS-filtered, so the subquery only
    # yields rows the caller can see.
    for table, column, parent in CHILD_TABLES:
        op.execute(text(f"""
            CREATE POLICY parent_visible_{table} ON {table}
            FOR ALL
            USING ({column} IN (SELECT id FROM {parent}))
            WITH CHECK ({column} IN (SELECT id FROM {parent}))
        """))


def downgrade() -> None:
    """Drop policies and disable RLS."""
    op.execute(text("DROP POLICY IF EXISTS member_read_tenants ON tenants"))
    op.execute(text("DROP POLICY IF EXISTS self_users ON users"))
    op.execute(text("DROP POLICY IF EXISTS colleague_read_users ON users"))
    op.execute(text("DROP POLICY IF EXISTS member_read_memberships ON memberships"))
    for table in TENANT_TABLES:
        op.execute(text(f"DROP POLICY IF EXISTS tenant_isolation_{table} ON {table}"))
    for table, _, _ in CHILD_TABLES:
        op.execute(text(f"DROP POLICY IF EXISTS parent_visible_{table} ON {table}"))

    for table in ALL_TABLES:
        op.execute(text(f"DROP POLICY IF EXISTS admin_bypass_{table} ON {table}"))
        op.execute(text(f"ALTER TABLE {table} NO FORCE ROW LEVEL SECURITY"))
        op.execute(text(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY"))

    op.execute(text("DROP FUNCTION IF EXISTS app_member_tenant_ids()"))
