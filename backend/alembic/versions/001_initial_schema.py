"""Initial Resourcio schema

Revision ID: 001
Revises:
Create Date: 2025-08-18

Creates resources, projects, resource_allocations, time_entries,
weekly_submissions, users, user_roles and audit_log.
"""

from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ── Resources & projects ──
    op.execute("""
        CREATE TABLE IF NOT EXISTS resources (
          id SERIAL PRIMARY KEY,
          name TEXT NOT NULL,
          email VARCHAR(255) NOT NULL UNIQUE,
          role VARCHAR(200) NOT NULL DEFAULT '',
          department VARCHAR(200) NOT NULL DEFAULT 'IT Architecture & Delivery',
          skills JSONB DEFAULT '[]'::jsonb,
          weekly_capacity NUMERIC(5,2) NOT NULL DEFAULT 40.00
            CHECK (weekly_capacity >= 1 AND weekly_capacity <= 60),
          is_active BOOLEAN NOT NULL DEFAULT TRUE,
          is_deleted BOOLEAN NOT NULL DEFAULT FALSE,
          deleted_at TIMESTAMPTZ,
          created_at TIMESTAMPTZ DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_resources_email ON resources(email);")

    op.execute("""
        CREATE TABLE IF NOT EXISTS projects (
          id SERIAL PRIMARY KEY,
          name TEXT NOT NULL,
          description TEXT,
          start_date DATE NOT NULL,
          end_date DATE NOT NULL,
          status VARCHAR(20) NOT NULL DEFAULT 'active',
          priority VARCHAR(20) NOT NULL DEFAULT 'medium',
          type VARCHAR(20) NOT NULL DEFAULT 'business',
          director_id INTEGER REFERENCES resources(id) ON DELETE SET NULL,
          change_lead_id INTEGER REFERENCES resources(id) ON DELETE SET NULL,
          business_lead_id INTEGER REFERENCES resources(id) ON DELETE SET NULL,
          estimated_hours NUMERIC(8,2) DEFAULT 0.00,
          created_at TIMESTAMPTZ DEFAULT now(),
          CHECK (start_date <= end_date)
        );
    """)

    # ── Allocations ──
    op.execute("""
        CREATE TABLE IF NOT EXISTS resource_allocations (
          id SERIAL PRIMARY KEY,
          project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
          resource_id INTEGER NOT NULL REFERENCES resources(id),
          allocated_hours NUMERIC(5,2) NOT NULL CHECK (allocated_hours >= 0),
          start_date DATE NOT NULL,
          end_date DATE NOT NULL,
          role VARCHAR(200),
          status VARCHAR(20) NOT NULL DEFAULT 'active',
          weekly_allocations JSONB DEFAULT '{}'::jsonb,
          created_at TIMESTAMPTZ DEFAULT now(),
          CHECK (start_date <= end_date)
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_resource_allocations_project_id ON resource_allocations(project_id);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_resource_allocations_resource_id ON resource_allocations(resource_id);")

    # ── Time logging ──
    op.execute("""
        CREATE TABLE IF NOT EXISTS time_entries (
          id SERIAL PRIMARY KEY,
          resource_id INTEGER NOT NULL REFERENCES resources(id),
          allocation_id INTEGER NOT NULL REFERENCES resource_allocations(id) ON DELETE CASCADE,
          week_start_date DATE NOT NULL,
          monday_hours NUMERIC(4,2) NOT NULL DEFAULT 0.00 CHECK (monday_hours BETWEEN 0 AND 24),
          tuesday_hours NUMERIC(4,2) NOT NULL DEFAULT 0.00 CHECK (tuesday_hours BETWEEN 0 AND 24),
          wednesday_hours NUMERIC(4,2) NOT NULL DEFAULT 0.00 CHECK (wednesday_hours BETWEEN 0 AND 24),
          thursday_hours NUMERIC(4,2) NOT NULL DEFAULT 0.00 CHECK (thursday_hours BETWEEN 0 AND 24),
          friday_hours NUMERIC(4,2) NOT NULL DEFAULT 0.00 CHECK (friday_hours BETWEEN 0 AND 24),
          saturday_hours NUMERIC(4,2) NOT NULL DEFAULT 0.00 CHECK (saturday_hours BETWEEN 0 AND 24),
          sunday_hours NUMERIC(4,2) NOT NULL DEFAULT 0.00 CHECK (sunday_hours BETWEEN 0 AND 24),
          notes TEXT,
          created_at TIMESTAMPTZ DEFAULT now(),
          updated_at TIMESTAMPTZ DEFAULT now(),
          CONSTRAINT uq_time_entry_week UNIQUE (resource_id, allocation_id, week_start_date)
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_time_entries_resource_id ON time_entries(resource_id);")

    op.execute("""
        CREATE TABLE IF NOT EXISTS weekly_submissions (
          id SERIAL PRIMARY KEY,
          resource_id INTEGER NOT NULL REFERENCES resources(id),
          week_start_date DATE NOT NULL,
          status VARCHAR(20) NOT NULL DEFAULT 'draft',
          submitted_at TIMESTAMPTZ,
          total_hours NUMERIC(5,2) NOT NULL DEFAULT 0.00,
          created_at TIMESTAMPTZ DEFAULT now(),
          updated_at TIMESTAMPTZ DEFAULT now(),
          CONSTRAINT uq_weekly_submission UNIQUE (resource_id, week_start_date)
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_weekly_submissions_resource_id ON weekly_submissions(resource_id);")

    # ── Users & roles ──
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
          id SERIAL PRIMARY KEY,
          email VARCHAR(255) NOT NULL UNIQUE,
          password_hash VARCHAR(255) NOT NULL,
          resource_id INTEGER UNIQUE REFERENCES resources(id) ON DELETE SET NULL,
          is_active BOOLEAN NOT NULL DEFAULT TRUE,
          last_login TIMESTAMPTZ,
          created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
          updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_users_email ON users(email);")

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_roles (
          id SERIAL PRIMARY KEY,
          user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
          role VARCHAR(50) NOT NULL,
          assigned_by INTEGER REFERENCES users(id) ON DELETE SET NULL,
          assigned_at TIMESTAMPTZ DEFAULT now(),
          CONSTRAINT uq_user_role UNIQUE (user_id, role)
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_user_roles_user_id ON user_roles(user_id);")

    # ── Audit ──
    op.execute("""
        CREATE TABLE IF NOT EXISTS audit_log (
          id SERIAL PRIMARY KEY,
          user_id INTEGER,
          action VARCHAR(100) NOT NULL,
          resource_type VARCHAR(100) NOT NULL,
          resource_id VARCHAR(255),
          details JSONB,
          ip_address VARCHAR(45),
          created_at TIMESTAMPTZ DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_log_user_id ON audit_log(user_id);")


def downgrade():
    for table in (
        "audit_log", "user_roles", "users", "weekly_submissions",
        "time_entries", "resource_allocations", "projects", "resources",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table};")
