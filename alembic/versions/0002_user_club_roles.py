"""per-club user roles

Revision ID: 0002_user_club_roles
Revises: 0001_initial
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0002_user_club_roles"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "user_club_roles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("club_id", sa.String(length=36), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "club_id", name="uq_user_club_role"),
    )
    op.create_index("ix_user_club_roles_user_id", "user_club_roles", ["user_id"])
    op.create_index("ix_user_club_roles_club_id", "user_club_roles", ["club_id"])

    # Former global club admins keep admin rights only at the clubs that exist today
    op.execute(
        "INSERT INTO user_club_roles (id, user_id, club_id, role, created_at, updated_at) "
        "SELECT md5(u.id || c.id), u.id, c.id, 'club_admin', u.created_at, u.created_at "
        "FROM users u CROSS JOIN clubs c WHERE u.role = 'club_admin'"
    )
    op.execute("UPDATE users SET role = 'member' WHERE role = 'club_admin'")

def downgrade() -> None:
    op.drop_index("ix_user_club_roles_club_id", table_name="user_club_roles")
    op.drop_index("ix_user_club_roles_user_id", table_name="user_club_roles")
    op.drop_table("user_club_roles")
