"""Index todos on completion status and creation time

Revision ID: 0002_index_todos
Revises: 0001_create_todos
Create Date: 2022-10-02
"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002_index_todos"
down_revision: str | None = "0001_create_todos"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_index("ix_todos_completed", "todos", ["completed"])
    op.create_index("ix_todos_created_at", "todos", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_todos_created_at", table_name="todos")
    op.drop_index("ix_todos_completed", table_name="todos")
