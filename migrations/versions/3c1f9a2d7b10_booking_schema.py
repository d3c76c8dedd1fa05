"""booking schema

Revision ID: 3c1f9a2d7b10
Revises: 
Create Date: 2025-06-01 09:12:44.318205

"""
from pathlib import Path
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c1f9a2d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    project_root = Path(__file__).resolve().parents[2]
    sql_dir = project_root / "sql"

    for filename in ("010_schema.sql",):
        op.execute((sql_dir / filename).read_text())


def downgrade() -> None:
    op.drop_table("restaurant_settings", schema="public")
    op.drop_table("table_configurations", schema="public")
    op.drop_table("restaurant_closures", schema="public")
    op.drop_table("reservations", schema="public")
