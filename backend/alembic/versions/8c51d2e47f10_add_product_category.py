"""Add products.product_category (Men/Women/Kids)

Revision ID: 8c51d2e47f10
Revises: 3b7e0c1d9a42
Create Date: 2026-09-21 16:05:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8c51d2e47f10"
down_revision: Union[str, Sequence[str], None] = "3b7e0c1d9a42"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # batch mode so SQLite can take the new CHECK constraint
    with op.batch_alter_table("products") as batch_op:
        batch_op.add_column(sa.Column("product_category", sa.String(length=20), nullable=True))
        batch_op.create_check_constraint(
            "ck_products_product_category",
            "product_category IS NULL OR product_category IN ('Men', 'Women', 'Kids')",
        )
    op.create_index(op.f("ix_products_product_category"), "products", ["product_category"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_products_product_category"), table_name="products")
    with op.batch_alter_table("products") as batch_op:
        batch_op.drop_constraint("ck_products_product_category", type_="check")
        batch_op.drop_column("product_category")
