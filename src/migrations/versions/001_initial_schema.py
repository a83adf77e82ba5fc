"""Initial schema: communities, scopes, measures, allocation and billing tables.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-11-12 13:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _membership_window() -> list[sa.Column]:
    return [
        sa.Column("start_seq", sa.Integer(), nullable=False),
        sa.Column("end_seq", sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "communities",
        *_timestamps(),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("default_currency", sa.String(length=8), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_communities_code", "communities", ["code"], unique=True)

    op.create_table(
        "units",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("community_id", "code", name="uq_unit_community_code"),
    )
    op.create_index("ix_units_community_id", "units", ["community_id"])

    op.create_table(
        "periods",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum("OPEN", "CLOSED", name="periodstatus"), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("community_id", "code", name="uq_period_community_code"),
        sa.UniqueConstraint("community_id", "seq", name="uq_period_community_seq"),
    )
    op.create_index("ix_periods_community_id", "periods", ["community_id"])

    op.create_table(
        "unit_groups",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_unit_groups_community_id", "unit_groups", ["community_id"])

    op.create_table(
        "unit_group_members",
        *_timestamps(),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        *_membership_window(),
        sa.ForeignKeyConstraint(["group_id"], ["unit_groups.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_unit_group_member_group", "unit_group_members", ["group_id", "start_seq"])

    op.create_table(
        "billing_entities",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("community_id", "code", name="uq_billing_entity_community_code"),
    )
    op.create_index("ix_billing_entities_community_id", "billing_entities", ["community_id"])

    op.create_table(
        "billing_entity_members",
        *_timestamps(),
        sa.Column("billing_entity_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        *_membership_window(),
        sa.ForeignKeyConstraint(["billing_entity_id"], ["billing_entities.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_be_member_entity", "billing_entity_members", ["billing_entity_id", "start_seq"])
    op.create_index("idx_be_member_unit", "billing_entity_members", ["unit_id"])

    op.create_table(
        "expense_target_sets",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_expense_target_sets_community_id", "expense_target_sets", ["community_id"])

    op.create_table(
        "expense_target_members",
        *_timestamps(),
        sa.Column("set_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["set_id"], ["expense_target_sets.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("set_id", "unit_id", name="uq_target_member_set_unit"),
    )
    op.create_index("ix_expense_target_members_set_id", "expense_target_members", ["set_id"])

    op.create_table(
        "period_measures",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("scope_type", sa.String(length=16), nullable=False),
        sa.Column("scope_id", sa.Integer(), nullable=False),
        sa.Column("type_code", sa.String(length=64), nullable=False),
        sa.Column("value", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "period_id", "scope_type", "scope_id", "type_code", name="uq_period_measure_scope_type"
        ),
    )
    op.create_index(
        "idx_period_measure_lookup", "period_measures", ["period_id", "type_code", "scope_type"]
    )

    op.create_table(
        "allocation_rules",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("method", sa.String(length=32), nullable=False),
        sa.Column("params", sa.JSON(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("community_id", "code", name="uq_rule_community_code"),
    )
    op.create_index("ix_allocation_rules_community_id", "allocation_rules", ["community_id"])

    op.create_table(
        "expense_types",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("rule_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.ForeignKeyConstraint(["rule_id"], ["allocation_rules.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("community_id", "code", name="uq_expense_type_community_code"),
    )
    op.create_index("ix_expense_types_community_id", "expense_types", ["community_id"])

    op.create_table(
        "weight_vectors",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("rule_id", sa.Integer(), nullable=False),
        sa.Column("scope_type", sa.String(length=32), nullable=False),
        sa.Column("scope_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"]),
        sa.ForeignKeyConstraint(["rule_id"], ["allocation_rules.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "community_id", "period_id", "rule_id", "scope_type", "scope_id", name="uq_weight_vector_key"
        ),
    )

    op.create_table(
        "weight_items",
        *_timestamps(),
        sa.Column("vector_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("raw_value", sa.Float(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(["vector_id"], ["weight_vectors.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("vector_id", "unit_id", name="uq_weight_item_vector_unit"),
    )
    op.create_index("ix_weight_items_vector_id", "weight_items", ["vector_id"])

    op.create_table(
        "expenses",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("allocatable_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False),
        sa.Column("target_type", sa.String(length=32), nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column("expense_type_id", sa.Integer(), nullable=True),
        sa.Column("weight_vector_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"]),
        sa.ForeignKeyConstraint(["expense_type_id"], ["expense_types.id"]),
        sa.ForeignKeyConstraint(["weight_vector_id"], ["weight_vectors.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_expense_community_period", "expenses", ["community_id", "period_id"])

    op.create_table(
        "allocation_lines",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("expense_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"]),
        sa.ForeignKeyConstraint(["expense_id"], ["expenses.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("expense_id", "unit_id", name="uq_allocation_line_expense_unit"),
    )
    op.create_index(
        "idx_allocation_line_period_community", "allocation_lines", ["period_id", "community_id"]
    )

    op.create_table(
        "bills",
        *_timestamps(),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("billing_entity_id", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"]),
        sa.ForeignKeyConstraint(["billing_entity_id"], ["billing_entities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "community_id", "period_id", "billing_entity_id", name="uq_bill_community_period_entity"
        ),
    )
    op.create_index("ix_bills_period_id", "bills", ["period_id"])
    op.create_index("ix_bills_billing_entity_id", "bills", ["billing_entity_id"])
    op.create_index("idx_bill_period_entity", "bills", ["period_id", "billing_entity_id"])

    op.create_table(
        "bill_lines",
        *_timestamps(),
        sa.Column("bill_id", sa.Integer(), nullable=False),
        sa.Column("expense_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=True),
        sa.ForeignKeyConstraint(["bill_id"], ["bills.id"]),
        sa.ForeignKeyConstraint(["expense_id"], ["expenses.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bill_lines_bill_id", "bill_lines", ["bill_id"])


def downgrade() -> None:
    for table in (
        "bill_lines",
        "bills",
        "allocation_lines",
        "expenses",
        "weight_items",
        "weight_vectors",
        "expense_types",
        "allocation_rules",
        "period_measures",
        "expense_target_members",
        "expense_target_sets",
        "billing_entity_members",
        "billing_entities",
        "unit_group_members",
        "unit_groups",
        "periods",
        "units",
        "communities",
    ):
        op.drop_table(table)
    sa.Enum(name="periodstatus").drop(op.get_bind(), checkfirst=True)
