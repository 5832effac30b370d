"""002: create ledger_entries table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              UUID            PRIMARY KEY,
            event_id        UUID            NOT NULL REFERENCES rewards (id),
            user_id         VARCHAR(64)     NOT NULL,
            account         VARCHAR(30)     NOT NULL,
            symbol          VARCHAR(32)     NOT NULL,
            units           NUMERIC(18,6)   NOT NULL DEFAULT 0,
            amount_inr      NUMERIC(18,4)   NOT NULL,
            entry_type      VARCHAR(10)     NOT NULL,
            line_no         SMALLINT        NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_account CHECK (
                account IN ('stock_inventory', 'fees_expense', 'cash')
            ),
            CONSTRAINT ck_ledger_entry_type CHECK (entry_type IN ('debit', 'credit')),
            CONSTRAINT ck_ledger_amount_gte_0 CHECK (amount_inr >= 0),
            CONSTRAINT uq_ledger_event_line UNIQUE (event_id, line_no)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_user_time ON ledger_entries (user_id, created_at);")
    op.execute("COMMENT ON TABLE ledger_entries IS 'Reward postings — Append-Only, 3 lines per reward, amounts in INR';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
