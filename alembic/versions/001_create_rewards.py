"""001: create rewards table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE rewards (
            id              UUID            PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            symbol          VARCHAR(32)     NOT NULL,
            quantity        NUMERIC(18,6)   NOT NULL,
            rewarded_at     TIMESTAMPTZ     NOT NULL,
            idempotency_key VARCHAR(128),
            fees_brokerage  NUMERIC(18,4)   NOT NULL DEFAULT 0,
            fees_stt        NUMERIC(18,4)   NOT NULL DEFAULT 0,
            fees_gst        NUMERIC(18,4)   NOT NULL DEFAULT 0,
            fees_other      NUMERIC(18,4)   NOT NULL DEFAULT 0,
            unit_price_inr  NUMERIC(18,4)   NOT NULL,
            total_inr_cost  NUMERIC(18,4)   NOT NULL,
            priced_at       TIMESTAMPTZ     NOT NULL,
            is_adjustment   BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_rewards_quantity_nonzero CHECK (quantity <> 0),
            CONSTRAINT ck_rewards_negative_is_adjustment CHECK (quantity > 0 OR is_adjustment),
            CONSTRAINT ck_rewards_fees_gte_0 CHECK (
                fees_brokerage >= 0 AND fees_stt >= 0 AND fees_gst >= 0 AND fees_other >= 0
            )
        );
    """)
    op.execute("CREATE INDEX idx_rewards_user_time ON rewards (user_id, rewarded_at);")
    op.execute("""
        CREATE UNIQUE INDEX uq_rewards_user_idempotency
        ON rewards (user_id, idempotency_key)
        WHERE idempotency_key IS NOT NULL;
    """)
    op.execute("COMMENT ON TABLE rewards IS 'Reward events — append-only, never updated or deleted, amounts in INR';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS rewards CASCADE;")
