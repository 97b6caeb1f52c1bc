"""Create SalesAI trainer tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates profiles, sessions, subscriptions, the usage ledger and the audit
log, all prefixed with salesai_, with row-level security enabled.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_salesai_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # =========================================================================
    # 1. PROFILES
    # =========================================================================
    op.create_table(
        'salesai_profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('auth_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('company_id', postgresql.UUID(as_uuid=True)),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('position', sa.String(100)),
        sa.Column('role', sa.String(20), server_default='user', nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_salesai_profiles_auth_id', 'salesai_profiles', ['auth_id'], unique=True)
    op.create_index('ix_salesai_profiles_company_id', 'salesai_profiles', ['company_id'])

    # =========================================================================
    # 2. SESSIONS
    # =========================================================================
    op.create_table(
        'salesai_sessions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('salesai_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', postgresql.UUID(as_uuid=True)),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('processing_status', sa.String(30), server_default='ready', nullable=False),

        # Lifecycle
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('ended_at', sa.DateTime(timezone=True)),
        sa.Column('duration_seconds', sa.Float),
        sa.Column('minute_cost', sa.Float),

        # Recording
        sa.Column('audio_quality', postgresql.JSONB),
        sa.Column('audio_file_url', sa.Text),
        sa.Column('audio_file_size', sa.Integer),

        # Conversation and analysis
        sa.Column('transcript', sa.Text),
        sa.Column('overall_score', sa.Float),
        sa.Column('session_type', sa.String(50)),
        sa.Column('scenario_topic', sa.String(255)),
        sa.Column('feedback_summary', sa.Text),
        sa.Column('conversation_log', sa.Text),
        sa.Column('analytics_summary', postgresql.JSONB),
        *_timestamps(),
    )
    op.create_index('ix_salesai_sessions_profile_id', 'salesai_sessions', ['profile_id'])
    op.create_index('ix_salesai_sessions_company_id', 'salesai_sessions', ['company_id'])
    op.create_index('ix_salesai_sessions_profile_created', 'salesai_sessions', ['profile_id', 'created_at'])

    # =========================================================================
    # 3. SUBSCRIPTIONS
    # =========================================================================
    op.create_table(
        'salesai_subscriptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('salesai_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', postgresql.UUID(as_uuid=True)),

        # Stripe IDs
        sa.Column('stripe_customer_id', sa.String),
        sa.Column('stripe_subscription_id', sa.String, unique=True),

        # Plan details
        sa.Column('plan_id', sa.String(100), server_default='starter', nullable=False),
        sa.Column('plan_name', sa.String(100), server_default='Starter Plan', nullable=False),
        sa.Column('tier', sa.String(20), server_default='starter', nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),

        # Usage tracking
        sa.Column('minutes_limit', sa.Integer, server_default='100', nullable=False),
        sa.Column('minutes_used', sa.Integer, server_default='0', nullable=False),

        # Billing period dates
        sa.Column('current_period_start', sa.DateTime(timezone=True)),
        sa.Column('current_period_end', sa.DateTime(timezone=True)),
        sa.Column('cancel_at_period_end', sa.Boolean, server_default='false', nullable=False),
        sa.Column('canceled_at', sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index('ix_salesai_subscriptions_company_id', 'salesai_subscriptions', ['company_id'])
    op.create_index('ix_salesai_subscriptions_stripe_customer_id', 'salesai_subscriptions', ['stripe_customer_id'])
    op.create_index('ix_salesai_subscriptions_profile_status', 'salesai_subscriptions', ['profile_id', 'status'])
    op.create_check_constraint(
        'ck_salesai_subscriptions_minutes_used_nonnegative',
        'salesai_subscriptions',
        'minutes_used >= 0',
    )

    # =========================================================================
    # 4. USAGE LEDGER
    # =========================================================================
    op.create_table(
        'salesai_usage',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('salesai_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', postgresql.UUID(as_uuid=True)),
        sa.Column('session_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('salesai_sessions.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('minutes_used', sa.Integer, nullable=False),
        sa.Column('period_start', sa.DateTime(timezone=True)),
        sa.Column('period_end', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_salesai_usage_profile_created', 'salesai_usage', ['profile_id', 'created_at'])

    # =========================================================================
    # 5. AUDIT LOG
    # =========================================================================
    op.create_table(
        'salesai_audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('company_id', postgresql.UUID(as_uuid=True)),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('resource', sa.String(50), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('details', postgresql.JSONB, server_default=sa.text("'{}'::jsonb")),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_salesai_audit_logs_user_id', 'salesai_audit_logs', ['user_id'])

    # =========================================================================
    # 6. ROW LEVEL SECURITY
    # =========================================================================
    # The backend connects as the table owner and bypasses RLS; these
    # policies cover direct access with a user's Supabase token.
    for table in (
        'salesai_profiles',
        'salesai_sessions',
        'salesai_subscriptions',
        'salesai_usage',
        'salesai_audit_logs',
    ):
        op.execute(f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY")

    op.execute("""
        CREATE POLICY salesai_profiles_select_policy ON public.salesai_profiles
        FOR SELECT USING (auth_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY salesai_profiles_update_policy ON public.salesai_profiles
        FOR UPDATE USING (auth_id = auth.uid()) WITH CHECK (auth_id = auth.uid())
    """)

    # Profile-owned tables: readable by the owning user
    for table in ('salesai_sessions', 'salesai_subscriptions', 'salesai_usage'):
        op.execute(f"""
            CREATE POLICY {table}_select_policy ON public.{table}
            FOR SELECT USING (
                profile_id IN (
                    SELECT id FROM public.salesai_profiles WHERE auth_id = auth.uid()
                )
            )
        """)

    op.execute("""
        CREATE POLICY salesai_audit_logs_select_policy ON public.salesai_audit_logs
        FOR SELECT USING (user_id = auth.uid())
    """)


def downgrade() -> None:
    op.execute("DROP POLICY IF EXISTS salesai_audit_logs_select_policy ON public.salesai_audit_logs")
    for table in ('salesai_sessions', 'salesai_subscriptions', 'salesai_usage'):
        op.execute(f"DROP POLICY IF EXISTS {table}_select_policy ON public.{table}")
    op.execute("DROP POLICY IF EXISTS salesai_profiles_update_policy ON public.salesai_profiles")
    op.execute("DROP POLICY IF EXISTS salesai_profiles_select_policy ON public.salesai_profiles")

    op.drop_table('salesai_audit_logs')
    op.drop_table('salesai_usage')
    op.drop_table('salesai_subscriptions')
    op.drop_table('salesai_sessions')
    op.drop_table('salesai_profiles')
