"""initial qr codes, scans and billing tables

Revision ID: initial_qrforge_001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial_qrforge_001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    # QR codes
    op.create_table(
        'qr_codes',
        *_timestamps(),

        # Identification
        sa.Column('short_id', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),

        # Payload
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('target_url', sa.Text(), nullable=True),
        sa.Column('is_encrypted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),

        # Presentation
        sa.Column('foreground_color', sa.String(length=20), nullable=False, server_default='#000000'),
        sa.Column('background_color', sa.String(length=20), nullable=False, server_default='#ffffff'),
        sa.Column('dots_style', sa.String(length=30), nullable=False, server_default='square'),
        sa.Column('corner_style', sa.String(length=30), nullable=False, server_default='square'),
        sa.Column('size', sa.Integer(), nullable=False, server_default='256'),
        sa.Column('logo', sa.Text(), nullable=True),
        sa.Column('error_correction', sa.String(length=1), nullable=False, server_default='M'),

        sa.Column('scan_count', sa.Integer(), nullable=False, server_default='0'),

        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_qr_codes_id', 'qr_codes', ['id'])
    op.create_index('ix_qr_codes_short_id', 'qr_codes', ['short_id'], unique=True)

    # Owner links
    op.create_table(
        'user_qr_codes',
        *_timestamps(),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('qr_code_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['qr_code_id'], ['qr_codes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'qr_code_id', name='uq_user_qr_code')
    )
    op.create_index('ix_user_qr_codes_id', 'user_qr_codes', ['id'])
    op.create_index('ix_user_qr_codes_user_id', 'user_qr_codes', ['user_id'])
    op.create_index('ix_user_qr_codes_qr_code_id', 'user_qr_codes', ['qr_code_id'])

    # Scans
    op.create_table(
        'qr_scans',
        *_timestamps(),
        sa.Column('qr_code_id', sa.Integer(), nullable=False),
        sa.Column('scanned_at', sa.DateTime(), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('device', sa.String(length=20), nullable=True),
        sa.Column('browser', sa.String(length=20), nullable=True),
        sa.Column('os', sa.String(length=20), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['qr_code_id'], ['qr_codes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_qr_scans_id', 'qr_scans', ['id'])
    op.create_index('ix_qr_scans_qr_code_id', 'qr_scans', ['qr_code_id'])
    op.create_index('ix_qr_scans_scanned_at', 'qr_scans', ['scanned_at'])

    # Billing
    op.create_table(
        'dynamic_access',
        *_timestamps(),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('subscription_id', sa.String(length=255), nullable=True),
        sa.Column('current_period_end', sa.DateTime(), nullable=True),
        sa.Column('cancel_at_period_end', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('provider', sa.String(length=50), nullable=False, server_default='polar'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_dynamic_access_id', 'dynamic_access', ['id'])
    op.create_index('ix_dynamic_access_user_id', 'dynamic_access', ['user_id'], unique=True)

    op.create_table(
        'transactions',
        *_timestamps(),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('invoice_id', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='paid'),
        sa.Column('payment_date', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_transactions_id', 'transactions', ['id'])
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('ix_transactions_invoice_id', 'transactions', ['invoice_id'], unique=True)

    # Profiles
    op.create_table(
        'user_profiles',
        *_timestamps(),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('number_of_qr', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_profiles_id', 'user_profiles', ['id'])
    op.create_index('ix_user_profiles_user_id', 'user_profiles', ['user_id'], unique=True)


def downgrade():
    op.drop_index('ix_user_profiles_user_id', table_name='user_profiles')
    op.drop_index('ix_user_profiles_id', table_name='user_profiles')
    op.drop_table('user_profiles')

    op.drop_index('ix_transactions_invoice_id', table_name='transactions')
    op.drop_index('ix_transactions_user_id', table_name='transactions')
    op.drop_index('ix_transactions_id', table_name='transactions')
    op.drop_table('transactions')

    op.drop_index('ix_dynamic_access_user_id', table_name='dynamic_access')
    op.drop_index('ix_dynamic_access_id', table_name='dynamic_access')
    op.drop_table('dynamic_access')

    op.drop_index('ix_qr_scans_scanned_at', table_name='qr_scans')
    op.drop_index('ix_qr_scans_qr_code_id', table_name='qr_scans')
    op.drop_index('ix_qr_scans_id', table_name='qr_scans')
    op.drop_table('qr_scans')

    op.drop_index('ix_user_qr_codes_qr_code_id', table_name='user_qr_codes')
    op.drop_index('ix_user_qr_codes_user_id', table_name='user_qr_codes')
    op.drop_index('ix_user_qr_codes_id', table_name='user_qr_codes')
    op.drop_table('user_qr_codes')

    op.drop_index('ix_qr_codes_short_id', table_name='qr_codes')
    op.drop_index('ix_qr_codes_id', table_name='qr_codes')
    op.drop_table('qr_codes')
