"""Create core tables

Organizations, users, memberships, invitations, tasks and notifications.

The partial unique index on organization_invitations allows only one
pending invitation per (organization, email); settled invitations for the
same address may accumulate.

Revision ID: 4c1e2a9d7b3f
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# Alembic identifiers
revision = '4c1e2a9d7b3f'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade():
    # --- organizations ----------------------------------------------------
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(255), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_organizations_owner_id', 'organizations', ['owner_id'])

    # --- users (local profile; credentials live with the identity provider)
    op.create_table(
        'users',
        sa.Column('id', sa.String(255), primary_key=True),
        sa.Column('email', sa.String(320), unique=True, nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        *_timestamps(),
    )

    # --- organization_members ---------------------------------------------
    op.create_table(
        'organization_members',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', sa.String(255), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, server_default='member'),
        sa.Column('joined_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('joined_via', sa.String(50), nullable=False, server_default='direct'),
        sa.Column('invited_by', sa.String(255), nullable=True),
        sa.Column('invitation_id', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_organization_members_organization_id', 'organization_members', ['organization_id'])
    op.create_index('ix_organization_members_user_id', 'organization_members', ['user_id'])
    # One user can only be a member once per org
    op.create_index('ix_org_members_org_user', 'organization_members', ['organization_id', 'user_id'], unique=True)

    # --- organization_invitations -----------------------------------------
    op.create_table(
        'organization_invitations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', sa.String(255), nullable=False),
        sa.Column('invited_by', sa.String(255), nullable=False),
        sa.Column('invited_email', sa.String(320), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, server_default='member'),
        sa.Column('token', sa.String(255), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('personal_message', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('accepted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_organization_invitations_organization_id', 'organization_invitations', ['organization_id'])
    op.create_index('ix_organization_invitations_invited_email', 'organization_invitations', ['invited_email'])
    op.create_index('ix_organization_invitations_token', 'organization_invitations', ['token'], unique=True)
    op.create_index('ix_org_invitations_org_status', 'organization_invitations', ['organization_id', 'status'])
    op.create_index(
        'uq_org_invitations_pending_email',
        'organization_invitations',
        ['organization_id', 'invited_email'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    # --- tasks --------------------------------------------------------------
    op.create_table(
        'tasks',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', sa.String(255), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(50), nullable=False, server_default='todo'),
        sa.Column('priority', sa.String(50), nullable=False, server_default='medium'),
        sa.Column('creator_id', sa.String(255), nullable=False),
        sa.Column('assignee_id', sa.String(255), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_tasks_organization_id', 'tasks', ['organization_id'])
    op.create_index('ix_tasks_creator_id', 'tasks', ['creator_id'])
    op.create_index('ix_tasks_assignee_id', 'tasks', ['assignee_id'])

    # --- notifications ------------------------------------------------------
    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        *_timestamps(),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade():
    # Reverse all operations in upgrade()
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('ix_tasks_assignee_id', table_name='tasks')
    op.drop_index('ix_tasks_creator_id', table_name='tasks')
    op.drop_index('ix_tasks_organization_id', table_name='tasks')
    op.drop_table('tasks')

    op.drop_index('uq_org_invitations_pending_email', table_name='organization_invitations')
    op.drop_index('ix_org_invitations_org_status', table_name='organization_invitations')
    op.drop_index('ix_organization_invitations_token', table_name='organization_invitations')
    op.drop_index('ix_organization_invitations_invited_email', table_name='organization_invitations')
    op.drop_index('ix_organization_invitations_organization_id', table_name='organization_invitations')
    op.drop_table('organization_invitations')

    op.drop_index('ix_org_members_org_user', table_name='organization_members')
    op.drop_index('ix_organization_members_user_id', table_name='organization_members')
    op.drop_index('ix_organization_members_organization_id', table_name='organization_members')
    op.drop_table('organization_members')

    op.drop_table('users')

    op.drop_index('ix_organizations_owner_id', table_name='organizations')
    op.drop_table('organizations')
