"""Initial contact ledger schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-16

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create contacts table
    op.create_table(
        'contacts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('mobile', sa.String(length=32), nullable=True),
        sa.Column('relationship_type', sa.String(length=20), nullable=True),
        sa.Column('source_system', sa.String(length=32), nullable=False),
        sa.Column('source_record_id', sa.String(length=255), nullable=False),
        sa.Column('is_whatsapp_reachable', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('data_quality_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'mobile', name='uq_contacts_name_mobile'),
    )
    op.create_index(op.f('ix_contacts_name'), 'contacts', ['name'], unique=False)
    op.create_index(op.f('ix_contacts_email'), 'contacts', ['email'], unique=False)
    op.create_index(op.f('ix_contacts_mobile'), 'contacts', ['mobile'], unique=False)
    op.create_index(op.f('ix_contacts_source_system'), 'contacts', ['source_system'], unique=False)
    op.create_index(op.f('ix_contacts_data_quality_score'), 'contacts', ['data_quality_score'], unique=False)
    op.create_index(op.f('ix_contacts_created_at'), 'contacts', ['created_at'], unique=False)

    # Create owners and contact_owners tables
    op.create_table(
        'owners',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'contact_owners',
        sa.Column('contact_id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['owner_id'], ['owners.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('contact_id', 'owner_id'),
    )
    op.create_index(op.f('ix_contact_owners_owner_id'), 'contact_owners', ['owner_id'], unique=False)

    # Create tags and contact_tags tables
    op.create_table(
        'tags',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'contact_tags',
        sa.Column('contact_id', sa.String(length=36), nullable=False),
        sa.Column('tag_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('contact_id', 'tag_id'),
    )
    op.create_index(op.f('ix_contact_tags_tag_id'), 'contact_tags', ['tag_id'], unique=False)

    # Create merge_history table (no foreign keys: rows outlive their contacts)
    op.create_table(
        'merge_history',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('merge_type', sa.String(length=32), nullable=False),
        sa.Column('primary_contact_id', sa.String(length=36), nullable=False),
        sa.Column('primary_contact_name', sa.String(length=255), nullable=False),
        sa.Column('merged_contact_id', sa.String(length=36), nullable=True),
        sa.Column('merged_contact_name', sa.String(length=255), nullable=True),
        sa.Column('source_system', sa.String(length=32), nullable=False),
        sa.Column('source_record_id', sa.String(length=255), nullable=True),
        sa.Column('merge_reason', sa.String(length=32), nullable=False),
        sa.Column('merge_details', sa.JSON(), nullable=True),
        sa.Column('merged_by', sa.String(length=255), nullable=False),
        sa.Column('before_merge_data', sa.JSON(), nullable=True),
        sa.Column('after_merge_data', sa.JSON(), nullable=True),
        sa.Column('before_quality_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('after_quality_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('involved_source_systems', sa.JSON(), nullable=False),
        sa.Column('merged_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_merge_history_merge_type'), 'merge_history', ['merge_type'], unique=False)
    op.create_index(op.f('ix_merge_history_primary_contact_id'), 'merge_history', ['primary_contact_id'], unique=False)
    op.create_index(op.f('ix_merge_history_merged_contact_id'), 'merge_history', ['merged_contact_id'], unique=False)
    op.create_index(op.f('ix_merge_history_source_system'), 'merge_history', ['source_system'], unique=False)
    op.create_index(op.f('ix_merge_history_merge_reason'), 'merge_history', ['merge_reason'], unique=False)
    op.create_index(op.f('ix_merge_history_merged_at'), 'merge_history', ['merged_at'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_merge_history_merged_at'), table_name='merge_history')
    op.drop_index(op.f('ix_merge_history_merge_reason'), table_name='merge_history')
    op.drop_index(op.f('ix_merge_history_source_system'), table_name='merge_history')
    op.drop_index(op.f('ix_merge_history_merged_contact_id'), table_name='merge_history')
    op.drop_index(op.f('ix_merge_history_primary_contact_id'), table_name='merge_history')
    op.drop_index(op.f('ix_merge_history_merge_type'), table_name='merge_history')
    op.drop_table('merge_history')
    op.drop_index(op.f('ix_contact_tags_tag_id'), table_name='contact_tags')
    op.drop_table('contact_tags')
    op.drop_table('tags')
    op.drop_index(op.f('ix_contact_owners_owner_id'), table_name='contact_owners')
    op.drop_table('contact_owners')
    op.drop_table('owners')
    op.drop_index(op.f('ix_contacts_created_at'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_data_quality_score'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_source_system'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_mobile'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_email'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_name'), table_name='contacts')
    op.drop_table('contacts')
