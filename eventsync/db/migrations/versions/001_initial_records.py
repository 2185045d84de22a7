"""Initial records schema

Revision ID: 001_initial_records
Revises:
Create Date: 2025-03-01

Creates the content store tables:
- records: events, recurrences and locations (single table, record_type)
- record_fields: named per-record values (text or JSON)
- terms: taxonomy terms (event filters, translation groups)
- record_terms: record <-> term links
"""
from alembic import op
import sqlalchemy as sa

from eventsync.models.mixins import UUIDType
from eventsync.models.types import JSONBType


# revision identifiers, used by Alembic.
revision = '001_initial_records'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create records, record_fields, terms and record_terms tables.

    Foreign keys:
    - records.parent_id -> records.id (CASCADE): recurrences go with their event
    - record_fields.record_id -> records.id (CASCADE)
    - record_terms -> records / terms (CASCADE)
    - terms.parent_id -> terms.id (SET NULL)
    """
    op.create_table(
        'terms',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('taxonomy', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column(
            'parent_id', sa.Integer(),
            sa.ForeignKey('terms.id', ondelete='SET NULL'), nullable=True
        ),
        sa.UniqueConstraint('taxonomy', 'slug', name='uq_terms_taxonomy_slug'),
    )
    op.create_index('ix_terms_taxonomy', 'terms', ['taxonomy'])

    op.create_table(
        'records',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('uuid', UUIDType(), nullable=False),
        sa.Column('record_type', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column(
            'parent_id', sa.Integer(),
            sa.ForeignKey('records.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column('language', sa.String(length=12), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_records_uuid', 'records', ['uuid'], unique=True)
    op.create_index('ix_records_record_type', 'records', ['record_type'])
    op.create_index('ix_records_slug', 'records', ['slug'])
    op.create_index('ix_records_status', 'records', ['status'])
    op.create_index('ix_records_parent_id', 'records', ['parent_id'])
    op.create_index('ix_records_language', 'records', ['language'])
    op.create_index('idx_records_type_status', 'records', ['record_type', 'status'])

    op.create_table(
        'record_fields',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'record_id', sa.Integer(),
            sa.ForeignKey('records.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('value_json', JSONBType(), nullable=True),
        sa.UniqueConstraint('record_id', 'name', name='uq_record_fields_record_name'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_record_fields_record_id', 'record_fields', ['record_id'])
    op.create_index('idx_record_fields_name', 'record_fields', ['name'])

    op.create_table(
        'record_terms',
        sa.Column(
            'record_id', sa.Integer(),
            sa.ForeignKey('records.id', ondelete='CASCADE'), primary_key=True
        ),
        sa.Column(
            'term_id', sa.Integer(),
            sa.ForeignKey('terms.id', ondelete='CASCADE'), primary_key=True
        ),
    )


def downgrade() -> None:
    """Drop all content store tables."""
    op.drop_table('record_terms')
    op.drop_index('idx_record_fields_name', table_name='record_fields')
    op.drop_index('ix_record_fields_record_id', table_name='record_fields')
    op.drop_table('record_fields')
    for index in (
        'idx_records_type_status', 'ix_records_language', 'ix_records_parent_id',
        'ix_records_status', 'ix_records_slug', 'ix_records_record_type', 'ix_records_uuid',
    ):
        op.drop_index(index, table_name='records')
    op.drop_table('records')
    op.drop_index('ix_terms_taxonomy', table_name='terms')
    op.drop_table('terms')
