"""Initial schema: RFQs, responses, orders, fulfillment, company, opportunities

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # RFQ documents
    op.create_table(
        'rfq_documents',
        *_base_columns(),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('s3_key', sa.String(length=500), nullable=True),
        sa.Column('extracted_text', sa.Text(), nullable=True),
        sa.Column('extracted_fields', sa.JSON(), nullable=True),
        sa.Column('rfq_number', sa.String(length=100), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('contracting_office', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('processing_error', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rfq_documents_deleted_at'), 'rfq_documents', ['deleted_at'], unique=False)
    op.create_index(op.f('ix_rfq_documents_rfq_number'), 'rfq_documents', ['rfq_number'], unique=False)
    op.create_index(op.f('ix_rfq_documents_due_date'), 'rfq_documents', ['due_date'], unique=False)
    op.create_index(op.f('ix_rfq_documents_status'), 'rfq_documents', ['status'], unique=False)

    # Quote responses
    op.create_table(
        'rfq_responses',
        *_base_columns(),
        sa.Column('rfq_document_id', sa.Integer(), nullable=True),
        sa.Column('response_data', sa.JSON(), nullable=True),
        sa.Column('generated_pdf_key', sa.String(length=500), nullable=True),
        sa.Column('generated_pdf_url', sa.String(length=1000), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['rfq_document_id'], ['rfq_documents.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rfq_responses_deleted_at'), 'rfq_responses', ['deleted_at'], unique=False)
    op.create_index(op.f('ix_rfq_responses_rfq_document_id'), 'rfq_responses', ['rfq_document_id'], unique=False)
    op.create_index(op.f('ix_rfq_responses_status'), 'rfq_responses', ['status'], unique=False)

    # Purchase orders
    op.create_table(
        'government_orders',
        *_base_columns(),
        sa.Column('po_number', sa.String(length=100), nullable=False),
        sa.Column('rfq_number', sa.String(length=100), nullable=True),
        sa.Column('product_name', sa.String(length=500), nullable=True),
        sa.Column('nsn', sa.String(length=20), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('unit_of_measure', sa.String(length=20), nullable=True),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('total_price', sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ship_to_address', sa.Text(), nullable=True),
        sa.Column('extracted_data', sa.JSON(), nullable=True),
        sa.Column('extracted_text', sa.Text(), nullable=True),
        sa.Column('rfq_document_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('stage', sa.String(length=20), nullable=True),
        sa.Column('stage_changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('tracking_number', sa.String(length=100), nullable=True),
        sa.Column('shipped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processing_error', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['rfq_document_id'], ['rfq_documents.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_government_orders_deleted_at'), 'government_orders', ['deleted_at'], unique=False)
    op.create_index(op.f('ix_government_orders_po_number'), 'government_orders', ['po_number'], unique=False)
    op.create_index(op.f('ix_government_orders_rfq_number'), 'government_orders', ['rfq_number'], unique=False)
    op.create_index(op.f('ix_government_orders_nsn'), 'government_orders', ['nsn'], unique=False)
    op.create_index(op.f('ix_government_orders_rfq_document_id'), 'government_orders', ['rfq_document_id'], unique=False)
    op.create_index(op.f('ix_government_orders_status'), 'government_orders', ['status'], unique=False)
    op.create_index(op.f('ix_government_orders_stage'), 'government_orders', ['stage'], unique=False)

    # Order to RFQ links (source of truth for which RFQs an order awards)
    op.create_table(
        'government_order_rfq_links',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('government_order_id', sa.Integer(), nullable=False),
        sa.Column('rfq_document_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['government_order_id'], ['government_orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['rfq_document_id'], ['rfq_documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('government_order_id', 'rfq_document_id', name='uq_government_order_rfq_link'),
    )
    op.create_index(
        op.f('ix_government_order_rfq_links_government_order_id'),
        'government_order_rfq_links', ['government_order_id'], unique=False,
    )
    op.create_index(
        op.f('ix_government_order_rfq_links_rfq_document_id'),
        'government_order_rfq_links', ['rfq_document_id'], unique=False,
    )

    # Fulfillment artifacts
    op.create_table(
        'quality_sheets',
        *_base_columns(),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('lot_number', sa.String(length=100), nullable=True),
        sa.Column('po_number', sa.String(length=100), nullable=True),
        sa.Column('checks', sa.JSON(), nullable=True),
        sa.Column('verified_by', sa.String(length=255), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['government_orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_quality_sheets_deleted_at'), 'quality_sheets', ['deleted_at'], unique=False)
    op.create_index(op.f('ix_quality_sheets_order_id'), 'quality_sheets', ['order_id'], unique=True)

    op.create_table(
        'generated_labels',
        *_base_columns(),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('label_type', sa.String(length=50), nullable=False),
        sa.Column('file_key', sa.String(length=500), nullable=True),
        sa.Column('verified_by', sa.String(length=255), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['government_orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_generated_labels_deleted_at'), 'generated_labels', ['deleted_at'], unique=False)
    op.create_index(op.f('ix_generated_labels_order_id'), 'generated_labels', ['order_id'], unique=False)

    # Company profile
    op.create_table(
        'company_profiles',
        *_base_columns(),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('cage_code', sa.String(length=10), nullable=True),
        sa.Column('uei', sa.String(length=20), nullable=True),
        sa.Column('naics_code', sa.String(length=10), nullable=True),
        sa.Column('business_size', sa.String(length=50), nullable=True),
        sa.Column('certifications', sa.JSON(), nullable=False),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('default_payment_terms', sa.String(length=100), nullable=True),
        sa.Column('default_fob', sa.String(length=50), nullable=True),
        sa.Column('default_delivery_days', sa.String(length=50), nullable=True),
        sa.Column('default_notes', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_company_profiles_deleted_at'), 'company_profiles', ['deleted_at'], unique=False)

    # SAM.gov mirror
    op.create_table(
        'sam_gov_opportunities',
        *_base_columns(),
        sa.Column('solicitation_number', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=1000), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('full_description', sa.Text(), nullable=True),
        sa.Column('agency', sa.String(length=255), nullable=True),
        sa.Column('office', sa.String(length=255), nullable=True),
        sa.Column('posted_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('response_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('naics_code', sa.String(length=10), nullable=True),
        sa.Column('set_aside_type', sa.String(length=100), nullable=True),
        sa.Column('ui_link', sa.String(length=1000), nullable=True),
        sa.Column('resource_links', sa.JSON(), nullable=True),
        sa.Column('point_of_contact', sa.JSON(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('line_items', sa.JSON(), nullable=True),
        sa.Column('relevance_score', sa.Integer(), nullable=False),
        sa.Column('matched_keyword', sa.String(length=100), nullable=True),
        sa.Column('matched_fsc', sa.String(length=10), nullable=True),
        sa.Column('matched_nsns', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('dismiss_reason', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sam_gov_opportunities_deleted_at'), 'sam_gov_opportunities', ['deleted_at'], unique=False)
    op.create_index(
        op.f('ix_sam_gov_opportunities_solicitation_number'),
        'sam_gov_opportunities', ['solicitation_number'], unique=True,
    )
    op.create_index(
        op.f('ix_sam_gov_opportunities_response_deadline'),
        'sam_gov_opportunities', ['response_deadline'], unique=False,
    )
    op.create_index(
        op.f('ix_sam_gov_opportunities_relevance_score'),
        'sam_gov_opportunities', ['relevance_score'], unique=False,
    )
    op.create_index(op.f('ix_sam_gov_opportunities_status'), 'sam_gov_opportunities', ['status'], unique=False)

    # NSN catalog
    op.create_table(
        'nsn_catalog',
        *_base_columns(),
        sa.Column('nsn', sa.String(length=20), nullable=False),
        sa.Column('fsc', sa.String(length=4), nullable=False),
        sa.Column('name', sa.String(length=500), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_nsn_catalog_deleted_at'), 'nsn_catalog', ['deleted_at'], unique=False)
    op.create_index(op.f('ix_nsn_catalog_nsn'), 'nsn_catalog', ['nsn'], unique=True)
    op.create_index(op.f('ix_nsn_catalog_fsc'), 'nsn_catalog', ['fsc'], unique=False)


def downgrade() -> None:
    op.drop_table('nsn_catalog')
    op.drop_table('sam_gov_opportunities')
    op.drop_table('company_profiles')
    op.drop_table('generated_labels')
    op.drop_table('quality_sheets')
    op.drop_table('government_order_rfq_links')
    op.drop_table('government_orders')
    op.drop_table('rfq_responses')
    op.drop_table('rfq_documents')
