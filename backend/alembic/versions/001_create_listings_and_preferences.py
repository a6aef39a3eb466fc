"""create listings and preferences

Revision ID: 001_listings_preferences
Revises:
Create Date: 2025-06-02 10:14:41.512003

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision = '001_listings_preferences'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'listings',
        sa.Column('id', sa.String(50), primary_key=True),
        sa.Column('owner_id', sa.String(50), nullable=True),
        sa.Column('brief_type', sa.String(50), nullable=False),
        sa.Column('property_type', sa.String(100), nullable=True),
        sa.Column('building_type', sa.String(100), nullable=True),
        sa.Column('property_condition', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=False),
        sa.Column('local_government', sa.String(100), nullable=True),
        sa.Column('area', sa.String(150), nullable=True),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('land_size', sa.Float(), nullable=True),
        sa.Column('land_size_unit', sa.String(30), nullable=True),
        sa.Column('max_guests', sa.Integer(), nullable=True),
        sa.Column('features', JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column('documents', JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column('house_rules', JSONB, nullable=True),
        sa.Column('booked_periods', JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column('pictures', JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='pending'),
        sa.Column('is_available', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('is_rejected', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('is_premium', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_listings_brief_type', 'listings', ['brief_type'])
    op.create_index('idx_listings_status', 'listings', ['status'])
    op.create_index('idx_listings_state_lga', 'listings', ['state', 'local_government'])
    op.create_index('idx_listings_area', 'listings', ['area'])
    op.create_index('idx_listings_price', 'listings', ['price'])
    op.create_index('idx_listings_bedrooms', 'listings', ['bedrooms'])

    op.create_table(
        'preferences',
        sa.Column('id', sa.String(50), primary_key=True),
        sa.Column('buyer_id', sa.String(50), nullable=True),
        sa.Column('preference_type', sa.String(30), nullable=False),
        sa.Column('preference_mode', sa.String(30), nullable=False),
        sa.Column('location', JSONB, nullable=False),
        sa.Column('budget', JSONB, nullable=False),
        sa.Column('property_details', JSONB, nullable=True),
        sa.Column('development_details', JSONB, nullable=True),
        sa.Column('booking_details', JSONB, nullable=True),
        sa.Column('features', JSONB, nullable=True),
        sa.Column('contact_info', JSONB, nullable=True),
        sa.Column('additional_notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_preferences_type', 'preferences', ['preference_type'])
    op.create_index('idx_preferences_status', 'preferences', ['status'])


def downgrade() -> None:
    op.drop_index('idx_preferences_status', table_name='preferences')
    op.drop_index('idx_preferences_type', table_name='preferences')
    op.drop_table('preferences')

    op.drop_index('idx_listings_bedrooms', table_name='listings')
    op.drop_index('idx_listings_price', table_name='listings')
    op.drop_index('idx_listings_area', table_name='listings')
    op.drop_index('idx_listings_state_lga', table_name='listings')
    op.drop_index('idx_listings_status', table_name='listings')
    op.drop_index('idx_listings_brief_type', table_name='listings')
    op.drop_table('listings')
