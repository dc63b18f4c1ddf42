from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('email', sa.String(320), nullable=False, unique=True, index=True),
        sa.Column('full_name', sa.String(200), nullable=True),
        sa.Column('password_hash', sa.String(300), nullable=False),
        sa.Column('is_admin', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_sign_in_at', sa.DateTime(timezone=True), nullable=True)
    )

    op.create_table('projects',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('make', sa.String(100), nullable=False, index=True),
        sa.Column('model', sa.String(100), nullable=False, index=True),
        sa.Column('year_range_start', sa.Integer, nullable=False),
        sa.Column('year_range_end', sa.Integer, nullable=False),
        sa.Column('engine_capacity_start', sa.Integer, nullable=False, server_default='0'),
        sa.Column('engine_capacity_end', sa.Integer, nullable=False, server_default='0'),
        sa.Column('fuel_type', sa.String(50), nullable=False, server_default='Petrol'),
        sa.Column('co2_emissions', sa.Float, nullable=False, server_default='0'),
        sa.Column('doors_config', sa.String(50), nullable=False, server_default='all door configs'),
        sa.Column('freename', sa.String(100), nullable=False, server_default=''),
        sa.Column('transport_costs', sa.Integer, nullable=False, server_default='0'),
        sa.Column('isv', sa.Integer, nullable=False, server_default='0'),
        sa.Column('portuguese_registration', sa.Integer, nullable=False, server_default='0'),
        sa.Column('german_plates_insurance', sa.Integer, nullable=False, server_default='0'),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('year_range_start <= year_range_end', name='ck_projects_year_range'),
        sa.CheckConstraint('engine_capacity_start <= engine_capacity_end', name='ck_projects_engine_range')
    )

    op.create_table('car_listings',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('make', sa.String(100), nullable=False, index=True),
        sa.Column('model', sa.String(100), nullable=False, index=True),
        sa.Column('year', sa.Integer, nullable=False),
        sa.Column('mileage', sa.Integer, nullable=False),
        sa.Column('price', sa.Float, nullable=False),
        sa.Column('co2', sa.Float, nullable=True),
        sa.Column('fuel_type', sa.String(50), nullable=True),
        sa.Column('first_registration_date', sa.String(50), nullable=True),
        sa.Column('power_kw', sa.Float, nullable=True),
        sa.Column('power_hp', sa.Float, nullable=True),
        sa.Column('gear_type', sa.String(50), nullable=True),
        sa.Column('number_of_doors', sa.Integer, nullable=True),
        sa.Column('number_of_seats', sa.Integer, nullable=True),
        sa.Column('seller', sa.String(200), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('listing_url', sa.String(1000), nullable=True),
        sa.Column('listing_date', sa.String(50), nullable=True),
        sa.Column('is_favorite', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('source', sa.String(100), nullable=False),
        sa.Column('unique_identifier', sa.String(150), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('project_id', sa.Integer, sa.ForeignKey('projects.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('source', 'unique_identifier', name='uq_car_listings_source_identifier')
    )

    op.create_table('data_sources',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('country', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True)
    )

    op.create_table('app_settings',
        sa.Column('key', sa.String(100), primary_key=True),
        sa.Column('value', sa.Text, nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True)
    )

def downgrade():
    op.drop_table('app_settings')
    op.drop_table('data_sources')
    op.drop_table('car_listings')
    op.drop_table('projects')
    op.drop_table('users')
