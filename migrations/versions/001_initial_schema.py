"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2025-01-15

Legajos database schema:
- Users
- Persons, PersonAddresses
- Sources, SourceRecords
- Cases, PersonCases, CaseMedia
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _uuid():
    return postgresql.UUID(as_uuid=True)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(30), nullable=False, server_default='OPERATOR'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'persons',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('identity_number', sa.String(50), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('sex', sa.String(30), nullable=True),
        sa.Column('document_type', sa.String(30), nullable=True),
        sa.Column('document_name', sa.String(120), nullable=True),
        sa.Column('birthdate', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('nationality', sa.String(30), nullable=False, server_default='ARGENTINA'),
        sa.Column('other_nationality', sa.String(120), nullable=True),
        sa.Column('emails', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('phones', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('social_networks', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('identity_number'),
    )
    op.create_index('ix_persons_name', 'persons', ['last_name', 'first_name'])

    op.create_table(
        'person_addresses',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('person_id', _uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('street', sa.String(120), nullable=True),
        sa.Column('street_number', sa.String(20), nullable=True),
        sa.Column('province', sa.String(120), nullable=True),
        sa.Column('locality', sa.String(120), nullable=True),
        sa.Column('reference', sa.String(255), nullable=True),
        sa.Column('is_principal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_person_addresses_person', 'person_addresses', ['person_id', 'position'])

    op.create_table(
        'sources',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('kind', sa.String(60), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'source_records',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('person_id', _uuid(), nullable=False),
        sa.Column('source_id', _uuid(), nullable=False),
        sa.Column('collected_by_id', _uuid(), nullable=True),
        sa.Column('collected_at', sa.DateTime(), nullable=False),
        sa.Column('raw_payload', postgresql.JSONB(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['source_id'], ['sources.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['collected_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_source_records_person_collected', 'source_records', ['person_id', 'collected_at']
    )

    op.create_table(
        'cases',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('numero_causa', sa.String(120), nullable=True),
        sa.Column('caratula', sa.String(255), nullable=True),
        sa.Column('juzgado_interventor', sa.String(255), nullable=True),
        sa.Column('secretaria', sa.String(255), nullable=True),
        sa.Column('fiscalia', sa.String(255), nullable=True),
        sa.Column('jurisdiccion', sa.String(30), nullable=False, server_default='SIN_DATO'),
        sa.Column('delito', sa.String(255), nullable=True),
        sa.Column('fecha_hecho', sa.Date(), nullable=True),
        sa.Column('estado_requerimiento', sa.String(30), nullable=False, server_default='CAPTURA_VIGENTE'),
        sa.Column('fuerza_asignada', sa.String(30), nullable=False, server_default='S/D'),
        sa.Column('recompensa', sa.String(30), nullable=False, server_default='SIN_DATO'),
        sa.Column('reward_amount', sa.Numeric(17, 2), nullable=True),
        sa.Column('priority_value', sa.Integer(), nullable=True),
        sa.Column('additional_info', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('creado_en', sa.DateTime(), nullable=False),
        sa.Column('actualizado_en', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_cases_estado_creado', 'cases', ['estado_requerimiento', 'creado_en'])

    op.create_table(
        'person_cases',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('case_id', _uuid(), nullable=False),
        sa.Column('person_id', _uuid(), nullable=False),
        sa.Column('role', sa.String(60), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('case_id', 'person_id', name='uq_person_cases_case_person'),
    )

    op.create_table(
        'case_media',
        sa.Column('id', _uuid(), nullable=False),
        sa.Column('case_id', _uuid(), nullable=False),
        sa.Column('kind', sa.String(30), nullable=False),
        sa.Column('file_path', sa.String(500), nullable=False),
        sa.Column('original_name', sa.String(255), nullable=True),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('size', sa.BigInteger(), nullable=True),
        sa.Column('description', sa.String(200), nullable=True),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_case_media_case_kind', 'case_media', ['case_id', 'kind'])


def downgrade() -> None:
    op.drop_index('ix_case_media_case_kind', table_name='case_media')
    op.drop_table('case_media')
    op.drop_table('person_cases')
    op.drop_index('ix_cases_estado_creado', table_name='cases')
    op.drop_table('cases')
    op.drop_index('ix_source_records_person_collected', table_name='source_records')
    op.drop_table('source_records')
    op.drop_table('sources')
    op.drop_index('ix_person_addresses_person', table_name='person_addresses')
    op.drop_table('person_addresses')
    op.drop_index('ix_persons_name', table_name='persons')
    op.drop_table('persons')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
