"""0001 base schema for goods issues

Revision ID: 0001_base_schema
Revises:
Create Date: 2026-10-19 09:12:41.208553

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_base_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )
    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_email'), ['email'], unique=True)

    op.create_table(
        'collaborator',
        sa.Column('identification', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=True),
        sa.Column('alias', sa.String(length=64), nullable=True),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('authorized', sa.Boolean(), nullable=False),
        sa.Column('employed', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('identification'),
    )
    with op.batch_alter_table('collaborator', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_collaborator_email'), ['email'], unique=False)

    op.create_table(
        'article',
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=256), nullable=False),
        sa.Column('brand', sa.String(length=128), nullable=True),
        sa.Column('unit', sa.String(length=32), nullable=True),
        sa.Column('unit_price', sa.Float(), nullable=True),
        sa.Column('image_url', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('code'),
    )
    with op.batch_alter_table('article', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_article_name'), ['name'], unique=False)

    op.create_table(
        'stock_receipt',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('article_code', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('received_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.CheckConstraint('quantity > 0', name='ck_stock_receipt_quantity_positive'),
        sa.ForeignKeyConstraint(['article_code'], ['article.code']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('stock_receipt', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_stock_receipt_article_code'), ['article_code'], unique=False)

    op.create_table(
        'request_type',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('description'),
    )

    op.create_table(
        'issue_request',
        sa.Column('number', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('request_type_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=256), nullable=False),
        sa.Column('requested_at', sa.DateTime(), nullable=False),
        sa.Column('responsible_id', sa.String(length=32), nullable=True),
        sa.Column('requester_id', sa.String(length=32), nullable=True),
        sa.Column('destination', sa.String(length=128), nullable=True),
        sa.ForeignKeyConstraint(['request_type_id'], ['request_type.id']),
        sa.PrimaryKeyConstraint('number'),
    )

    op.create_table(
        'issue',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.Column('approver_id', sa.String(length=32), nullable=False),
        sa.Column('requester_id', sa.String(length=32), nullable=False),
        sa.Column('request_number', sa.Integer(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('finalized', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('issue', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_issue_approver_id'), ['approver_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_issue_requester_id'), ['requester_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_issue_request_number'), ['request_number'], unique=False)

    op.create_table(
        'issue_line',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('issue_id', sa.Integer(), nullable=False),
        sa.Column('article_code', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=True),
        sa.CheckConstraint('quantity > 0', name='ck_issue_line_quantity_positive'),
        sa.ForeignKeyConstraint(['article_code'], ['article.code']),
        sa.ForeignKeyConstraint(['issue_id'], ['issue.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('issue_line', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_issue_line_issue_id'), ['issue_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_issue_line_article_code'), ['article_code'], unique=False)

    op.create_table(
        'asset',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=256), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'issue_asset',
        sa.Column('issue_id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['asset_id'], ['asset.id']),
        sa.ForeignKeyConstraint(['issue_id'], ['issue.id']),
        sa.PrimaryKeyConstraint('issue_id', 'asset_id'),
    )


def downgrade():
    op.drop_table('issue_asset')
    op.drop_table('asset')
    with op.batch_alter_table('issue_line', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_issue_line_article_code'))
        batch_op.drop_index(batch_op.f('ix_issue_line_issue_id'))
    op.drop_table('issue_line')
    with op.batch_alter_table('issue', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_issue_request_number'))
        batch_op.drop_index(batch_op.f('ix_issue_requester_id'))
        batch_op.drop_index(batch_op.f('ix_issue_approver_id'))
    op.drop_table('issue')
    op.drop_table('issue_request')
    op.drop_table('request_type')
    with op.batch_alter_table('stock_receipt', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_stock_receipt_article_code'))
    op.drop_table('stock_receipt')
    with op.batch_alter_table('article', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_article_name'))
    op.drop_table('article')
    with op.batch_alter_table('collaborator', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_collaborator_email'))
    op.drop_table('collaborator')
    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_user_email'))
    op.drop_table('user')
