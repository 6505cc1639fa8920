"""add show_results and admin_id to games; created_at to questions and players;
target_player_id to votes; unique (game_id, name) on players

Revision ID: 5d2e8f0a6c13
Revises: 1a7c3e9d2b40
Create Date: 2026-02-03 18:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5d2e8f0a6c13'
down_revision = '1a7c3e9d2b40'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # Additive only: every change is a new nullable/defaulted column or index
    game_cols = {c['name'] for c in insp.get_columns('games')}
    with op.batch_alter_table('games') as batch_op:
        if 'show_results' not in game_cols:
            batch_op.add_column(sa.Column('show_results', sa.Boolean(), nullable=False, server_default=sa.false()))
        if 'admin_id' not in game_cols:
            batch_op.add_column(sa.Column('admin_id', sa.Integer(), nullable=True))
            batch_op.create_index('ix_games_admin_id', ['admin_id'])
            batch_op.create_foreign_key('fk_games_admin_id', 'admins', ['admin_id'], ['id'])

    question_cols = {c['name'] for c in insp.get_columns('questions')}
    if 'created_at' not in question_cols:
        with op.batch_alter_table('questions') as batch_op:
            batch_op.add_column(sa.Column('created_at', sa.DateTime(timezone=True), nullable=True))

    player_cols = {c['name'] for c in insp.get_columns('players')}
    player_uniques = {u['name'] for u in insp.get_unique_constraints('players')}
    with op.batch_alter_table('players') as batch_op:
        if 'created_at' not in player_cols:
            batch_op.add_column(sa.Column('created_at', sa.DateTime(timezone=True), nullable=True))
        if 'uq_player_game_name' not in player_uniques:
            batch_op.create_unique_constraint('uq_player_game_name', ['game_id', 'name'])

    vote_cols = {c['name'] for c in insp.get_columns('votes')}
    if 'target_player_id' not in vote_cols:
        with op.batch_alter_table('votes') as batch_op:
            batch_op.add_column(sa.Column('target_player_id', sa.Integer(), nullable=True))


def downgrade():
    with op.batch_alter_table('votes') as batch_op:
        batch_op.drop_column('target_player_id')
    with op.batch_alter_table('players') as batch_op:
        batch_op.drop_constraint('uq_player_game_name', type_='unique')
        batch_op.drop_column('created_at')
    with op.batch_alter_table('questions') as batch_op:
        batch_op.drop_column('created_at')
    with op.batch_alter_table('games') as batch_op:
        batch_op.drop_constraint('fk_games_admin_id', type_='foreignkey')
        batch_op.drop_index('ix_games_admin_id')
        batch_op.drop_column('admin_id')
        batch_op.drop_column('show_results')
