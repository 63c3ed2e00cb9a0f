"""initial schema

Revision ID: 20261019_01_initial
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_01_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _project_fk() -> sa.Column:
    return sa.Column(
        "project_id",
        sa.Integer(),
        sa.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    # projects
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column(
            "default_at_startup",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_projects_code", "projects", ["code"], unique=True)

    # teams
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _project_fk(),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("description", sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "code"),
    )
    op.create_index("ix_teams_project_id", "teams", ["project_id"], unique=False)

    # sources
    op.create_table(
        "sources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _project_fk(),
        sa.Column("code", sa.String(length=16), nullable=False),
        sa.Column("name", sa.String(length=32), nullable=False),
        sa.Column("letter", sa.String(length=1), nullable=False),
        sa.Column("technology", sa.String(length=16), nullable=False),
        sa.Column("vcs_url", sa.String(length=256), nullable=True),
        sa.Column("default_branch", sa.String(length=16), nullable=True),
        sa.Column(
            "postman_country_root_folders",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "code"),
    )
    op.create_index("ix_sources_project_id", "sources", ["project_id"], unique=False)

    # scenarios
    op.create_table(
        "scenarios",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "source_id",
            sa.Integer(),
            sa.ForeignKey("sources.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("feature_file", sa.String(length=256), nullable=True),
        sa.Column("feature_name", sa.String(length=256), nullable=True),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("line", sa.Integer(), nullable=True),
        sa.Column("country_codes", sa.String(length=128), nullable=True),
        sa.Column("severity", sa.String(length=32), nullable=True),
        sa.Column(
            "ignored", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("content", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_scenarios_source_id", "scenarios", ["source_id"], unique=False)

    # functionalities
    op.create_table(
        "functionalities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _project_fk(),
        sa.Column(
            "parent_id",
            sa.Integer(),
            sa.ForeignKey("functionalities.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("order", sa.Float(), nullable=False),
        sa.Column("type", sa.String(length=13), nullable=False),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("country_codes", sa.String(length=128), nullable=True),
        sa.Column(
            "team_id",
            sa.Integer(),
            sa.ForeignKey("teams.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("severity", sa.String(length=32), nullable=True),
        sa.Column("created", sa.String(length=10), nullable=True),
        sa.Column("started", sa.Boolean(), nullable=True),
        sa.Column("not_automatable", sa.Boolean(), nullable=True),
        sa.Column("covered_scenarios", sa.Integer(), nullable=True),
        sa.Column("covered_country_scenarios", sa.String(length=512), nullable=True),
        sa.Column("ignored_scenarios", sa.Integer(), nullable=True),
        sa.Column("ignored_country_scenarios", sa.String(length=512), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_functionalities_project_id", "functionalities", ["project_id"], unique=False
    )
    op.create_index(
        "ix_functionalities_parent_id", "functionalities", ["parent_id"], unique=False
    )

    # functionality_coverage (many-to-many)
    op.create_table(
        "functionality_coverage",
        sa.Column(
            "functionality_id",
            sa.Integer(),
            sa.ForeignKey("functionalities.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "scenario_id",
            sa.Integer(),
            sa.ForeignKey("scenarios.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # problems
    op.create_table(
        "problems",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _project_fk(),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column(
            "blamed_team_id",
            sa.Integer(),
            sa.ForeignKey("teams.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("defect_id", sa.String(length=32), nullable=True),
        sa.Column("pattern", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=128), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_problems_project_id", "problems", ["project_id"], unique=False)
    op.create_index(
        "ix_problems_blamed_team_id", "problems", ["blamed_team_id"], unique=False
    )

    # settings
    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _project_fk(),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "code"),
    )
    op.create_index("ix_settings_project_id", "settings", ["project_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_settings_project_id", table_name="settings")
    op.drop_table("settings")

    op.drop_index("ix_problems_blamed_team_id", table_name="problems")
    op.drop_index("ix_problems_project_id", table_name="problems")
    op.drop_table("problems")

    op.drop_table("functionality_coverage")

    op.drop_index("ix_functionalities_parent_id", table_name="functionalities")
    op.drop_index("ix_functionalities_project_id", table_name="functionalities")
    op.drop_table("functionalities")

    op.drop_index("ix_scenarios_source_id", table_name="scenarios")
    op.drop_table("scenarios")

    op.drop_index("ix_sources_project_id", table_name="sources")
    op.drop_table("sources")

    op.drop_index("ix_teams_project_id", table_name="teams")
    op.drop_table("teams")

    op.drop_index("ix_projects_code", table_name="projects")
    op.drop_table("projects")
