"""initial schema: specs, endpoints, apps, keys, chat, insights

Revision ID: 20261017_initial_schema
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


SPEC_TYPE = sa.Enum("openapi", "swagger", "postman", "other", name="spec_type")
MESSAGE_ROLE = sa.Enum("user", "assistant", "system", name="message_role")


def upgrade():
    op.create_table(
        "api_specs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("version", sa.String(length=64), nullable=True),
        sa.Column("spec_type", SPEC_TYPE, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("override_base_url", sa.String(length=1024), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_api_specs_created", "api_specs", ["created_at"])

    op.create_table(
        "api_endpoints",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("spec_id", sa.Integer(), sa.ForeignKey("api_specs.id"), nullable=False),
        sa.Column("path", sa.String(length=1024), nullable=False),
        sa.Column("method", sa.String(length=16), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parameters", sa.Text(), nullable=True),
        sa.Column("request_body", sa.Text(), nullable=True),
        sa.Column("responses", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_api_endpoints_spec_id", "api_endpoints", ["spec_id"])

    op.create_table(
        "generated_apps",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("spec_id", sa.Integer(), sa.ForeignKey("api_specs.id"), nullable=False),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("framework", sa.String(length=32), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("metadata", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_generated_apps_spec_id", "generated_apps", ["spec_id"])
    op.create_index("ix_generated_apps_spec_created", "generated_apps", ["spec_id", "created_at"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("spec_id", sa.Integer(), sa.ForeignKey("api_specs.id"), nullable=False),
        sa.Column("key_name", sa.String(length=255), nullable=False),
        sa.Column("key_value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_api_keys_spec_id", "api_keys", ["spec_id"])

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("conversation_id", sa.String(length=64), nullable=False),
        sa.Column("current_spec_id", sa.Integer(), nullable=True),
        sa.Column("current_app_id", sa.Integer(), nullable=True),
        sa.Column("last_action", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_conversations_conversation_id", "conversations", ["conversation_id"], unique=True)

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "conversation_id",
            sa.String(length=64),
            sa.ForeignKey("conversations.conversation_id"),
            nullable=False,
        ),
        sa.Column("role", MESSAGE_ROLE, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_messages_conversation_id", "messages", ["conversation_id"])
    op.create_index("ix_messages_conversation_created", "messages", ["conversation_id", "created_at"])

    op.create_table(
        "insights",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("spec_id", sa.Integer(), sa.ForeignKey("api_specs.id"), nullable=False),
        sa.Column("capabilities", sa.Text(), nullable=False),
        sa.Column("workflows", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_insights_spec_id", "insights", ["spec_id"], unique=True)

    op.create_table(
        "workflows",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("spec_id", sa.Integer(), sa.ForeignKey("api_specs.id"), nullable=False),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("steps", sa.Text(), nullable=False),
        sa.Column("complexity", sa.String(length=32), nullable=False),
        sa.Column("code", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workflows_spec_id", "workflows", ["spec_id"])

    op.create_table(
        "remixes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("spec_id", sa.Integer(), sa.ForeignKey("api_specs.id"), nullable=False),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("innovation", sa.Text(), nullable=True),
        sa.Column("endpoints_used", sa.Text(), nullable=False),
        sa.Column("implementation", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_remixes_spec_id", "remixes", ["spec_id"])


def downgrade():
    for table in ("remixes", "workflows", "insights", "messages", "conversations", "api_keys", "generated_apps", "api_endpoints", "api_specs"):
        op.drop_table(table)
    MESSAGE_ROLE.drop(op.get_bind(), checkfirst=True)
    SPEC_TYPE.drop(op.get_bind(), checkfirst=True)
