"""convert legacy registration columns to the structured registrations shape

Events written before the structured shape existed keep their registrations
in registrations_list / max_registrations / current_registration_count. This
migration writes the equivalent {max_regs, current, current_adults,
current_children, reg_list} object into events.registrations for every such
row. The legacy columns are left in place.

Revision ID: 0002_structured_registrations
Revises: 0001_initial_schema
Create Date: 2025-06-02 10:30:00.000000

"""
from typing import Any, Dict, List, Optional, Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002_structured_registrations"
down_revision: Union[str, None] = "0001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

events = sa.table(
    "events",
    sa.column("id", sa.Uuid()),
    sa.column("registrations", JSONType),
    sa.column("max_registrations", sa.Integer()),
    sa.column("current_registration_count", sa.Integer()),
    sa.column("registrations_list", JSONType),
    sa.column("version", sa.Integer()),
)


def _count(entry: Dict[str, Any], key: str) -> int:
    try:
        return int(entry.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def structured_from_legacy(
    registrations_list: Optional[List[Dict[str, Any]]],
    max_registrations: Optional[int],
    current_registration_count: Optional[int],
) -> Dict[str, Any]:
    reg_list = registrations_list if isinstance(registrations_list, list) else []
    active = [entry for entry in reg_list if isinstance(entry, dict) and entry.get("status")]
    return {
        "max_regs": max_registrations or None,
        "current": current_registration_count or 0,
        "current_adults": sum(_count(entry, "adult_tickets") for entry in active),
        "current_children": sum(_count(entry, "child_tickets") for entry in active),
        "reg_list": reg_list,
    }


def upgrade() -> None:
    connection = op.get_bind()
    rows = connection.execute(
        sa.select(
            events.c.id,
            events.c.max_registrations,
            events.c.current_registration_count,
            events.c.registrations_list,
        ).where(events.c.registrations.is_(None))
    ).fetchall()

    for row in rows:
        connection.execute(
            events.update()
            .where(events.c.id == row.id)
            .values(
                registrations=structured_from_legacy(
                    row.registrations_list,
                    row.max_registrations,
                    row.current_registration_count,
                ),
                version=events.c.version + 1,
            )
        )


def downgrade() -> None:
    # Copy the structured shape back into the legacy columns
    connection = op.get_bind()
    rows = connection.execute(
        sa.select(events.c.id, events.c.registrations).where(events.c.registrations.isnot(None))
    ).fetchall()

    for row in rows:
        shape = row.registrations or {}
        connection.execute(
            events.update()
            .where(events.c.id == row.id)
            .values(
                registrations_list=shape.get("reg_list") or [],
                max_registrations=shape.get("max_regs"),
                current_registration_count=shape.get("current") or 0,
            )
        )
