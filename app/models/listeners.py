from datetime import datetime, timezone
from sqlalchemy import event, inspect

from app.core.constants import CLOSED_STAGES
from app.models.agent import Agent
from app.models.deal import Deal


# Auto updated_at
@event.listens_for(Agent, "before_update")
@event.listens_for(Deal, "before_update")
def update_timestamp(mapper, connection, target):
    target.updated_at = datetime.now(timezone.utc)


# Stamp closed_at when a deal enters won/lost, clear it when reopened
@event.listens_for(Deal, "before_insert")
def stamp_closed_on_insert(mapper, connection, target):
    if target.stage in CLOSED_STAGES and target.closed_at is None:
        target.closed_at = datetime.now(timezone.utc)


@event.listens_for(Deal, "before_update")
def stamp_closed_on_stage_change(mapper, connection, target):
    history = inspect(target).attrs.stage.history
    if not history.has_changes():
        return
    if target.stage in CLOSED_STAGES:
        target.closed_at = datetime.now(timezone.utc)
    else:
        target.closed_at = None
