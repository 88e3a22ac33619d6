"""Time slot schemas."""

import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AvailableSlot(BaseModel):
    """An open slot, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    slot_id: int
    time: datetime.time
    duration_minutes: int
