"""Progress snapshot served to the dashboard poller."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class ProgressSnapshot(BaseModel):
    """
    Immutable view of the enrichment progress at one instant.

    Serialized with camelCase keys (``inProgress``, ``startTime``...).
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    run_id: Optional[str] = Field(default=None, description="Identifier of the current/last run")
    total: int = Field(default=0, ge=0, description="Rows admitted into the run")
    processed: int = Field(default=0, ge=0, description="Rows attempted so far (failures included)")
    in_progress: bool = Field(default=False, description="True strictly between start and complete")
    cancelled: bool = Field(default=False, description="Run was stopped before draining its queue")
    start_time: Optional[datetime] = None
    last_update: Optional[datetime] = None

    @computed_field
    @property
    def progress(self) -> int:
        """Percentage complete, rounded; 0 when nothing was admitted."""
        if self.total == 0:
            return 0
        return round(100 * self.processed / self.total)

    @computed_field(alias="isProcessing")
    @property
    def is_processing(self) -> bool:
        return self.in_progress
