from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator
from typing import Dict, Optional

class RevenueEvent(BaseModel):
    """One revenue attribution record posted by the tracking script."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Strict types: "5" is not an amount and true is not a number
    channel: StrictStr = Field("", description="Marketing channel, e.g. 'email'")
    cta_id: StrictStr = Field("", validation_alias=AliasChoices("cta_id", "ctaId"))
    transaction_id: StrictStr = Field("", validation_alias=AliasChoices("transaction_id", "transactionId"))
    amount: StrictFloat = 0.0
    page: StrictStr = ""
    # A key mapped to None is kept: "present but null" differs from "absent"
    utm: Dict[str, Optional[StrictStr]] = Field(default_factory=dict)
    timestamp: StrictInt = Field(0, description="Client event time, ms since epoch")

    @field_validator("channel", "cta_id", "transaction_id", "page", mode="before")
    @classmethod
    def _null_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("amount", "timestamp", mode="before")
    @classmethod
    def _null_to_zero(cls, v):
        return 0 if v is None else v

    @field_validator("utm", mode="before")
    @classmethod
    def _null_utm(cls, v):
        return {} if v is None else v

    def campaign(self) -> Optional[str]:
        return self.utm.get("utm_campaign")
