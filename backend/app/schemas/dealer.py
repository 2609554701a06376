from datetime import datetime

from pydantic import BaseModel, Field

from app.models.dealer import DealerStatus


class DealerCreate(BaseModel):
    code: str = Field(..., min_length=2, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    status: DealerStatus = DealerStatus.PENDING


class DealerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    status: DealerStatus | None = None


class DealerOut(BaseModel):
    id: str
    code: str
    name: str
    status: DealerStatus
    created_at: datetime

    model_config = {"from_attributes": True}
