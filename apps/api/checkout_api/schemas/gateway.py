from pydantic import BaseModel, ConfigDict, Field


class GatewayOrder(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    amount: int
    currency: str
    receipt: str | None = None
    status: str | None = None


class EmailReceipt(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
