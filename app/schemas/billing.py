from pydantic import BaseModel, Field


class CheckoutSessionRequest(BaseModel):
    price_id: str | None = Field(default=None, alias="priceId")

    class Config:
        populate_by_name = True
