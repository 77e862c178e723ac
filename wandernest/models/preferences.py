from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: str  # "user" or "assistant"
    content: str


class UserPreferences(BaseModel):
    """Preference values shared by every view: language, currency and wishlist."""

    language: str = "English"
    currency: str = "USD"
    country: str | None = None
    wishlist: list[int] = Field(default_factory=list)
