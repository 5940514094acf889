from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    uid: str
    email: str | None = None
    display_name: str | None = None
    company: str | None = None
    role: str | None = None
    country: str | None = None
    photo_url: str | None = None


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(None, max_length=100)
    company: str | None = Field(None, max_length=100)
    role: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    photo_url: str | None = Field(None, max_length=512_000)  # data URLs allowed
