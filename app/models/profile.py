"""Profile model holding a user's display name and dining defaults."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.clock import utc_now
from app.models.dining_request import Budget, DietType


class Profile(SQLModel, table=True):
    """One profile per user, keyed by the user's identity.

    Created implicitly on the first save and updated by upsert afterwards.

    Attributes:
        id: The user identity this profile belongs to.
        full_name: Display name shown as the creator on request cards.
        diet_preference: Default diet for new requests.
        budget_preference: Default budget for new requests.
        updated_at: Time of the last save.
    """
    __tablename__ = "profiles"

    id: str = Field(primary_key=True)
    full_name: str | None = None
    diet_preference: str = Field(default="any")
    budget_preference: str = Field(default="moderate")
    updated_at: datetime = Field(default_factory=utc_now)


class ProfileUpdate(SQLModel):
    """Validated fields of the profile form."""
    full_name: str | None = None
    diet_preference: DietType = "any"
    budget_preference: Budget = "moderate"
