"""User, contact and follow schemas."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UserSummary(BaseModel):
    """Public user details."""

    user_id: int
    username: str
    userkey: str
    image: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserSearchResult(UserSummary):
    """Search hit, flagged when the user is already a contact."""

    email: str
    is_contact: bool


class UserSearchPage(BaseModel):
    count: int
    items: list[UserSearchResult]


class ContactResponse(BaseModel):
    contact_id: str
    username: str | None
    email: str | None
    image: str | None

    model_config = ConfigDict(from_attributes=True)


class ContactToggleResponse(BaseModel):
    is_contact: bool


class FollowToggleResponse(BaseModel):
    is_following: bool


class ProfileResponse(BaseModel):
    """The signed-in user's own account details."""

    user_id: int
    firstname: str
    lastname: str
    username: str
    userkey: str
    email: str
    image: str | None = None
    is_verified: bool

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateRequest(BaseModel):
    """Profile edit form. Only the submitted fields change."""

    firstname: str | None = Field(None, alias="Firstname")
    lastname: str | None = Field(None, alias="Lastname")
    username: str | None = Field(None, alias="Username")
    email: str | None = Field(None, alias="Email")
    image: str | None = Field(None, alias="Image", max_length=512)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _require_a_change(self) -> "ProfileUpdateRequest":
        if not self.model_fields_set:
            raise ValueError("Nothing to update")
        return self


class DeleteAccountRequest(BaseModel):
    """The account email, typed again to confirm deletion."""

    email: str = Field(..., alias="Email")

    model_config = ConfigDict(populate_by_name=True)
