"""Contact list and user search endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from deiwy.api.v1.dependencies import SessionDep, VerifiedUserDep
from deiwy.core.errors import NotFoundError
from deiwy.schemas.user import ContactResponse, ContactToggleResponse, UserSearchPage
from deiwy.services import contact_service

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("/", response_model=list[ContactResponse])
async def list_contacts(current_user: VerifiedUserDep, db: SessionDep) -> list[ContactResponse]:
    """Return the caller's saved contacts."""
    contacts = contact_service.list_contacts(db, current_user)
    return [ContactResponse.model_validate(contact) for contact in contacts]


@router.get("/search", response_model=UserSearchPage)
async def search_users(
    current_user: VerifiedUserDep,
    db: SessionDep,
    query: Annotated[str, Query(min_length=1, max_length=20)],
    page: Annotated[int, Query(ge=0)] = 0,
) -> UserSearchPage:
    """Search users by username prefix."""
    return contact_service.search_users(db, current_user, query, page)


@router.post(
    "/{username}",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_contact(username: str, current_user: VerifiedUserDep, db: SessionDep) -> ContactResponse:
    contact = contact_service.add_contact(db, current_user, username)
    return ContactResponse.model_validate(contact)


@router.delete("/{username}", response_model=ContactToggleResponse)
async def remove_contact(username: str, current_user: VerifiedUserDep, db: SessionDep) -> ContactToggleResponse:
    if not contact_service.remove_contact(db, current_user, username):
        raise NotFoundError("Contact not found.")
    return ContactToggleResponse(is_contact=False)
