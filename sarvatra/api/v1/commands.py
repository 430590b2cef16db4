"""Published AI commands visible to approved users."""

from fastapi import APIRouter

from sarvatra.api.deps import CurrentUser, StoreDep
from sarvatra.schemas.command import CommandsListResponse
from sarvatra.services.commands import list_published_commands

router = APIRouter()


@router.get("", response_model=CommandsListResponse)
def get_commands(_user: CurrentUser, store: StoreDep) -> CommandsListResponse:
    return CommandsListResponse(commands=list_published_commands(store))
