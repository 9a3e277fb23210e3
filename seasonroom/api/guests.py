"""Guest endpoints."""
from fastapi import APIRouter, Depends

from seasonroom.deps import get_session, to_http_error
from seasonroom.schemas.reservation import GuestDetail, GuestInfo
from seasonroom.services.crew_session import CrewSession
from seasonroom.services.reservation_commands import validate_guest_info

router = APIRouter(prefix="/guests", tags=["guests"])


@router.post("", response_model=GuestDetail)
async def register_guest(guest: GuestInfo, session: CrewSession = Depends(get_session)):
    """Register a guest who can then be brought along on a reservation."""
    try:
        validate_guest_info(guest)
        return await session.client.register_guest(guest)
    except Exception as e:
        raise to_http_error(e)
