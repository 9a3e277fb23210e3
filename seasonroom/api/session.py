"""Session endpoints."""
from fastapi import APIRouter, Depends

from seasonroom.deps import get_session, to_http_error
from seasonroom.schemas.common import TokenPair
from seasonroom.schemas.user import UserDetail
from seasonroom.services.crew_session import CrewSession

router = APIRouter(prefix="/session", tags=["session"])


@router.put("/tokens", status_code=204)
async def store_tokens(
    tokens: TokenPair,
    session: CrewSession = Depends(get_session),
):
    """
    Store the token pair obtained from social login.

    Args:
        tokens: Access and refresh token
        session: Current crew session
    """
    session.sign_in(tokens)


@router.delete("", status_code=204)
async def sign_out(session: CrewSession = Depends(get_session)):
    """Log out and forget the stored tokens."""
    session.sign_out()


@router.get("/me", response_model=UserDetail)
async def get_me(session: CrewSession = Depends(get_session)):
    """Get the signed-in user, including their crew."""
    try:
        return await session.get_user()
    except Exception as e:
        raise to_http_error(e)
