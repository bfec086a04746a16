from fastapi import APIRouter, status
from fastapi.responses import Response

from finscope.core.cookies import clear_session_cookie

router = APIRouter()


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout() -> Response:
    """End the session by dropping its cookie."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response)
    return response
