from fastapi import APIRouter, Depends, status

from src.api.runtime import AuthRuntime
from src.app.services.session_state import SessionSnapshot
from src.depends import get_runtime

router = APIRouter(tags=["Session"])


@router.get("/session", status_code=status.HTTP_200_OK, response_model=SessionSnapshot)
async def get_session(runtime: AuthRuntime = Depends(get_runtime)):
    """
    Current session: {user, is_loading, is_manager}

    is_manager is derived from the user's role on every read.
    """
    return runtime.state.snapshot()
