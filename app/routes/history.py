"""History route listing requests the user created or joined."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from app.core.templates import render
from app.dining.service import load_history
from app.routes.deps import current_user, flash, get_online_status, get_store
from app.store.repositories import DiningStore

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_class=HTMLResponse)
async def history(
    request: Request,
    tab: str = "created",
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """
    Display the user's dining history.

    Two tabs: requests the user created and requests they joined, both
    newest first and including closed requests.
    """
    result, notice = load_history(store, user_id, online)
    flash(request, notice)

    return render(
        request,
        "history.html",
        {
            "tab": "joined" if tab == "joined" else "created",
            "created": result.created,
            "joined": result.joined,
            "online": online,
        },
    )
