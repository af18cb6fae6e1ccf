"""Profile routes for the user's name and dining defaults."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.templates import render
from app.dining.service import load_profile, save_profile
from app.models.dining_request import BUDGETS, DIET_TYPES
from app.routes.deps import current_user, flash, get_online_status, get_store
from app.store.repositories import DiningStore

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_class=HTMLResponse)
async def show_profile(
    request: Request,
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """Display the profile form, with defaults if nothing was saved yet."""
    profile, notice = load_profile(store, user_id, online)
    flash(request, notice)
    form = {
        "full_name": profile.full_name or "",
        "diet_preference": profile.diet_preference,
        "budget_preference": profile.budget_preference,
    }
    return _render_profile(request, form, {})


@router.post("")
async def update_profile(
    request: Request,
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """
    Save the profile form.

    The profile is created on the first save and overwritten afterwards.
    Redirects back to the profile page unless the form is invalid.
    """
    form = {key: str(value) for key, value in (await request.form()).items()}
    result = save_profile(store, user_id, form, online)
    flash(request, result.notice)

    if result.errors:
        return _render_profile(request, form, result.errors, status_code=422)
    return RedirectResponse("/profile", status_code=303)


def _render_profile(request: Request, form: dict, errors: dict, status_code: int = 200):
    return render(
        request,
        "profile.html",
        {"form": form, "errors": errors, "diet_types": DIET_TYPES, "budgets": BUDGETS},
        status_code=status_code,
    )
