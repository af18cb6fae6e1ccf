"""Dining request routes: browse, create, join and leave."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from app.core.config import settings
from app.core.templates import render
from app.dining import messages
from app.dining.filters import ALL, filter_requests
from app.dining.forms import min_date_time_hint
from app.dining.service import (
    MutationResult,
    create_request,
    join_request,
    leave_request,
    load_browse,
    load_profile,
)
from app.dining.state import split_by_creator
from app.models.dining_request import BUDGETS, DIET_TYPES
from app.routes.deps import current_user, flash, get_online_status, get_store, wants_json
from app.store.repositories import DiningStore

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("", response_class=HTMLResponse)
async def browse(
    request: Request,
    q: str = "",
    diet: str = ALL,
    budget: str = ALL,
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """
    Display open dining requests.

    Requests are split into the user's own and everyone else's, after
    applying the search term and the diet and budget filters. When the
    data store is unreachable the page shows an offline banner and no
    requests.
    """
    result = load_browse(store, user_id, online, upcoming_only=settings.browse_upcoming_only)
    flash(request, result.notice)

    views = filter_requests(result.state.views(), search=q, diet=diet, budget=budget)
    mine, others = split_by_creator(views, user_id)

    return render(
        request,
        "browse.html",
        {
            "online": result.state.online,
            "load_failed": not result.ok,
            "my_requests": mine,
            "other_requests": others,
            "q": q,
            "diet": diet,
            "budget": budget,
            "diet_types": DIET_TYPES,
            "budgets": BUDGETS,
            "offline": messages.OFFLINE,
        },
    )


@router.get("/new", response_class=HTMLResponse)
async def new_request(
    request: Request,
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """
    Display the create-request form.

    Diet and budget default to the user's profile preferences.
    """
    profile, _ = load_profile(store, user_id, online)
    form = {
        "diet_type": profile.diet_preference,
        "budget": profile.budget_preference,
        "max_participants": str(settings.default_max_participants),
    }
    return _render_form(request, form, {})


@router.post("")
async def submit_request(
    request: Request,
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """
    Create a dining request from the submitted form.

    Invalid forms are re-rendered with field errors (422) without touching
    the store. On success redirects to the browse page.
    """
    form = {key: str(value) for key, value in (await request.form()).items()}
    result = create_request(store, user_id, form, online)

    if result.ok:
        flash(request, result.notice)
        return RedirectResponse("/requests", status_code=303)

    if result.notice:
        flash(request, result.notice)
    return _render_form(request, form, result.errors, status_code=422 if result.errors else 400)


@router.post("/{request_id}/join")
async def join(
    request_id: UUID,
    request: Request,
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """
    Join a dining request.

    Returns JSON with the updated count and control label when
    Accept: application/json is present (for AJAX), otherwise redirects
    to the browse page.
    """
    state, failed = _current_state(store, user_id, online, "JOINING_REQUEST")
    result = failed or join_request(store, state, request_id, online)
    return _mutation_response(request, request_id, result, read_failed=failed is not None)


@router.post("/{request_id}/leave")
async def leave(
    request_id: UUID,
    request: Request,
    user_id: str = Depends(current_user),
    store: DiningStore = Depends(get_store),
    online: bool = Depends(get_online_status),
):
    """
    Leave a joined dining request.

    Same response rules as join.
    """
    state, failed = _current_state(store, user_id, online, "LEAVING_REQUEST")
    result = failed or leave_request(store, state, request_id, online)
    return _mutation_response(request, request_id, result, read_failed=failed is not None)


def _current_state(store: DiningStore, user_id: str, online: bool, error_key: str):
    """State a join or leave applies to, plus a failed result if it could not be read."""
    # Join and leave may target requests that started after the page loaded
    loaded = load_browse(store, user_id, online, upcoming_only=False)
    if loaded.ok:
        return loaded.state, None
    notice = messages.error_notice(error_key, description=loaded.notice.description)
    return loaded.state, MutationResult(loaded.state, False, notice)


def _mutation_response(
    request: Request, request_id: UUID, result: MutationResult, read_failed: bool = False
):
    if not wants_json(request):
        flash(request, result.notice)
        return RedirectResponse("/requests", status_code=303)

    view = result.state.view(request_id)
    if result.ok:
        status_code = 200
    elif read_failed or not result.state.online:
        status_code = 503
    elif view is None:
        status_code = 404
    else:
        status_code = 409

    payload = {"success": result.ok, "request_id": str(request_id), "notice": result.notice.to_dict()}
    if view is not None:
        payload.update(
            {
                "joined": view.is_joined,
                "participant_count": view.participant_count,
                "spots_left": view.spots_left,
                "label": view.action_label,
            }
        )
    return JSONResponse(payload, status_code=status_code)


def _render_form(request: Request, form: dict, errors: dict, status_code: int = 200):
    return render(
        request,
        "create.html",
        {
            "form": form,
            "errors": errors,
            "min_date_time": min_date_time_hint(),
            "diet_types": DIET_TYPES,
            "budgets": BUDGETS,
            "max_choices": range(1, settings.max_participants_limit + 1),
        },
        status_code=status_code,
    )
