"""Session sign-in routes.

Identity normally comes from the hosted auth provider. Locally the user
signs in with an email address, which becomes their user id.
"""
from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.templates import render

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/status")
async def auth_status(request: Request):
    """
    Check whether a user is signed in.

    Returns JSON with the authentication status and the signed-in user id.
    """
    user_id = request.session.get("user_id")
    return {"authenticated": bool(user_id), "user_id": user_id}


@router.get("/signin", response_class=HTMLResponse)
async def signin_form(request: Request):
    """Display the sign-in form, or go to browse if already signed in."""
    if request.session.get("user_id"):
        return RedirectResponse("/requests", status_code=303)
    return render(request, "signin.html", {"error": None})


@router.post("/signin")
async def signin(request: Request, email: str = Form("")):
    """Store the normalized email as the session's user id."""
    user_id = email.strip().lower()
    if "@" not in user_id:
        return render(
            request, "signin.html", {"error": "Enter a valid email address.", "email": email}, status_code=422
        )
    request.session["user_id"] = user_id
    return RedirectResponse("/requests", status_code=303)


@router.post("/signout")
async def signout(request: Request):
    request.session.clear()
    return RedirectResponse("/auth/signin", status_code=303)
