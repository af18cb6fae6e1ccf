"""Validation of submitted create-request and profile forms.

Validation runs before any store call, so a form with missing required
fields never reaches the data store.
"""
from collections.abc import Mapping
from datetime import datetime, timedelta

from pydantic import ValidationError

from app.core.clock import as_utc, to_display, utc_now
from app.core.config import settings
from app.models import DiningRequestCreate, ProfileUpdate

REQUIRED_FIELDS = {
    "restaurant_name": "Restaurant name is required.",
    "location": "Location is required.",
    "date_time": "Date and time are required.",
}

FIELD_MESSAGES = {
    "diet_type": "Choose a diet preference.",
    "budget": "Choose a budget.",
    "diet_preference": "Choose a diet preference.",
    "budget_preference": "Choose a budget.",
    "max_participants": "Choose how many people can join.",
}


def _first_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        name = str(error["loc"][0]) if error["loc"] else "form"
        errors.setdefault(name, FIELD_MESSAGES.get(name, error["msg"]))
    return errors


def parse_date_time(raw: str) -> datetime | None:
    """Parse a datetime-local value into aware UTC, or None if malformed."""
    try:
        return as_utc(datetime.fromisoformat(raw.strip()))
    except ValueError:
        return None


def min_date_time_hint(now: datetime | None = None) -> str:
    """Earliest suggested start, formatted for a datetime-local input."""
    earliest = (now or utc_now()) + timedelta(minutes=settings.min_lead_minutes)
    return to_display(earliest).strftime("%Y-%m-%dT%H:%M")


def parse_request_form(
    form: Mapping[str, str], now: datetime | None = None
) -> tuple[DiningRequestCreate | None, dict[str, str]]:
    """Validate a create-request form.

    Returns the validated payload, or None and a field -> message mapping.
    """
    errors = {
        name: message
        for name, message in REQUIRED_FIELDS.items()
        if not (form.get(name) or "").strip()
    }

    date_time = None
    if "date_time" not in errors:
        date_time = parse_date_time(form["date_time"])
        if date_time is None:
            errors["date_time"] = "Enter a valid date and time."
        elif date_time <= (now or utc_now()):
            errors["date_time"] = "Pick a time in the future."

    max_participants = form.get("max_participants") or str(settings.default_max_participants)
    try:
        if not 1 <= int(max_participants) <= settings.max_participants_limit:
            errors["max_participants"] = (
                f"Between 1 and {settings.max_participants_limit} people can join."
            )
    except ValueError:
        errors["max_participants"] = FIELD_MESSAGES["max_participants"]

    if errors:
        return None, errors

    try:
        data = DiningRequestCreate.model_validate(
            {
                "restaurant_name": form.get("restaurant_name"),
                "location": form.get("location"),
                "date_time": date_time,
                "cuisine_type": form.get("cuisine_type"),
                "diet_type": form.get("diet_type") or "any",
                "budget": form.get("budget") or "moderate",
                "max_participants": max_participants,
                "description": form.get("description"),
            }
        )
    except ValidationError as e:
        return None, _first_errors(e)
    return data, {}


def parse_profile_form(form: Mapping[str, str]) -> tuple[ProfileUpdate | None, dict[str, str]]:
    """Validate the profile form. A blank name is stored as None."""
    try:
        data = ProfileUpdate.model_validate(
            {
                "full_name": (form.get("full_name") or "").strip() or None,
                "diet_preference": form.get("diet_preference") or "any",
                "budget_preference": form.get("budget_preference") or "moderate",
            }
        )
    except ValidationError as e:
        return None, _first_errors(e)
    return data, {}
