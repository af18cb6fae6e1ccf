"""User-facing notices and the helpers that derive them from errors.

All titles and descriptions shown to the user are defined here so the
routes, services and templates stay consistent.
"""
from dataclasses import asdict, dataclass

OFFLINE = {
    "title": "You're offline",
    "description": "Please check your internet connection and try again.",
    "banner": "Reconnect to refresh dining requests or join a table.",
    "join": "Reconnect to join a dining request.",
    "leave": "Reconnect to update your participation.",
    "create": "Reconnect to post a dining request.",
    "profile": "Reconnect to save your profile.",
}

ERRORS = {
    "LOADING_REQUESTS": ("Error loading requests", "Failed to load dining requests. Please try again."),
    "LOADING_HISTORY": ("Error loading history", "Failed to load your dining history. Please try again."),
    "LOADING_PROFILE": ("Error loading profile", "Failed to load your profile. Please try again."),
    "CREATING_REQUEST": ("Error creating request", "Failed to create dining request. Please try again."),
    "JOINING_REQUEST": ("Couldn't join", "Failed to join dining request. Please try again."),
    "LEAVING_REQUEST": ("Couldn't leave", "Failed to leave dining request. Please try again."),
    "SAVING_PROFILE": ("Error saving profile", "Failed to save your profile. Please try again."),
    "NETWORK": ("Network error", "Unable to connect to the server. Please check your connection."),
    "GENERIC": ("Something went wrong", "An unexpected error occurred. Please try again."),
}

SUCCESS = {
    "REQUEST_CREATED": ("Request created!", "Your dining request has been posted."),
    "JOINED_REQUEST": ("Joined!", "You've successfully joined this dining request."),
    "LEFT_REQUEST": ("Left request", "You've left this dining request."),
    "PROFILE_SAVED": ("Profile updated!", "Your preferences have been saved."),
}

# Reasons a join or leave is refused before the store is contacted
NOT_FOUND = "This dining request is no longer available."
OWN_REQUEST = "You can't join or leave your own request."
ALREADY_JOINED = "You've already joined this dining request."
NOT_JOINED = "You haven't joined this dining request."
REQUEST_FULL = "This dining request is already full."

NETWORK_ERROR_PATTERNS = (
    "network",
    "fetch",
    "connection",
    "timeout",
    "offline",
    "unable to open",
)


@dataclass(frozen=True)
class Notice:
    """A one-shot message for the user, the server-side toast."""
    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"

    def to_dict(self) -> dict:
        return asdict(self)


def is_network_error(error) -> bool:
    """Check whether an error looks like a connectivity failure."""
    if not error:
        return False
    message = (getattr(error, "message", None) or str(error)).lower()
    return any(pattern in message for pattern in NETWORK_ERROR_PATTERNS)


def error_message(error, fallback_key: str = "GENERIC") -> str:
    """Pick the description to show for an error.

    Connectivity failures get the network description, anything else its
    own message, and an empty error the fallback description.
    """
    if not error:
        return ERRORS[fallback_key][1]
    if is_network_error(error):
        return ERRORS["NETWORK"][1]
    return getattr(error, "message", None) or str(error) or ERRORS[fallback_key][1]


def error_title(key: str) -> str:
    return ERRORS[key][0]


def error_notice(key: str, error=None, description: str | None = None) -> Notice:
    """Destructive notice for the action identified by ``key``."""
    return Notice(
        title=error_title(key),
        description=description or error_message(error, key),
        variant="destructive",
    )


def success_notice(key: str) -> Notice:
    title, description = SUCCESS[key]
    return Notice(title=title, description=description)


def offline_notice(action: str | None = None) -> Notice:
    """Notice for an action refused because the store is unreachable."""
    return Notice(
        title=OFFLINE["title"],
        description=OFFLINE.get(action or "", OFFLINE["description"]),
        variant="destructive",
    )
