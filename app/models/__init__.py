from app.models.dining_request import DiningRequest, DiningRequestCreate
from app.models.participant import Participant
from app.models.profile import Profile, ProfileUpdate

__all__ = ["DiningRequest", "DiningRequestCreate", "Participant", "Profile", "ProfileUpdate"]
