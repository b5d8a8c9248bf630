from sponsor_api.db.models.confirmed_sponsorship import ConfirmedSponsorship
from sponsor_api.db.models.issue import Issue
from sponsor_api.db.models.newsletter import Newsletter
from sponsor_api.db.models.sponsorship import Sponsorship
from sponsor_api.db.models.user import User

__all__ = ["User", "Newsletter", "Issue", "Sponsorship", "ConfirmedSponsorship"]
