from .user import User
from .profile import UserProfile
from .measurement import Measurement
from .revoked_token import RevokedToken

__all__ = [
    "User",
    "UserProfile",
    "Measurement",
    "RevokedToken",
]
