from portfolio_api.domains.identity.entities import GUEST_USER_ID, Subject, User, subject_id
from portfolio_api.domains.identity.schemas import UserLogin, UserOut, LoginResponse, VerifyResponse

__all__ = [
    "GUEST_USER_ID", "Subject", "User", "subject_id",
    "UserLogin", "UserOut", "LoginResponse", "VerifyResponse"
]
