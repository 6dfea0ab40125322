# registre_backend/app/api/__init__.py
from .deps import oauth2_scheme, db_session, get_request_user

__all__ = ["oauth2_scheme", "db_session", "get_request_user"]
