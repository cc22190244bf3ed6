from typing import Any, Optional

from .errors import MissingCredentialsError, StoreNotConfiguredError
from .store import SurveyStore


class AuthGateway:
    """Thin pass-through to Supabase sign-up / sign-in."""

    def __init__(self, store: Optional[SurveyStore]):
        self.store = store

    def _check(self, email: Any, password: Any) -> SurveyStore:
        if self.store is None:
            raise StoreNotConfiguredError()
        if not email or not password:
            raise MissingCredentialsError()
        return self.store

    def register(self, email: Any, password: Any) -> Any:
        return self._check(email, password).sign_up(email, password)

    def login(self, email: Any, password: Any) -> Any:
        return self._check(email, password).sign_in(email, password)
