"""Exception types shared by the store, auth and stats layers."""


class VeraError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreNotConfiguredError(VeraError):
    """Raised when Supabase credentials were never provided."""

    def __init__(self, message: str = "Supabase client not configured.") -> None:
        super().__init__(message)


class MissingCredentialsError(VeraError):
    """Raised when a sign-up or sign-in request lacks email or password."""

    def __init__(self, message: str = "Email and password are required.") -> None:
        super().__init__(message)


class StoreError(VeraError):
    """A query or auth call against the remote store failed."""


class ChannelError(StoreError):
    """The realtime change channel dropped (error, timeout or close)."""
