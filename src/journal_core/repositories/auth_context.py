"""Abstract contract for the current authenticated session."""

from abc import ABC, abstractmethod

from journal_core.models.errors import UnauthenticatedError


class AuthContext(ABC):
    """Gives access to the identity of the signed-in user, if any."""

    @abstractmethod
    def current_user_id(self) -> str | None:
        """Return the signed-in user's id, or None without a session."""

    def require_user_id(self) -> str:
        """Return the signed-in user's id.

        Raises:
            UnauthenticatedError: If there is no session
        """
        user_id = self.current_user_id()
        if not user_id:
            raise UnauthenticatedError()
        return user_id
