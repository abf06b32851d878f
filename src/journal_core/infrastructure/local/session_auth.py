"""In-process session holder implementing AuthContext."""

from aws_lambda_powertools import Logger

from journal_core.repositories.auth_context import AuthContext

logger = Logger(UTC=True)


class SessionAuthContext(AuthContext):
    """Holds the signed-in user's id for the lifetime of the process.

    The sign-in flow itself lives outside this package; it calls
    :meth:`sign_in` and :meth:`sign_out` as the session changes.
    """

    def __init__(self, user_id: str | None = None) -> None:
        self._user_id = user_id

    def current_user_id(self) -> str | None:
        return self._user_id

    def sign_in(self, user_id: str) -> None:
        logger.info("Session started", extra={"user_id": user_id})
        self._user_id = user_id

    def sign_out(self) -> None:
        logger.info("Session ended", extra={"user_id": self._user_id})
        self._user_id = None
