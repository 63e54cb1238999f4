"""Authentication session controller."""

import logfire

from atpark.domain.error import NotAuthenticatedError, ValidationError
from atpark.domain.model.auth import AuthState, AuthStatus
from atpark.domain.model.user import User
from atpark.domain.service import SessionService
from atpark.domain.value import Failure, Result, Success


class AuthSessionController:
    """Exposes a tri-state authentication status for access gating."""

    def __init__(self, session_service: SessionService) -> None:
        """Initialize auth controller.

        Args:
            session_service: Session owner
        """
        self.session_service = session_service
        self._state = AuthState()

    @property
    def state(self) -> AuthState:
        """Current authentication snapshot."""
        return self._state

    async def start(self) -> AuthState:
        """Resolve the initial status from the existing session, if any.

        A profile fetch failure leaves the user unauthenticated without
        touching the stored session.
        """
        with logfire.span("auth_controller.start"):
            did = self.session_service.get_did()
            if did is None:
                self._state = AuthState(status=AuthStatus.UNAUTHENTICATED, is_loading=False)
                return self._state

            result = await self.session_service.get_profile(did)
            if isinstance(result, Success):
                self._state = AuthState(
                    status=AuthStatus.AUTHENTICATED,
                    user=result.data,
                    is_loading=False,
                )
            else:
                logfire.warn("Could not restore session profile", did=did, error=result.error)
                self._state = AuthState(status=AuthStatus.UNAUTHENTICATED, is_loading=False)
            return self._state

    async def login(self, identifier: str, password: str) -> Result[User]:
        """Log in and enrich the user with the profile.

        Profile enrichment is best effort: if it fails, login still succeeds
        with the minimal user (did, handle).
        """
        if not identifier.strip() or not password:
            failure = Failure.from_error(
                ValidationError("Identifier and password are required")
            )
            self._state = self._state.model_copy(
                update={"is_loading": False, "error": failure.error}
            )
            return failure

        self._state = self._state.model_copy(update={"is_loading": True, "error": None})

        with logfire.span("auth_controller.login", identifier=identifier):
            result = await self.session_service.login(identifier.strip(), password)
            if not isinstance(result, Success):
                # A rejected attempt leaves an existing session in place
                if self.session_service.is_authenticated():
                    self._state = self._state.model_copy(
                        update={
                            "status": AuthStatus.AUTHENTICATED,
                            "is_loading": False,
                            "error": result.error,
                        }
                    )
                else:
                    self._state = AuthState(
                        status=AuthStatus.UNAUTHENTICATED,
                        is_loading=False,
                        error=result.error,
                    )
                return result

            user = result.data
            profile = await self.session_service.get_profile(user.did)
            if isinstance(profile, Success):
                user = profile.data
            else:
                logfire.warn(
                    "Profile enrichment failed, continuing with minimal user",
                    did=user.did,
                    error=profile.error,
                )

            self._state = AuthState(
                status=AuthStatus.AUTHENTICATED, user=user, is_loading=False
            )
            return Success(data=user)

    async def logout(self) -> None:
        """Log out. Always ends unauthenticated."""
        with logfire.span("auth_controller.logout"):
            await self.session_service.logout()
        self._state = AuthState(status=AuthStatus.UNAUTHENTICATED, is_loading=False)

    async def refresh_profile(self) -> Result[User]:
        """Re-fetch the current user's profile."""
        did = self.session_service.get_did()
        if did is None:
            self._state = AuthState(status=AuthStatus.UNAUTHENTICATED, is_loading=False)
            return Failure.from_error(NotAuthenticatedError())

        result = await self.session_service.get_profile(did)
        if isinstance(result, Success):
            self._state = self._state.model_copy(update={"user": result.data})
        return result
