"""Session store: authenticated identity and its persisted credential token."""
import json
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from storefront.errors import (
    APIError,
    AuthenticationError,
    ERROR_NOT_AUTHENTICATED,
    ERROR_TOKEN_MISSING,
)
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from storefront.services.api import StorefrontAPI, is_usable_token
from storefront.services.models import Identity
from storefront.storage import BaseStorage
from storefront.utils.validators import (
    validate_email,
    validate_name,
    validate_new_password,
    validate_password,
)

logger = get_logger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionStore:
    """
    Owns the authenticated identity lifecycle.

    State machine:
        LOADING --initialize()--> AUTHENTICATED | UNAUTHENTICATED
        UNAUTHENTICATED --login()/register()--> AUTHENTICATED
        AUTHENTICATED --logout()/expire()--> UNAUTHENTICATED

    Token and identity are always set and cleared together. The current token
    is pushed into the API client's auth hook so every request carries it.
    """

    def __init__(self, storage: BaseStorage, api: StorefrontAPI):
        self.storage = storage
        self.api = api
        self._state = SessionState.LOADING
        self._identity: Optional[Identity] = None
        self._token: Optional[str] = None

    # ==================== READ ACCESSORS ====================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self._identity is not None and self._identity.is_admin

    # ==================== LIFECYCLE ====================

    async def initialize(self) -> SessionState:
        """Probe storage for a persisted {identity, token} pair."""
        keys = self.storage.keys
        try:
            raw_user = await self.storage.get(keys.user)
            token = await self.storage.get(keys.token)
        except Exception as e:
            logger.error(f"Failed to read session from storage: {e}")
            self._clear()
            return self._state

        if not raw_user or not is_usable_token(token):
            if raw_user or token:
                logger.info("Discarding partial persisted session")
                await self._purge()
            self._clear()
            return self._state

        try:
            identity = Identity.model_validate(json.loads(raw_user))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"Corrupted persisted user record, logging out: {e}")
            await self._purge()
            self._clear()
            return self._state

        self._set_authenticated(identity, token)
        logger.debug(f"Session restored for user {sanitize_id_for_logging(identity.id)}")
        return self._state

    async def login(self, email: str, password: str) -> Identity:
        """Authenticate with email and password; returns the identity."""
        email = validate_email(email)
        validate_password(password)

        data = await self.api.login(email, password)
        identity = await self._start_session(data)
        logger.info(f"User logged in: {sanitize_string_for_logging(email)}")
        return identity

    async def register(self, name: str, email: str, password: str) -> Identity:
        """Create an account and sign into it; returns the identity."""
        name = validate_name(name)
        email = validate_email(email)
        validate_new_password(password)

        data = await self.api.register(name, email, password)
        identity = await self._start_session(data)
        logger.info(f"User registered: {sanitize_string_for_logging(email)}")
        return identity

    async def logout(self) -> None:
        """Drop the session. State flips before any storage I/O."""
        self._clear()
        await self._purge()

    async def expire(self) -> None:
        """The API rejected our token; treat it as unrecoverable."""
        logger.warning("Session token rejected by API, purging credentials")
        await self.logout()

    async def update_profile(self, patch: dict[str, Any]) -> Identity:
        """Send a profile patch and merge the returned identity over the current one."""
        current = self._require_identity()
        patch = dict(patch)
        if "email" in patch:
            patch["email"] = validate_email(patch["email"])

        data = await self.api.update_profile(patch)
        identity = self._parse_identity({**current.to_dict(), **data})

        self._identity = identity
        await self._persist(identity=identity)
        return identity

    async def change_password(
        self, current_password: str, new_password: str, confirm_password: Optional[str] = None
    ) -> None:
        """Change the password. Token and identity are left untouched."""
        self._require_identity()
        validate_password(current_password)
        validate_new_password(new_password, confirm_password)

        await self.api.change_password(current_password, new_password)

    # ==================== INTERNALS ====================

    def _require_identity(self) -> Identity:
        if not self.is_authenticated or self._identity is None:
            raise AuthenticationError(ERROR_NOT_AUTHENTICATED)
        return self._identity

    @staticmethod
    def _parse_identity(data: dict[str, Any]) -> Identity:
        try:
            return Identity.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Malformed user record from API: {e}")
            raise APIError("Unexpected response from server") from e

    async def _start_session(self, data: dict[str, Any]) -> Identity:
        data = dict(data)
        token = data.pop("token", None)
        if not is_usable_token(token):
            raise AuthenticationError(ERROR_TOKEN_MISSING)

        identity = self._parse_identity(data)
        await self._persist(identity=identity, token=token)
        self._set_authenticated(identity, token)
        return identity

    def _set_authenticated(self, identity: Identity, token: str) -> None:
        self._identity = identity
        self._token = token
        self._state = SessionState.AUTHENTICATED
        self.api.set_token(token)

    def _clear(self) -> None:
        self._identity = None
        self._token = None
        self._state = SessionState.UNAUTHENTICATED
        self.api.set_token(None)

    async def _persist(self, identity: Identity, token: Optional[str] = None) -> None:
        keys = self.storage.keys
        try:
            if token is not None:
                await self.storage.set(keys.token, token)
            await self.storage.set(keys.user, json.dumps(identity.to_dict()))
        except Exception as e:
            logger.error(f"Failed to persist session: {e}")

    async def _purge(self) -> None:
        keys = self.storage.keys
        try:
            await self.storage.delete(keys.token, keys.user)
        except Exception as e:
            logger.error(f"Failed to purge persisted session: {e}")
