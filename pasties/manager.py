"""
Paste lifecycle manager.

Every operation follows the same pattern: validate input, resolve defaults,
check preconditions against storage, mutate storage, return a client view.
The manager holds no state beyond its storage handle and clock, so one
instance is shared by all requests.
"""
import hmac
import logging
from typing import Callable

from pasties import utility
from pasties.database import (
    PasteDatabase,
    RecordNotFoundError,
    StorageConflictError,
    StorageError,
)
from pasties.errors import (
    IncorrectPasswordError,
    InvalidContentError,
    InvalidPasswordError,
    InvalidUrlError,
    PasteAlreadyExistsError,
    PasteNotFoundError,
    PasteStorageError,
)
from pasties.models import (
    Paste,
    PasteCreate,
    PasteCreated,
    PasteCredentials,
    PasteUpdate,
    PasteView,
)

logger = logging.getLogger(__name__)

MAX_URL_BYTES = 250
MAX_CONTENT_BYTES = 200_000
MAX_PASSWORD_BYTES = 250
TOKEN_LENGTH = 10


def validate_url(url: str) -> None:
    if not url or utility.byte_length(url) > MAX_URL_BYTES or not utility.is_url_safe(url):
        raise InvalidUrlError()


def validate_content(content: str) -> None:
    if not content or utility.byte_length(content) > MAX_CONTENT_BYTES:
        raise InvalidContentError()


def validate_password(password: str) -> None:
    if utility.byte_length(password) > MAX_PASSWORD_BYTES:
        raise InvalidPasswordError()


class PasteManager:
    """CRUD manager for pastes."""

    def __init__(
        self,
        database: PasteDatabase,
        clock: Callable[[], int] = utility.unix_timestamp,
    ):
        self.database = database
        self.clock = clock

    def create_paste(self, paste: PasteCreate) -> PasteCreated:
        """
        Create a paste, generating the url and password when they are empty.

        Returns:
            The effective url and the plaintext password. This is the only
            time the password is handed back.

        Raises:
            InvalidUrlError, InvalidContentError, InvalidPasswordError,
            PasteAlreadyExistsError, PasteStorageError
        """
        password = paste.password or utility.random_token(TOKEN_LENGTH)

        if paste.url:
            url = paste.url
            validate_url(url)
            if self._exists(url):
                raise PasteAlreadyExistsError()
        else:
            url = self._generate_url()

        validate_content(paste.content)
        validate_password(password)

        now = self.clock()
        record = Paste(
            id=utility.pseudoid(),
            url=url,
            password_hash=utility.hash_string(password),
            content=paste.content,
            date_published=now,
            date_edited=now,
        )

        try:
            self.database.insert(record)
        except StorageConflictError as e:
            raise PasteAlreadyExistsError() from e
        except StorageError as e:
            raise PasteStorageError(e) from e

        logger.info(f"Paste {url} created")
        return PasteCreated(url=url, password=password)

    def retrieve_paste(self, url: str) -> PasteView:
        """
        Fetch the client-facing view of a paste.

        Raises:
            PasteNotFoundError, PasteStorageError
        """
        return self._retrieve(url).to_view()

    def update_paste(self, credentials: PasteCredentials, update: PasteUpdate) -> None:
        """
        Replace the content, and optionally the url and password, of a paste.

        An empty ``update.url`` keeps the current url and an empty
        ``update.password`` keeps the authenticating password.

        Raises:
            PasteNotFoundError, IncorrectPasswordError, InvalidUrlError,
            PasteAlreadyExistsError, InvalidPasswordError,
            InvalidContentError, PasteStorageError
        """
        existing = self._authenticate(credentials)

        new_url = update.url or existing.url
        if new_url != existing.url:
            validate_url(new_url)
            if self._exists(new_url):
                raise PasteAlreadyExistsError()

        if update.password:
            validate_password(update.password)
        password_hash = utility.hash_string(update.password or credentials.password)

        validate_content(update.content)

        try:
            self.database.update(
                existing.url,
                content=update.content,
                password_hash=password_hash,
                date_edited=max(self.clock(), existing.date_published),
                new_url=new_url,
            )
        except StorageConflictError as e:
            raise PasteAlreadyExistsError() from e
        except StorageError as e:
            raise PasteStorageError(e) from e

        if new_url != existing.url:
            logger.info(f"Paste {existing.url} updated and moved to {new_url}")
        else:
            logger.info(f"Paste {existing.url} updated")

    def delete_paste(self, credentials: PasteCredentials) -> None:
        """
        Delete a paste after checking its password.

        Raises:
            PasteNotFoundError, IncorrectPasswordError, PasteStorageError
        """
        existing = self._authenticate(credentials)
        try:
            self.database.delete(existing.url)
        except StorageError as e:
            raise PasteStorageError(e) from e
        logger.info(f"Paste {existing.url} deleted")

    def _retrieve(self, url: str) -> Paste:
        try:
            return self.database.retrieve(url)
        except RecordNotFoundError as e:
            raise PasteNotFoundError() from e
        except StorageError as e:
            raise PasteStorageError(e) from e

    def _authenticate(self, credentials: PasteCredentials) -> Paste:
        existing = self._retrieve(credentials.url)
        supplied = utility.hash_string(credentials.password)
        if not hmac.compare_digest(supplied, existing.password_hash):
            logger.info(f"Rejected incorrect password for paste {credentials.url}")
            raise IncorrectPasswordError()
        return existing

    def _exists(self, url: str) -> bool:
        try:
            return self.database.exists(url)
        except StorageError as e:
            raise PasteStorageError(e) from e

    def _generate_url(self) -> str:
        # unbounded; collisions between 10 hex char tokens are rare
        while True:
            candidate = utility.random_token(TOKEN_LENGTH)
            if not self._exists(candidate):
                return candidate
            logger.debug(f"Generated url {candidate} is taken, retrying")
