from datetime import datetime
from typing import Annotated

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field
from pymongo.errors import ConnectionFailure, DuplicateKeyError

from auth import errors
from auth.errors import AuthError
from auth.passwords import hash_password, verify_password
from auth.provider import AuthBackend
from model.record import utcnow


class Credential(Document):
    email: Annotated[str, Indexed(unique=True)]
    password_hash: str
    disabled: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "credentials"


class MongoAuthBackend(AuthBackend):
    """Credentials kept in their own collection, apart from the `users` documents."""

    async def create_user(self, email: str, password: str) -> str:
        credential = Credential(email=email, password_hash=hash_password(password))
        try:
            await credential.insert()
        except DuplicateKeyError:
            raise AuthError(errors.EMAIL_IN_USE)
        except ConnectionFailure as e:
            raise AuthError(errors.NETWORK_REQUEST_FAILED, str(e))
        return str(credential.id)

    async def verify(self, email: str, password: str) -> str:
        try:
            credential = await Credential.find_one(Credential.email == email)
        except ConnectionFailure as e:
            raise AuthError(errors.NETWORK_REQUEST_FAILED, str(e))
        if credential is None:
            raise AuthError(errors.USER_NOT_FOUND)
        if credential.disabled:
            raise AuthError(errors.USER_DISABLED)
        if not verify_password(password, credential.password_hash):
            raise AuthError(errors.WRONG_PASSWORD)
        return str(credential.id)

    async def delete_user(self, uid: str) -> None:
        credential = await Credential.get(PydanticObjectId(uid))
        if credential is None:
            raise AuthError(errors.USER_NOT_FOUND)
        await credential.delete()
