import uuid
from typing import Dict, Tuple

from auth import errors
from auth.errors import AuthError
from auth.passwords import hash_password, verify_password
from auth.provider import AuthBackend


class MemoryAuthBackend(AuthBackend):
    users: Dict[str, Tuple[str, str]]

    def __init__(self):
        self.users = {}

    async def create_user(self, email: str, password: str) -> str:
        if email in self.users:
            raise AuthError(errors.EMAIL_IN_USE)
        uid = uuid.uuid4().hex
        self.users[email] = (uid, hash_password(password))
        return uid

    async def verify(self, email: str, password: str) -> str:
        if email not in self.users:
            raise AuthError(errors.USER_NOT_FOUND)
        uid, hashed = self.users[email]
        if not verify_password(password, hashed):
            raise AuthError(errors.WRONG_PASSWORD)
        return uid

    async def delete_user(self, uid: str) -> None:
        for email, (user_id, _) in list(self.users.items()):
            if user_id == uid:
                del self.users[email]
                return
        raise AuthError(errors.USER_NOT_FOUND)

    def has_user(self, email: str) -> bool:
        return email in self.users
