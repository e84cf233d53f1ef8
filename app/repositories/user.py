"""User repository."""


from app.domain.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def find_by_id(self, user_id: str) -> User | None:
        return await self.get_by_id(user_id)
