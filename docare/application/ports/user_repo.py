from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from ...db.models.users import User, UserProfile


@dataclass
class UserQuery:
    search: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    offset: int = 0
    limit: int = 20


class UserRepository:
    def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        ...

    def add(self, user: User, profile: Optional[UserProfile] = None) -> User:
        ...

    def save(self, user: User) -> User:
        ...

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        ...

    def save_profile(self, profile: UserProfile) -> UserProfile:
        ...

    def list_providers(self, specialty: Optional[str] = None) -> List[Tuple[User, Optional[UserProfile]]]:
        ...

    def search(self, query: UserQuery) -> Tuple[List[User], int]:
        ...

    def count(self, role: Optional[str] = None, status: Optional[str] = None, created_after: Optional[datetime] = None) -> int:
        ...

    def recent(self, limit: int = 10) -> List[User]:
        ...
