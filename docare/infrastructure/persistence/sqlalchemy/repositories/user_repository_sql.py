from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlmodel import Session, select

from .....db.models.users import User, UserProfile
from .....application.ports.user_repo import UserQuery, UserRepository


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email)).first()

    def add(self, user: User, profile: Optional[UserProfile] = None) -> User:
        self.session.add(user)
        if profile is not None:
            # Profile row references the user, flush the user first
            self.session.flush()
            profile.user_id = user.id
            self.session.add(profile)
        self.session.commit()
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.session.exec(select(UserProfile).where(UserProfile.user_id == user_id)).first()

    def save_profile(self, profile: UserProfile) -> UserProfile:
        profile.updated_at = datetime.utcnow()
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def list_providers(self, specialty: Optional[str] = None) -> List[Tuple[User, Optional[UserProfile]]]:
        stmt = (
            select(User, UserProfile)
            .join(UserProfile, UserProfile.user_id == User.id, isouter=True)
            .where(User.role == "provider")
            .where(User.status == "active")
        )
        if specialty:
            stmt = stmt.where(UserProfile.specialty == specialty)
        stmt = stmt.order_by(User.name)
        return [(u, p) for u, p in self.session.exec(stmt).all()]

    def search(self, query: UserQuery) -> Tuple[List[User], int]:
        stmt = select(User)
        if query.search:
            pattern = f"%{query.search}%"
            stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        if query.role:
            stmt = stmt.where(User.role == query.role)
        if query.status:
            stmt = stmt.where(User.status == query.status)
        total = self.session.exec(select(func.count()).select_from(stmt.subquery())).one()
        rows = self.session.exec(
            stmt.order_by(User.created_at.desc()).offset(query.offset).limit(query.limit)
        ).all()
        return list(rows), int(total)

    def count(self, role: Optional[str] = None, status: Optional[str] = None, created_after: Optional[datetime] = None) -> int:
        stmt = select(func.count()).select_from(User)
        if role:
            stmt = stmt.where(User.role == role)
        if status:
            stmt = stmt.where(User.status == status)
        if created_after:
            stmt = stmt.where(User.created_at >= created_after)
        return int(self.session.exec(stmt).one())

    def recent(self, limit: int = 10) -> List[User]:
        return list(self.session.exec(select(User).order_by(User.created_at.desc()).limit(limit)).all())
