from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from .....db.models.auth import RefreshToken
from .....application.ports.token_repo import RefreshTokenRepository


class SqlRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, session: Session):
        self.session = session

    def create(self, user_id: str, token_hash: str, expires_at: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> RefreshToken:
        row = RefreshToken(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def get_active(self, user_id: str, token_hash: str) -> Optional[RefreshToken]:
        return self.session.exec(
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .where(RefreshToken.token_hash == token_hash)
            .where(RefreshToken.is_revoked == False)  # noqa: E712
        ).first()

    def revoke(self, user_id: str, token_hash: str) -> bool:
        row = self.get_active(user_id, token_hash)
        if not row:
            return False
        row.is_revoked = True
        row.revoked_at = datetime.utcnow()
        self.session.add(row)
        self.session.commit()
        return True

    def revoke_all(self, user_id: str) -> int:
        rows = self.session.exec(
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .where(RefreshToken.is_revoked == False)  # noqa: E712
        ).all()
        now = datetime.utcnow()
        for row in rows:
            row.is_revoked = True
            row.revoked_at = now
            self.session.add(row)
        self.session.commit()
        return len(rows)
