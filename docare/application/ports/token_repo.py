from datetime import datetime
from typing import Optional

from ...db.models.auth import RefreshToken


class RefreshTokenRepository:
    def create(self, user_id: str, token_hash: str, expires_at: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> RefreshToken:
        ...

    def get_active(self, user_id: str, token_hash: str) -> Optional[RefreshToken]:
        ...

    def revoke(self, user_id: str, token_hash: str) -> bool:
        ...

    def revoke_all(self, user_id: str) -> int:
        ...
