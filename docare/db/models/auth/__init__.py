from .refresh_token import RefreshToken

__all__ = ["RefreshToken"]
