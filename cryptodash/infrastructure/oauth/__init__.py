from .google import SCOPES, GoogleOAuthProvider

__all__ = ["SCOPES", "GoogleOAuthProvider"]
