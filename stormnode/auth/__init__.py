from .auth_type import AuthType as AuthType
from .authorization_verifier import (
    FRESHNESS_WINDOW_MS as FRESHNESS_WINDOW_MS,
    AuthorizationVerifier as AuthorizationVerifier,
    epoch_ms as epoch_ms,
)
from .public_key import STORM_PUBLIC_KEY as STORM_PUBLIC_KEY
