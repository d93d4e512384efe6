"""
GitHub account linking.

This module implements the OAuth device flow used to obtain an access
token and the profile lookup used to show who is logged in.

Example:
    ```python
    from git_helper.github import DeviceFlowAuthenticator, ProfileResolver

    auth = DeviceFlowAuthenticator(client_id="Iv1.xxxx")
    code = await auth.initiate()
    print(f"Visit {code.verification_uri} and enter {code.user_code}")
    token = await auth.poll_for_token(code.device_code, code.interval, code.expires_in)

    profile = await ProfileResolver().fetch_profile(token)
    print(profile.display_name)
    ```
"""

from git_helper.github.device_flow import DEFAULT_SCOPES, DeviceFlowAuthenticator
from git_helper.github.exceptions import (
    AccessDenied,
    AuthInitiationError,
    DeviceFlowCancelled,
    DeviceFlowError,
    GitHubError,
    ProfileFetchError,
    TokenExpired,
    UnknownAuthError,
)
from git_helper.github.models import (
    DeviceCodeResponse,
    DeviceFlowState,
    DeviceFlowStatus,
    Organization,
    ProfileSummary,
)
from git_helper.github.profile import ProfileResolver

__all__ = [
    # Main classes
    "DeviceFlowAuthenticator",
    "ProfileResolver",
    "DEFAULT_SCOPES",
    # Models
    "DeviceCodeResponse",
    "DeviceFlowState",
    "DeviceFlowStatus",
    "Organization",
    "ProfileSummary",
    # Exceptions
    "GitHubError",
    "AuthInitiationError",
    "DeviceFlowError",
    "TokenExpired",
    "AccessDenied",
    "UnknownAuthError",
    "DeviceFlowCancelled",
    "ProfileFetchError",
]
