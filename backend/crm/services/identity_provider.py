"""Identity provider gateway (credentials and group membership).

The provider addresses users by email: the email is the provider username, so a
local email change must be pushed to the provider in the same request. Every
botocore failure is converted into the service error taxonomy:

- the provider refused the request (duplicate user, bad password, unknown user)
  -> ProviderRejected
- anything else (throttling, 5xx, connection problems) -> ProviderUnavailable
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from crm.core.errors import ProviderRejected, ProviderUnavailable
from crm.core.settings import Settings, get_settings


logger = logging.getLogger(__name__)

SUBJECT_ATTRIBUTE = "sub"

# Local field name -> provider attribute name.
ATTRIBUTE_NAMES: dict[str, str] = {
    "email": "email",
    "first_name": "given_name",
    "last_name": "family_name",
}

REJECTION_CODES = frozenset(
    {
        "UsernameExistsException",
        "AliasExistsException",
        "InvalidPasswordException",
        "InvalidParameterException",
        "UserNotFoundException",
        "ResourceNotFoundException",
        "NotAuthorizedException",
    }
)


@dataclass(frozen=True, slots=True)
class ProviderUser:
    """User record as returned by the provider on creation."""

    username: str
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def subject(self) -> Optional[str]:
        return self.attributes.get(SUBJECT_ATTRIBUTE)


class IdentityProviderGateway(Protocol):
    def create_user(self, username: str, temporary_password: str, attributes: Mapping[str, str]) -> ProviderUser: ...

    def add_user_to_group(self, username: str, group_name: str) -> None: ...

    def update_user_attributes(self, username: str, attributes: Mapping[str, str]) -> None: ...

    def set_user_password(self, username: str, password: str) -> None: ...


def to_provider_attributes(fields: Mapping[str, Optional[str]]) -> dict[str, str]:
    """Rename local fields to provider attribute names, dropping unset values."""
    return {ATTRIBUTE_NAMES[k]: v for k, v in fields.items() if k in ATTRIBUTE_NAMES and v is not None}


def _attribute_list(attributes: Mapping[str, str]) -> list[dict[str, str]]:
    return [{"Name": name, "Value": value} for name, value in attributes.items()]


class CognitoIdentityProviderGateway:
    """Cognito user-pool admin API wrapper."""

    def __init__(
        self,
        user_pool_id: str,
        *,
        client: Any = None,
        region: Optional[str] = None,
    ) -> None:
        self.user_pool_id = user_pool_id
        self.region = region
        self._client = client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CognitoIdentityProviderGateway":
        settings = settings or get_settings()
        return cls(settings.require_user_pool_id(), region=settings.aws_region)

    def _get_client(self) -> Any:
        """Lazy-load the boto3 cognito-idp client."""
        if self._client is None:
            self._client = boto3.client("cognito-idp", region_name=self.region)
        return self._client

    def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        try:
            return getattr(self._get_client(), operation)(UserPoolId=self.user_pool_id, **kwargs)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            message = e.response.get("Error", {}).get("Message", "")
            if code in REJECTION_CODES:
                logger.warning("Identity provider rejected %s: %s", operation, code)
                raise ProviderRejected(f"Identity provider rejected {operation}: {code} {message}".strip()) from e
            logger.error("Identity provider error on %s: %s", operation, code)
            raise ProviderUnavailable(f"Identity provider failed on {operation}: {code}") from e
        except BotoCoreError as e:
            logger.error("Identity provider unreachable on %s: %s", operation, e)
            raise ProviderUnavailable(f"Identity provider unreachable on {operation}.") from e

    def create_user(self, username: str, temporary_password: str, attributes: Mapping[str, str]) -> ProviderUser:
        response = self._call(
            "admin_create_user",
            Username=username,
            TemporaryPassword=temporary_password,
            UserAttributes=_attribute_list(attributes),
            MessageAction="SUPPRESS",
        )
        user = response.get("User") or {}
        attrs = {a["Name"]: a.get("Value", "") for a in user.get("Attributes", [])}
        return ProviderUser(username=user.get("Username", username), attributes=attrs)

    def add_user_to_group(self, username: str, group_name: str) -> None:
        self._call("admin_add_user_to_group", Username=username, GroupName=group_name)

    def update_user_attributes(self, username: str, attributes: Mapping[str, str]) -> None:
        self._call("admin_update_user_attributes", Username=username, UserAttributes=_attribute_list(attributes))

    def set_user_password(self, username: str, password: str) -> None:
        self._call("admin_set_user_password", Username=username, Password=password, Permanent=True)
