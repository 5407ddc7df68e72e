from __future__ import annotations

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError
from botocore.stub import Stubber

from crm.core.errors import ProviderRejected, ProviderUnavailable
from crm.services.identity_provider import CognitoIdentityProviderGateway, to_provider_attributes


POOL = "ap-southeast-1_TestPool"


@pytest.fixture()
def cognito():
    client = boto3.client(
        "cognito-idp",
        region_name="ap-southeast-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def test_create_user_returns_subject(cognito):
    client, stubber = cognito
    stubber.add_response(
        "admin_create_user",
        {"User": {"Username": "a@bank.test", "Attributes": [{"Name": "sub", "Value": "9f1c"}]}},
        {
            "UserPoolId": POOL,
            "Username": "a@bank.test",
            "TemporaryPassword": "Tmp-Passw0rd!",
            "UserAttributes": [
                {"Name": "email", "Value": "a@bank.test"},
                {"Name": "given_name", "Value": "Ann"},
            ],
            "MessageAction": "SUPPRESS",
        },
    )

    gateway = CognitoIdentityProviderGateway(POOL, client=client)
    user = gateway.create_user("a@bank.test", "Tmp-Passw0rd!", {"email": "a@bank.test", "given_name": "Ann"})

    assert user.subject == "9f1c"
    assert user.username == "a@bank.test"


def test_group_attribute_and_password_calls_are_keyed_by_email(cognito):
    client, stubber = cognito
    stubber.add_response(
        "admin_add_user_to_group", {}, {"UserPoolId": POOL, "Username": "a@bank.test", "GroupName": "Agent"}
    )
    stubber.add_response(
        "admin_update_user_attributes",
        {},
        {"UserPoolId": POOL, "Username": "a@bank.test", "UserAttributes": [{"Name": "family_name", "Value": "Ng"}]},
    )
    stubber.add_response(
        "admin_set_user_password",
        {},
        {"UserPoolId": POOL, "Username": "a@bank.test", "Password": "N3w-Passw0rd!", "Permanent": True},
    )

    gateway = CognitoIdentityProviderGateway(POOL, client=client)
    gateway.add_user_to_group("a@bank.test", "Agent")
    gateway.update_user_attributes("a@bank.test", {"family_name": "Ng"})
    gateway.set_user_password("a@bank.test", "N3w-Passw0rd!")


@pytest.mark.parametrize("code", ["UsernameExistsException", "InvalidPasswordException", "UserNotFoundException"])
def test_client_rejections_map_to_provider_rejected(cognito, code):
    client, stubber = cognito
    stubber.add_client_error("admin_add_user_to_group", service_error_code=code, http_status_code=400)

    with pytest.raises(ProviderRejected):
        CognitoIdentityProviderGateway(POOL, client=client).add_user_to_group("a@bank.test", "Agent")


def test_throttling_maps_to_provider_unavailable(cognito):
    client, stubber = cognito
    stubber.add_client_error(
        "admin_update_user_attributes", service_error_code="TooManyRequestsException", http_status_code=429
    )

    with pytest.raises(ProviderUnavailable):
        CognitoIdentityProviderGateway(POOL, client=client).update_user_attributes("a@bank.test", {"email": "b@x.io"})


def test_connection_errors_map_to_provider_unavailable():
    class _Unreachable:
        def admin_set_user_password(self, **kwargs):
            raise EndpointConnectionError(endpoint_url="https://cognito-idp.invalid")

    with pytest.raises(ProviderUnavailable):
        CognitoIdentityProviderGateway(POOL, client=_Unreachable()).set_user_password("a@bank.test", "x" * 12)


def test_local_fields_are_renamed_for_the_provider():
    assert to_provider_attributes({"first_name": "Ann", "last_name": None, "email": "a@bank.test"}) == {
        "given_name": "Ann",
        "email": "a@bank.test",
    }
