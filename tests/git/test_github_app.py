import pytest
from unittest.mock import MagicMock

import httpx
import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from k8soci.exceptions import AuthExchangeError
from k8soci.git.github_app import create_app_jwt, exchange_installation_token


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def private_pem(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


def fake_client(mocker, response=None, raise_exc=None):
    client = MagicMock()
    if raise_exc:
        client.post.side_effect = raise_exc
    else:
        client.post.return_value = response

    httpx_client = MagicMock()
    httpx_client.__enter__.return_value = client
    httpx_client.__exit__.return_value = None

    mocker.patch("k8soci.git.github_app.httpx.Client", return_value=httpx_client)
    return client


def fake_response(status_code, json_data=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data or {}
    return response


def test_create_app_jwt_claims(rsa_key, private_pem):
    token = create_app_jwt("12345", private_pem, now=1_000_000)

    claims = jwt.decode(
        token,
        rsa_key.public_key(),
        algorithms=["RS256"],
        options={"verify_exp": False, "verify_iat": False},
    )
    assert claims == {"iat": 999_940, "exp": 1_000_540, "iss": "12345"}


def test_create_app_jwt_bad_key():
    with pytest.raises(AuthExchangeError):
        create_app_jwt("1", "not a pem key")


def test_exchange_success(mocker, private_pem):
    client = fake_client(mocker, fake_response(201, {"token": "ghs_abc"}))

    token = exchange_installation_token("1", "42", private_pem)

    assert token == "ghs_abc"
    url = client.post.call_args[0][0]
    assert url == "https://api.github.com/app/installations/42/access_tokens"
    headers = client.post.call_args[1]["headers"]
    assert headers["Authorization"].startswith("Bearer ")
    assert client.post.call_args[1]["timeout"] == 15.0


def test_exchange_custom_api_url(mocker, private_pem):
    client = fake_client(mocker, fake_response(201, {"token": "t"}))

    exchange_installation_token("1", "42", private_pem, api_url="https://ghe.example.com/api/v3/")

    assert client.post.call_args[0][0] == (
        "https://ghe.example.com/api/v3/app/installations/42/access_tokens"
    )


def test_exchange_network_error(mocker, private_pem):
    fake_client(mocker, raise_exc=httpx.ConnectError("boom"))

    with pytest.raises(AuthExchangeError):
        exchange_installation_token("1", "42", private_pem)


def test_exchange_rejected(mocker, private_pem):
    fake_client(mocker, fake_response(401))

    with pytest.raises(AuthExchangeError) as exc:
        exchange_installation_token("1", "42", private_pem)

    assert "401" in str(exc.value)


def test_exchange_missing_token(mocker, private_pem):
    fake_client(mocker, fake_response(201, {}))

    with pytest.raises(AuthExchangeError):
        exchange_installation_token("1", "42", private_pem)


@pytest.mark.parametrize("body", [["ghs_abc"], "ghs_abc", 201])
def test_exchange_non_object_body(mocker, private_pem, body):
    fake_client(mocker, fake_response(201, body))

    with pytest.raises(AuthExchangeError):
        exchange_installation_token("1", "42", private_pem)


def test_exchange_invalid_json_body(mocker, private_pem):
    response = fake_response(201)
    response.json.side_effect = ValueError("not json")
    fake_client(mocker, response)

    with pytest.raises(AuthExchangeError):
        exchange_installation_token("1", "42", private_pem)


def test_exchange_logs_api_call(mocker, private_pem):
    fake_client(mocker, fake_response(201, {"token": "t"}))
    log_api_call = mocker.patch("k8soci.git.github_app.log_api_call")

    exchange_installation_token("1", "42", private_pem)

    log_api_call.assert_called_once()
    assert log_api_call.call_args[1]["status_code"] == 201
