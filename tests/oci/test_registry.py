import base64
import json

import pytest

from k8soci.constants import DEFAULT_AUTH_KEY
from k8soci.exceptions import DecodeError
from k8soci.oci.registry import resolve, resolve_first, resolve_with_pull_secret
from k8soci.oci.types import NormalizedAuth, RegistryImage, SecretFormat, SecretRecord


def secret(name, payload, fmt=SecretFormat.MODERN):
    if isinstance(payload, dict):
        payload = json.dumps(payload).encode("utf-8")
    return SecretRecord(name=name, format=fmt, raw_payload=payload)


def b64(value):
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def test_hub_scenario():
    pull_secret = secret(
        "regcred",
        {"auths": {"https://index.docker.io/v1/": {"username": "u", "password": "p"}}},
    )
    image = RegistryImage(image_id="docker://nginx:latest", pull_secrets=(pull_secret,))

    assert resolve(image) == [
        NormalizedAuth(username="u", password="p", server_address=DEFAULT_AUTH_KEY)
    ]


def test_empty_pull_secrets():
    assert resolve(RegistryImage(image_id="nginx")) == []
    assert resolve_first(RegistryImage(image_id="nginx")) is None


def test_unsupported_secret_is_skipped(modern_payload):
    unsupported = SecretRecord(
        name="opaque", format=None, raw_payload=b"", secret_type="Opaque"
    )
    image = RegistryImage(
        image_id="registry.example.com/app:1",
        pull_secrets=(unsupported, secret("regcred", modern_payload)),
    )

    result = resolve(image)

    assert [a.username for a in result] == ["robot"]


def test_malformed_secret_is_skipped_and_logged(mocker, modern_payload):
    logger = mocker.patch("k8soci.oci.registry.logger")
    image = RegistryImage(
        image_id="registry.example.com/app:1",
        pull_secrets=(secret("broken", b"{oops"), secret("regcred", modern_payload)),
    )

    result = resolve(image)

    assert len(result) == 1
    logger.warning.assert_called_once()
    assert "broken" in logger.warning.call_args[0][0]


def test_secret_without_matching_registry_contributes_nothing(legacy_payload):
    image = RegistryImage(
        image_id="ghcr.io/org/app:1",
        pull_secrets=(secret("quay", legacy_payload, SecretFormat.LEGACY),),
    )

    assert resolve(image) == []


def test_order_follows_pull_secrets():
    first = secret("first", {"auths": {"ghcr.io": {"auth": b64("one:1")}}})
    second = secret("second", {"ghcr.io": {"auth": b64("two:2")}}, SecretFormat.LEGACY)
    image = RegistryImage(image_id="ghcr.io/org/app:1", pull_secrets=(first, second))

    assert [a.username for a in resolve(image)] == ["one", "two"]
    assert resolve_first(image).username == "one"


def test_resolve_first_skips_failing_secrets():
    broken = secret("broken", b"not json")
    good = secret("good", {"auths": {"ghcr.io": {"auth": b64("ok:pw")}}})
    image = RegistryImage(image_id="ghcr.io/org/app", pull_secrets=(broken, good))

    assert resolve_first(image).username == "ok"


def test_invalid_image_reference_contributes_nothing(modern_payload):
    image = RegistryImage(image_id="NOT//valid", pull_secrets=(secret("regcred", modern_payload),))

    assert resolve(image) == []


def test_hub_entry_under_alias_key_matches():
    pull_secret = secret("hub", {"auths": {"docker.io": {"auth": b64("hub:pw")}}})
    image = RegistryImage(image_id="index.docker.io/library/redis:7", pull_secrets=(pull_secret,))

    result = resolve(image)

    assert result[0].username == "hub"
    assert result[0].server_address == "docker.io"


def test_entry_with_scheme_and_path_matches_host():
    pull_secret = secret("ghcr", {"auths": {"https://ghcr.io/v2/": {"auth": b64("g:h")}}})
    image = RegistryImage(image_id="ghcr.io/org/app:1", pull_secrets=(pull_secret,))

    assert resolve(image)[0].username == "g"


def test_resolve_applies_proxy_map():
    pull_secret = secret(
        "regcred",
        {"auths": {"https://index.docker.io/v1/": {"username": "u", "password": "p"}}},
    )
    image = RegistryImage(image_id="nginx", pull_secrets=(pull_secret,))

    result = resolve(image, {"registry-1.docker.io": "mirror.internal"})

    assert result[0].server_address == "mirror.internal"


def test_resolve_with_pull_secret_propagates_errors():
    image = RegistryImage(image_id="nginx")

    with pytest.raises(DecodeError):
        resolve_with_pull_secret(image, secret("broken", b"{"))


def test_resolve_with_pull_secret_missing_entry(modern_payload):
    image = RegistryImage(image_id="quay.io/org/app")

    assert resolve_with_pull_secret(image, secret("regcred", modern_payload)) is None


@pytest.mark.parametrize("bad_auth", ["été", 123, {"user": "u"}, "%%%"])
def test_bad_auth_value_does_not_hide_later_secrets(mocker, bad_auth):
    logger = mocker.patch("k8soci.oci.registry.logger")
    bad = secret("bad", {"auths": {"registry.example.com": {"auth": bad_auth}}})
    good = secret("good", {"auths": {"registry.example.com": {"auth": b64("u:p")}}})
    image = RegistryImage(image_id="registry.example.com/app:1", pull_secrets=(bad, good))

    result = resolve(image)

    assert [a.username for a in result] == ["u"]
    assert "bad" in logger.warning.call_args[0][0]


def test_auth_with_trailing_newline_resolves():
    pull_secret = secret(
        "regcred", {"auths": {"registry.example.com": {"auth": b64("u:p") + "\n"}}}
    )
    image = RegistryImage(image_id="registry.example.com/app:1", pull_secrets=(pull_secret,))

    assert resolve(image) == [
        NormalizedAuth(username="u", password="p", server_address="registry.example.com")
    ]
