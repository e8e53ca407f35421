from k8soci.oci.proxy import find_proxy, rewrite
from k8soci.oci.types import NormalizedAuth


def auth(address):
    return NormalizedAuth(username="u", password="p", server_address=address)


def test_rewrite_exact_match():
    result = rewrite(auth("quay.io"), {"quay.io": "quay-mirror.internal"})

    assert result.server_address == "quay-mirror.internal"
    assert result.username == "u"
    assert result.password == "p"


def test_rewrite_hub_alias_equivalence():
    result = rewrite(
        auth("https://index.docker.io/v1/"), {"registry-1.docker.io": "mirror.internal"}
    )

    assert result.server_address == "mirror.internal"


def test_rewrite_no_match_returns_same_record():
    original = auth("ghcr.io")

    assert rewrite(original, {"quay.io": "mirror"}) is original


def test_rewrite_without_map():
    original = auth("ghcr.io")

    assert rewrite(original, None) is original
    assert rewrite(original, {}) is original


def test_rewrite_non_hub_address_ignores_hub_rules():
    original = auth("quay.io")

    assert rewrite(original, {"docker.io": "mirror"}) is original


def test_exact_match_wins_over_alias_match():
    proxy_map = {
        "docker.io": "alias-mirror",
        "https://index.docker.io/v1/": "exact-mirror",
    }

    assert find_proxy("https://index.docker.io/v1/", proxy_map) == "exact-mirror"


def test_first_alias_rule_in_map_order_wins():
    proxy_map = {"docker.io": "first", "index.docker.io": "second"}

    assert find_proxy("registry-1.docker.io", proxy_map) == "first"


def test_rewrite_is_idempotent():
    proxy_map = {"registry-1.docker.io": "mirror.internal", "quay.io": "quay-mirror"}
    for address in ("https://index.docker.io/v1/", "quay.io", "ghcr.io"):
        once = rewrite(auth(address), proxy_map)

        assert rewrite(once, proxy_map) == once


def test_rewrite_applies_at_most_one_substitution():
    proxy_map = {"quay.io": "docker.io", "docker.io": "mirror"}

    assert rewrite(auth("quay.io"), proxy_map).server_address == "docker.io"
