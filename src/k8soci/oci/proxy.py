"""
Proxy registry substitution for resolved credentials.
"""

import dataclasses
from typing import Mapping, Optional

from k8soci.oci.reference import is_docker_hub
from k8soci.oci.types import NormalizedAuth


def find_proxy(server_address: str, proxy_map: Optional[Mapping[str, str]]) -> Optional[str]:
    """
    Find the proxy registry for a server address.

    An exact source match wins. Otherwise the first source that, like the
    address, is a Docker Hub alias is used, so naming one Hub host in the map
    redirects every Hub alias. Ties are broken by the map's iteration order.
    """
    if not proxy_map:
        return None

    if server_address in proxy_map:
        return proxy_map[server_address]

    if is_docker_hub(server_address):
        for source, proxy in proxy_map.items():
            if is_docker_hub(source):
                return proxy

    return None


def rewrite(auth: NormalizedAuth, proxy_map: Optional[Mapping[str, str]]) -> NormalizedAuth:
    """Return the auth record pointed at its proxy registry, if one is mapped"""
    proxy = find_proxy(auth.server_address, proxy_map)
    if proxy is None:
        return auth
    return dataclasses.replace(auth, server_address=proxy)
