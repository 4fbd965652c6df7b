from urllib.parse import urlsplit

from okta_auth.errors import ConfigurationError


class OktaApiUrls:
    AUTHN = "/api/v1/authn"


def normalize_domain(domain: str) -> str:
    """
    Turn an Okta domain into the root URL every request is built from.

    ``example.okta.com`` becomes ``https://example.okta.com``. An explicit
    http or https scheme is kept. Paths, queries and fragments are dropped.
    """
    domain = (domain or "").strip()
    if not domain:
        raise ConfigurationError("Okta domain can't be blank")

    if "://" not in domain:
        domain = f"https://{domain}"

    parts = urlsplit(domain)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Invalid Okta domain: {domain!r}")

    return f"{parts.scheme}://{parts.netloc}"
