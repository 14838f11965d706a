"""URL Builder — pure construction of resource links for a shortcode.

Invariants:
    - Output depends only on (base_url, protocol, shortcode); no IO, no globals
    - download/image URLs replace the base URL's path; query and fragment dropped
    - schema URL uses the desktop client's custom protocol
"""

from urllib.parse import quote, urlsplit, urlunsplit


class UrlBuilder:
    """Builds absolute URLs for build downloads, images, and schema links."""

    def __init__(self, base_url: str, protocol: str):
        if not base_url:
            raise ValueError("Base URL must be configured.")
        if not protocol:
            raise ValueError("Protocol must be configured.")
        parts = urlsplit(base_url)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Base URL must be absolute: {base_url!r}")
        self._scheme = parts.scheme
        self._netloc = parts.netloc
        self._protocol = protocol.removesuffix("://")

    def _absolute(self, path: str) -> str:
        return urlunsplit((self._scheme, self._netloc, path, "", ""))

    def download_url(self, shortcode: str) -> str:
        return self._absolute(f"/build/download/{quote(shortcode)}")

    def image_url(self, shortcode: str) -> str:
        return self._absolute(f"/build/image/{quote(shortcode)}.png")

    def schema_url(self, shortcode: str) -> str:
        return f"{self._protocol}://{quote(shortcode)}"
