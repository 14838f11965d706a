"""Tests for UrlBuilder — pure (base URL, protocol, shortcode) → links."""

import pytest

from buildshare.core.url_builder import UrlBuilder


def test_links_for_shortcode():
    urls = UrlBuilder("https://mids.app", "mrb")
    assert urls.download_url("aB3") == "https://mids.app/build/download/aB3"
    assert urls.image_url("aB3") == "https://mids.app/build/image/aB3.png"
    assert urls.schema_url("aB3") == "mrb://aB3"


def test_base_path_query_and_trailing_slash_are_dropped():
    urls = UrlBuilder("http://localhost:8000/app/?x=1#frag", "mrb://")
    assert urls.download_url("z") == "http://localhost:8000/build/download/z"
    assert urls.schema_url("z") == "mrb://z"


def test_same_inputs_same_outputs():
    a = UrlBuilder("https://mids.app", "mrb")
    b = UrlBuilder("https://mids.app", "mrb")
    assert a.image_url("x1") == b.image_url("x1")


@pytest.mark.parametrize("base_url", ["", "mids.app", "/relative/path"])
def test_invalid_base_url_rejected(base_url):
    with pytest.raises(ValueError):
        UrlBuilder(base_url, "mrb")


def test_missing_protocol_rejected():
    with pytest.raises(ValueError):
        UrlBuilder("https://mids.app", "")
