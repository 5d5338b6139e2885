from __future__ import annotations

from iconset.icons.outputs import OutputKind, classify_output, classify_outputs, extract_image_urls


class FileOutputLike:
    """Mimics a client file object whose str() is the delivery URL."""

    def __init__(self, url: str) -> None:
        self._url = url

    def __str__(self) -> str:
        return self._url


class HrefHolder:
    href = "https://cdn.example.com/icon-4.png"


class UrlAccessor:
    def url(self) -> str:
        return "https://cdn.example.com/should-not-be-called.png"


class BrokenStr:
    def __str__(self) -> str:
        raise RuntimeError("boom")


def test_mixed_outputs_extracted_in_order():
    raw = [
        "https://replicate.delivery/a/out-0.webp",
        {"url": "https://replicate.delivery/b/out-1.webp"},
        FileOutputLike("https://replicate.delivery/c/out-2.webp"),
        {},
    ]
    assert extract_image_urls(raw) == [
        "https://replicate.delivery/a/out-0.webp",
        "https://replicate.delivery/b/out-1.webp",
        "https://replicate.delivery/c/out-2.webp",
    ]
    kinds = [o.kind for o in classify_outputs(raw)]
    assert kinds == [
        OutputKind.PLAIN_URL,
        OutputKind.URL_BEARING_OBJECT,
        OutputKind.STRING_COERCIBLE,
        OutputKind.UNRECOGNIZED,
    ]


def test_url_fields_checked_on_attributes():
    out = classify_output(HrefHolder(), 4)
    assert out.kind is OutputKind.URL_BEARING_OBJECT
    assert out.url == "https://cdn.example.com/icon-4.png"
    assert out.index == 4


def test_host_fragment_counts_as_url():
    assert extract_image_urls([FileOutputLike("replicate.delivery/xyz/out.png")]) == ["replicate.delivery/xyz/out.png"]


def test_unusable_elements_contribute_nothing():
    raw = [None, "", "   ", object(), BrokenStr(), UrlAccessor(), {"url": ""}, b"bytes", 42]
    assert extract_image_urls(raw) == []
    assert all(o.kind is OutputKind.UNRECOGNIZED for o in classify_outputs(raw))


def test_single_value_output_is_wrapped():
    assert extract_image_urls("https://replicate.delivery/only.webp") == ["https://replicate.delivery/only.webp"]
    assert extract_image_urls(FileOutputLike("https://replicate.delivery/f.webp")) == ["https://replicate.delivery/f.webp"]
    assert extract_image_urls(None) == []
