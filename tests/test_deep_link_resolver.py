from __future__ import annotations

import io

import pytest

from attendance_hub.client.context import ClientContext
from attendance_hub.core.exceptions import ValidationError
from attendance_hub.exports.service import ExportService
from attendance_hub.joinlinks.resolver import DeepLinkResolver


@pytest.fixture
def resolver():
    return DeepLinkResolver("https://attend.example.edu/")


def test_build_join_url_strips_trailing_slash(resolver):
    assert resolver.build_join_url("042117") == "https://attend.example.edu/join/042117"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("/join/123456", "123456"),
        ("/join/123456/", "123456"),
        ("/join/000001?utm=qr", "000001"),
        ("https://attend.example.edu/join/654321", "654321"),
        ("/join/12345", None),
        ("/join/1234567", None),
        ("/join/12a456", None),
        ("/dashboard", None),
        ("", None),
    ],
)
def test_extract_pin(resolver, value, expected):
    assert resolver.extract_pin(value) == expected


def test_resolve_stages_pin_without_signing_in(resolver):
    ctx = ClientContext({})
    assert resolver.resolve("/join/123456", ctx) == "123456"
    assert ctx.peek_pin() == "123456"
    assert not ctx.is_authenticated


def test_resolve_leaves_context_alone_for_other_paths(resolver):
    ctx = ClientContext({})
    assert resolver.resolve("/profile", ctx) is None
    assert ctx.peek_pin() is None


def test_decode_qr_image_rejects_non_images(resolver):
    pytest.importorskip("pyzbar.pyzbar")
    with pytest.raises(ValidationError):
        resolver.decode_qr_image(io.BytesIO(b"not an image"))


def test_decode_qr_image_reads_generated_join_code(resolver):
    pytest.importorskip("pyzbar.pyzbar")
    png = ExportService().join_qr_png(resolver.build_join_url("314159"))
    assert resolver.decode_qr_image(io.BytesIO(png)) == "314159"
