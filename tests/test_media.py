import pytest

from immichgo.immich.media import (
    DEFAULT_SUPPORTED_MEDIA,
    TYPE_IGNORED,
    TYPE_IMAGE,
    TYPE_SIDECAR,
    TYPE_UNKNOWN,
    TYPE_VIDEO,
    SupportedMedia,
)


@pytest.mark.parametrize(
    "ext,expected",
    [
        (".jpg", TYPE_IMAGE),
        (".JPG", TYPE_IMAGE),
        (".MP4", TYPE_VIDEO),
        (".xmp", TYPE_SIDECAR),
        (".html", TYPE_IGNORED),
        (".txt", TYPE_UNKNOWN),
    ],
)
def test_type_from_ext(ext, expected):
    assert DEFAULT_SUPPORTED_MEDIA.type_from_ext(ext) == expected


def test_is_media():
    assert DEFAULT_SUPPORTED_MEDIA.is_media(".HEIC")
    assert DEFAULT_SUPPORTED_MEDIA.is_media(".mov")
    assert not DEFAULT_SUPPORTED_MEDIA.is_media(".xmp")
    assert not DEFAULT_SUPPORTED_MEDIA.is_media(".mp")


def test_is_extension_prefix():
    assert DEFAULT_SUPPORTED_MEDIA.is_extension_prefix(".jp")
    assert DEFAULT_SUPPORTED_MEDIA.is_extension_prefix(".JPE")
    assert not DEFAULT_SUPPORTED_MEDIA.is_extension_prefix(".xm")
    assert not DEFAULT_SUPPORTED_MEDIA.is_extension_prefix(".jpg")


def test_is_ignored_ext():
    assert DEFAULT_SUPPORTED_MEDIA.is_ignored_ext(".txt")
    assert not DEFAULT_SUPPORTED_MEDIA.is_ignored_ext(".html")
    assert not DEFAULT_SUPPORTED_MEDIA.is_ignored_ext(".png")


def test_from_types_inverts_mapping():
    media = SupportedMedia.from_types({"image": [".png", ".gif"], "video": [".mp4"]})
    assert media == {".png": "image", ".gif": "image", ".mp4": "video"}
    assert media.is_media(".GIF")


def test_empty_media_knows_nothing():
    media = SupportedMedia()
    assert media.type_from_ext(".jpg") == TYPE_UNKNOWN
    assert not media.is_extension_prefix(".jp")