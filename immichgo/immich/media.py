"""Media types known to the server, indexed by file extension."""

from __future__ import annotations

from typing import Iterable, Mapping

TYPE_VIDEO = "video"
TYPE_IMAGE = "image"
TYPE_SIDECAR = "sidecar"
TYPE_IGNORED = "ignored"
TYPE_UNKNOWN = ""


class SupportedMedia(dict[str, str]):
    """Mapping from lower-case extension (with dot) to media type."""

    @classmethod
    def from_types(cls, types: Mapping[str, Iterable[str]]) -> SupportedMedia:
        """Build from a mapping of media type to its list of extensions."""
        media = cls()
        for media_type, extensions in types.items():
            for ext in extensions:
                media[ext] = media_type
        return media

    def type_from_ext(self, ext: str) -> str:
        return self.get(ext.lower(), TYPE_UNKNOWN)

    def is_media(self, ext: str) -> bool:
        return self.type_from_ext(ext) in (TYPE_VIDEO, TYPE_IMAGE)

    def is_extension_prefix(self, ext: str) -> bool:
        """Tell whether ext is a media extension missing its last character."""
        ext = ext.lower()
        return any(
            media_type in (TYPE_VIDEO, TYPE_IMAGE) and ext == known[:-1]
            for known, media_type in self.items()
        )

    def is_ignored_ext(self, ext: str) -> bool:
        return self.type_from_ext(ext) == TYPE_UNKNOWN


_VIDEOS = (
    ".3gp .avi .flv .insv .m2ts .m4v .mkv .mov .mp4 .mpg .mts .webm .wmv"
).split()
_IMAGES = (
    ".3fr .ari .arw .avif .bmp .cap .cin .cr2 .cr3 .crw .dcr .dng .erf "
    ".fff .gif .heic .heif .hif .iiq .insp .jpe .jpeg .jpg "
    ".jxl .k25 .kdc .mrw .nef .orf .ori .pef .png .psd .raf .raw .rw2 "
    ".rwl .sr2 .srf .srw .tif .tiff .webp .x3f"
).split()

DEFAULT_SUPPORTED_MEDIA = SupportedMedia.from_types(
    {
        TYPE_VIDEO: _VIDEOS,
        TYPE_IMAGE: _IMAGES,
        TYPE_SIDECAR: [".xmp"],
        TYPE_IGNORED: [".mp", ".html"],
    }
)