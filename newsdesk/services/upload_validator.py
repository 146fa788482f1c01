from typing import Iterable, Optional

# File extensions each accepted media type may be stored under
IMAGE_EXTENSIONS = {
    "image/png": frozenset({"png"}),
    "image/jpg": frozenset({"jpg", "jpeg"}),
    "image/jpeg": frozenset({"jpg", "jpeg"}),
    "image/gif": frozenset({"gif"}),
    "image/webp": frozenset({"webp"}),
    "image/svg+xml": frozenset({"svg"}),
}


def _short_type(mime_type: str) -> str:
    # "image/svg+xml" -> "svg"
    return mime_type.split("/", 1)[-1].split("+", 1)[0]


class UploadValidator:
    """Checks an uploaded image against the configured size and media type limits.

    ``validate`` returns ``None`` when the file is acceptable, otherwise the
    message reported under ``errors.image``.
    """

    def __init__(self, max_size_bytes: int, allowed_types: Iterable[str]):
        allowed_types = list(allowed_types)
        self.max_size_bytes = max_size_bytes
        self.allowed_types = frozenset(t.lower() for t in allowed_types)
        self._allowed_label = ", ".join(dict.fromkeys(_short_type(t) for t in allowed_types))

    @classmethod
    def from_settings(cls, settings) -> "UploadValidator":
        return cls(settings.max_image_size_bytes, settings.allowed_image_types)

    @property
    def max_size_mb(self) -> float:
        mb = self.max_size_bytes / (1024 * 1024)
        return int(mb) if mb.is_integer() else round(mb, 2)

    def validate(self, size: Optional[int], mime_type: Optional[str]) -> Optional[str]:
        if size is not None and size > self.max_size_bytes:
            return f"Image size must be less than {self.max_size_mb} MB."

        if not mime_type or mime_type.lower() not in self.allowed_types:
            return f"Image must be of type {self._allowed_label}."

        return None

    def validate_extension(self, mime_type: str, extension: Optional[str]) -> Optional[str]:
        """Stored extension must be one registered for the declared media type."""
        if extension is None:
            return "Image file name must have an extension."

        expected = IMAGE_EXTENSIONS.get(mime_type.lower(), frozenset())
        if extension not in expected:
            if not expected:
                return f"Image must be of type {self._allowed_label}."
            return f"Image file extension must be one of: {', '.join(sorted(expected))}."

        return None
