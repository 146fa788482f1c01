import uuid
from typing import Optional


def extension_of(original_name: Optional[str]) -> Optional[str]:
    """Last dot-delimited suffix of ``original_name``, lower-cased.

    Returns ``None`` for names without an extension ("photo", "photo.", ".png").
    """
    if not original_name:
        return None
    # Drop any client-side directory component
    base = original_name.replace("\\", "/").rsplit("/", 1)[-1]
    stem, dot, extension = base.rpartition(".")
    if not dot or not stem or not extension:
        return None
    return extension.lower()


def generate_random_name() -> str:
    return uuid.uuid4().hex


class FileNamer:
    def name_for(self, upload) -> str:
        extension = extension_of(upload.original_name)
        if extension is None:
            raise ValueError(f"No extension in file name: {upload.original_name!r}")
        return f"{generate_random_name()}.{extension}"
