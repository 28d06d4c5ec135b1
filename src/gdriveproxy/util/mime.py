from __future__ import annotations

from typing import Optional

FOLDER_MIME: str = "application/vnd.google-apps.folder"
DEFAULT_MIME: str = "application/octet-stream"

GOOGLE_APP_PREFIX: str = "application/vnd.google-apps."

# Google-native types cannot be fetched raw; they are exported to these.
EXPORT_MIMES: dict[str, str] = {
    "application/vnd.google-apps.document": "application/pdf",
    "application/vnd.google-apps.spreadsheet": (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    ),
    "application/vnd.google-apps.presentation": "application/pdf",
    "application/vnd.google-apps.drawing": "image/png",
}
DEFAULT_EXPORT_MIME: str = "application/pdf"

MIME_TO_EXTENSION: dict[str, str] = {
    # video
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/x-matroska": "mkv",
    "video/x-msvideo": "avi",
    "video/quicktime": "mov",
    "video/x-ms-wmv": "wmv",
    "video/x-flv": "flv",
    "video/3gpp": "3gp",
    "video/x-m4v": "m4v",
    "video/mpeg": "mpeg",
    # audio
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
    "audio/flac": "flac",
    "audio/aac": "aac",
    "audio/mp4": "m4a",
    "audio/x-ms-wma": "wma",
    # images
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/bmp": "bmp",
    "image/x-icon": "ico",
    "image/tiff": "tiff",
    # documents
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
    # archives
    "application/zip": "zip",
    "application/vnd.rar": "rar",
    "application/x-7z-compressed": "7z",
    "application/x-tar": "tar",
    "application/gzip": "gz",
    # text
    "text/plain": "txt",
    "text/html": "html",
    "text/css": "css",
    "text/javascript": "js",
    "application/json": "json",
    "application/xml": "xml",
    "text/xml": "xml",
    "text/csv": "csv",
}

EXTENSION_TO_MIME: dict[str, str] = {
    ext: mime for mime, ext in MIME_TO_EXTENSION.items() if mime != "text/xml"
}
EXTENSION_TO_MIME.update(
    {
        "jpeg": "image/jpeg",
        "tif": "image/tiff",
        "mpg": "video/mpeg",
        "htm": "text/html",
    }
)

KNOWN_EXTENSIONS: frozenset[str] = frozenset(
    set(EXTENSION_TO_MIME)
    | {
        "odt", "ods", "odp", "rtf", "bz2", "ts", "md", "yaml", "yml",
        "exe", "dmg", "apk", "iso",
    }
)


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def is_google_app(mime_type: str) -> bool:
    """True for Google-native types (Docs, Sheets, ...), including folders."""
    return mime_type.startswith(GOOGLE_APP_PREFIX)


def needs_export(mime_type: str) -> bool:
    """Google-native non-folder types must go through the export endpoint."""
    return is_google_app(mime_type) and not is_folder(mime_type)


def export_mime_for(mime_type: str) -> str:
    return EXPORT_MIMES.get(mime_type, DEFAULT_EXPORT_MIME)


def base_mime(mime_type: str) -> str:
    """Strip parameters: 'text/plain; charset=utf-8' -> 'text/plain'."""
    return mime_type.split(";", 1)[0].strip().lower()


def extension_for_mime(mime_type: str) -> Optional[str]:
    return MIME_TO_EXTENSION.get(base_mime(mime_type))


def known_extension(file_name: str) -> Optional[str]:
    """Return the lower-cased extension if it is a known one, else None."""
    dot = file_name.rfind(".")
    if dot == -1 or dot == len(file_name) - 1:
        return None
    ext = file_name[dot + 1 :].lower()
    return ext if ext in KNOWN_EXTENSIONS else None


def ensure_extension(file_name: str, mime_type: str) -> str:
    """
    Append an extension derived from mime_type when file_name has no known one.

    Unknown mime types leave the name unchanged.
    """
    if known_extension(file_name):
        return file_name
    ext = extension_for_mime(mime_type)
    if ext:
        return f"{file_name}.{ext}"
    return file_name


def mime_type_for_name(file_name: str) -> Optional[str]:
    ext = known_extension(file_name)
    if ext is None:
        return None
    return EXTENSION_TO_MIME.get(ext)
