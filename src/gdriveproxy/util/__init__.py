from .ids import new_oauth_state, new_session_id, new_uuid
from .mime import (
    DEFAULT_MIME,
    EXPORT_MIMES,
    FOLDER_MIME,
    ensure_extension,
    export_mime_for,
    extension_for_mime,
    is_folder,
    is_google_app,
    known_extension,
    mime_type_for_name,
    needs_export,
)
from .time import (
    from_epoch_ms,
    normalize_dt,
    now_utc,
    parse_rfc3339,
    to_epoch_ms,
    to_rfc3339,
)

__all__ = [
    "new_uuid",
    "new_session_id",
    "new_oauth_state",
    "DEFAULT_MIME",
    "EXPORT_MIMES",
    "FOLDER_MIME",
    "ensure_extension",
    "export_mime_for",
    "extension_for_mime",
    "is_folder",
    "is_google_app",
    "known_extension",
    "mime_type_for_name",
    "needs_export",
    "now_utc",
    "parse_rfc3339",
    "to_rfc3339",
    "normalize_dt",
    "to_epoch_ms",
    "from_epoch_ms",
]
