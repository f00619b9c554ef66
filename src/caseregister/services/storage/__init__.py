"""
Storage module - Local key/value persistence, case sessions and export.
"""

from caseregister.services.storage.export import (
    export_filename,
    export_transcript,
    save_export,
    split_paragraphs,
)
from caseregister.services.storage.local_storage import LocalStorage
from caseregister.services.storage.sessions import SessionStore

__all__ = [
    "LocalStorage",
    "SessionStore",
    "export_filename",
    "export_transcript",
    "save_export",
    "split_paragraphs",
]
