#!/usr/bin/env python3
"""
Case Register command-line transcription.

Uploads an audio file to a running backend, appends the transcript to a
case in local storage and optionally exports the case as .docx.

Usage:
    python scripts/transcribe_file.py memo.webm
    python scripts/transcribe_file.py memo.wav --case case-1760870000000 --export
    python scripts/transcribe_file.py memo.ogg --new-case "Site visit" --export
"""

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

from caseregister.core.config import get_settings
from caseregister.core.exceptions import CaseRegisterError
from caseregister.services.audio.capture import AudioBlob
from caseregister.services.storage.export import save_export
from caseregister.services.storage.local_storage import LocalStorage
from caseregister.services.storage.sessions import SessionStore
from caseregister.ui.api_client import APIClient, APIError

logger = logging.getLogger("transcribe_file")


def _load_blob(path: Path, mime_type: str | None) -> AudioBlob:
    guessed, _ = mimetypes.guess_type(path.name)
    return AudioBlob(
        data=path.read_bytes(),
        mime_type=mime_type or guessed or "application/octet-stream",
        filename=path.name,
    )


def _select_case(store: SessionStore, case_id: str | None, new_case: str | None) -> None:
    if new_case:
        case = store.create_case(title=new_case)
        print(f"Created case {case.id}: {case.title}")
    elif case_id:
        case = store.load_case(case_id)
        print(f"Appending to case {case.id}: {case.title}")


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Transcribe an audio file with the Case Register backend",
    )
    parser.add_argument("audio", type=Path, help="Audio file to transcribe")
    parser.add_argument("--api-url", default=settings.api_base_url, help="Backend base URL")
    parser.add_argument("--mime-type", help="Override the guessed content type")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--case", dest="case_id", help="Existing case ID to append to")
    group.add_argument("--new-case", metavar="TITLE", help="Create a new case with this title")
    parser.add_argument(
        "--export",
        action="store_true",
        help=f"Write the resulting transcript as .docx to {settings.exports_dir}",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if not args.audio.is_file():
        print(f"Error: {args.audio} does not exist", file=sys.stderr)
        return 1

    store = SessionStore(LocalStorage(settings.storage_path))
    client = APIClient(base_url=args.api_url, timeout=settings.api_timeout)
    try:
        _select_case(store, args.case_id, args.new_case)
        text = client.transcribe(_load_blob(args.audio, args.mime_type))
        store.append_transcript(text)
        print(text)

        if args.export:
            case = store.active_case
            path = save_export(store.transcript, title=case.title if case else "Transcript")
            print(f"Exported to {path}")
    except APIError as exc:
        print(f"Error ({exc.category}): {exc.message}", file=sys.stderr)
        return 2
    except CaseRegisterError as exc:
        print(f"Error: {exc.detail}", file=sys.stderr)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
