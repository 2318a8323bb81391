"""Bootstrap an inspection store against a live server and print the checklist.

Intended for checking a server or account by hand. Reads the same settings as
the library (API_BASE_URL, API_USERNAME, API_PASSWORD, ...).

Usage:
  API_USERNAME='inspector' API_PASSWORD='secret' python scripts/bootstrap_walkthrough.py

Set WALKTHROUGH_SUBMIT=1 to attach a result to the first comment and post it.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

# Add the project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from pydantic import ValidationError  # noqa: E402

from inspectsync.core.config import get_settings  # noqa: E402
from inspectsync.core.errors import SyncError  # noqa: E402
from inspectsync.services.inspection_store import InspectionStore  # noqa: E402
from inspectsync.services.notification_service import StoreEvent  # noqa: E402


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _print_event(event: StoreEvent) -> None:
    print(f"  event: {event.kind.value} (id={event.entity_id})")


async def bootstrap_walkthrough() -> None:
    submit = _env_bool("WALKTHROUGH_SUBMIT", default=False)

    try:
        settings = get_settings()
    except ValidationError as e:
        print("Missing or invalid settings.")
        print(f"{e.error_count()} problem(s): set API_USERNAME and API_PASSWORD.")
        return

    store = InspectionStore.from_settings(settings)
    store.notifier.subscribe(_print_event)

    try:
        store.start()
        ready = await store.wait_until_ready()
        if not ready:
            print(f"Bootstrap failed: {store.bootstrap_error}")
            return

        subsections = {subsection.id: subsection for subsection in store.subsections}
        for position, section in enumerate(store.sections):
            print(f"[{section.id}] {section.name}")
            for sub_position, subsection_id in enumerate(section.subsection_ids):
                print(f"    [{subsection_id}] {store.get_subsection_text(position, sub_position)}")
                for comment_id in subsections[subsection_id].comment_ids:
                    print(f"        ({comment_id}) {store.get_comment_text(comment_id)}")

        if submit:
            first_comment_id = store.get_comment_id(0, 0, 0)
            if first_comment_id is None:
                print("No comment to attach a result to.")
                return
            result_id = store.add_result(first_comment_id)
            store.change_note(result_id, "Walkthrough finding")
            try:
                ack = await store.submit_result(result_id)
            except SyncError as e:
                print(f"Submitting result {result_id} failed: {e}")
                return
            print(f"Submitted result {result_id}: success={ack.success}")
    finally:
        await store.close()

    print("Done.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(bootstrap_walkthrough())
