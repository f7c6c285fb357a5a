"""Sample users for a fresh install.

Runs at startup. Sample users that are missing get created, so a run that
failed halfway is finished on the next start. Any non-sample user means the
install is in real use and nothing is touched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from khatmah.auth.password import hash_password

if TYPE_CHECKING:
    from khatmah.storage.interface import KhatmahStorage

logger = structlog.get_logger()

SAMPLE_PASSWORD = "password123"  # noqa: S105

SEED_USERS: list[dict] = [
    {"username": "ahmed", "display_name": "Ahmed Ali", "completed_juz": [1, 2, 3]},
    {"username": "fatima", "display_name": "Fatima Noor", "completed_juz": [1]},
]


async def seed_sample_data(storage: KhatmahStorage) -> int:
    """Create whichever sample users are missing. Returns how many were created."""
    existing = {u.username.lower() for u in await storage.list_user_summaries()}
    if existing - {entry["username"] for entry in SEED_USERS}:
        logger.info("seed_skipped", reason="users_exist")
        return 0

    missing = [entry for entry in SEED_USERS if entry["username"] not in existing]
    if not missing:
        logger.info("seed_skipped", reason="already_seeded")
        return 0

    password_hash = hash_password(SAMPLE_PASSWORD)
    for entry in missing:
        user = await storage.create_user(
            username=entry["username"],
            password_hash=password_hash,
            display_name=entry["display_name"],
        )
        for juz in entry["completed_juz"]:
            await storage.upsert_reading(user.id, juz, True)

    logger.info("seed_completed", users=len(missing))
    return len(missing)
