#!/usr/bin/env python3
"""
Mark every open task whose due date has passed as overdue.

Meant to be run from cron or any other scheduler:

    python scripts/update_overdue_tasks.py
"""

import os
import sys

from dotenv import load_dotenv

# Add the project root to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


def update_overdue_tasks() -> int:
    load_dotenv(override=True)

    from app.db.session import SessionLocal
    from app.services.task import TaskService
    from app.utils.logger import get_logger

    logger = get_logger("SCRIPTS")
    logger.info("Starting overdue sweep", "overdue")

    db = SessionLocal()
    try:
        updated = TaskService.update_overdue_tasks(db)
        logger.success("Overdue sweep finished", "overdue", updated=updated)
        return updated
    finally:
        db.close()


if __name__ == "__main__":
    updated = update_overdue_tasks()
    print(f"Marked {updated} task(s) as overdue")
