"""Example: use the service layer directly (no Flask).

Controllers are thin; the business rules live in the services.
"""

import importlib
import sys

from config import get_settings_module

from src.eduko.eduko.container import build_container


def main():
    school_id = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, upload_dir=settings.UPLOAD_DIR)

    pending = container.excuse_service.list_excuses(school_id=school_id, status="pending")
    for excuse in pending:
        print(excuse.excuse_id, excuse.student_id, excuse.date_from, excuse.date_to, excuse.submission_type.value)


if __name__ == "__main__":
    main()
