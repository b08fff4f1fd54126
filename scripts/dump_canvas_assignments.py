import logging

from canvas_connector import CanvasClient, load_credentials
from canvas_connector.endpoints import fetch_assignments, fetch_courses
from utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def main():
    setup_logging()
    with CanvasClient(load_credentials()) as client:
        courses = fetch_courses(client)
        with open("canvas_assignments_dump.txt", "w", encoding="utf-8") as f:
            for course in courses:
                f.write(f"=== Course {course.id}: {course.name} ({course.course_code}) ===\n")
                assignments = fetch_assignments(course.id, client=client)
                for a in assignments:
                    due_at = a.due_at.isoformat() if a.due_at else None
                    f.write(f"  - {a.name} | due_at: {due_at}\n")
                f.write("\n")
        logger.info("Dumped %d courses (%d skipped as malformed)", courses.mapped, courses.skipped)

if __name__ == "__main__":
    main()
