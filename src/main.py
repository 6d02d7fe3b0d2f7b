"""Command-line entry point for course generation.

This module provides an interactive command-line interface for generating an
onboarding course for an existing project. The draft is written to a JSON
file under ``data/courses`` so it can be reviewed or edited, regenerated as
often as needed, and finally saved to the database.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from config import DATA_DIR, get_default_llm
from core.database import SessionLocal
from core.exceptions import (
    ConfigurationError,
    CourseFormatError,
    LLMError,
    ProjectNotFoundError,
)
from core.logging_config import setup_logging
from generators.CourseGenerator import CourseGenerator
from schemas.course import GeneratedCourse
from utils.course_manager import CourseManager
from utils.project_manager import DOCUMENTATION_FIELDS, ProjectManager

logger = logging.getLogger(__name__)

COURSES_DIR = DATA_DIR / "courses"


def print_banner() -> None:
    print("=" * 70)
    print("  Onboarding Course Generator")
    print("=" * 70)
    print()


def print_course(course: GeneratedCourse) -> None:
    """Print module titles and quiz sizes of a draft course."""
    print("\n" + "=" * 70)
    print(f"Course draft: {len(course.modules)} modules")
    print("=" * 70)
    for i, module in enumerate(course.modules, start=1):
        print(f"  Module {i}: {module.title} ({len(module.quiz.questions)} questions)")
    print("=" * 70 + "\n")


def save_draft(course: GeneratedCourse, project_id: str) -> Path:
    COURSES_DIR.mkdir(parents=True, exist_ok=True)
    output_path = COURSES_DIR / f"{project_id}.json"
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(course.model_dump(by_alias=True), f, ensure_ascii=False, indent=2)
    logger.info("Course draft saved to: %s", output_path)
    return output_path


def load_draft(project_id: str) -> Optional[GeneratedCourse]:
    """Load a draft written by save_draft, or None if there is none."""
    draft_path = COURSES_DIR / f"{project_id}.json"
    if not draft_path.exists():
        return None
    with open(draft_path, "r", encoding="utf-8") as f:
        return GeneratedCourse.model_validate(json.load(f))


def print_commands() -> None:
    print("\nAvailable commands:")
    print("  [r] or regenerate - generate a new draft")
    print("  [s] or save       - store the draft file in the database")
    print("  [q] or quit       - exit")
    print()


async def interactive_generation(project_id: str) -> None:
    """Interactive course generation workflow.

    Args:
        project_id: ID of the project to build the course for.
    """
    print_banner()

    with SessionLocal() as db:
        projects = ProjectManager(db)
        project = projects.get_project(project_id)
        doc = projects.get_documentation(project_id)
        documentation = {
            field: getattr(doc, field) if doc else None for field in DOCUMENTATION_FIELDS
        }
        title, description = project.name, project.description

    generator = CourseGenerator(get_default_llm())

    async def generate() -> Optional[GeneratedCourse]:
        print("\nGenerating course, this may take a minute...")
        try:
            draft = await generator.generate(title, description, documentation)
        except (LLMError, CourseFormatError) as e:
            logger.error("Course generation failed: %s", e)
            print("Generation failed, please retry.\n")
            return None
        path = save_draft(draft, project_id)
        print(f"Draft saved to {path}; you can edit it before saving.\n")
        return draft

    course = load_draft(project_id)
    if course is None:
        course = await generate()
    else:
        print(f"Loaded existing draft from {COURSES_DIR / (project_id + '.json')}")

    while True:
        if course:
            print_course(course)
        print_commands()
        user_input = input("Command: ").strip().lower()

        if user_input in ["q", "quit"]:
            print("\nBye.")
            return
        elif user_input in ["r", "regenerate"]:
            course = await generate() or course
        elif user_input in ["s", "save"]:
            # The file may have been edited since it was generated
            course = load_draft(project_id) or course
            if course is None:
                print("\nNo draft to save.\n")
                continue
            with SessionLocal() as db:
                CourseManager(db).regenerate(project_id, course.modules)
            print(f"\nSaved {len(course.modules)} modules for project {title}.\n")
        else:
            print("\nUnknown command, please retry.\n")


def main() -> None:
    """Main entry point."""
    setup_logging()
    if len(sys.argv) < 2:
        print("Usage: python main.py <project_id>")
        sys.exit(1)

    try:
        asyncio.run(interactive_generation(sys.argv[1]))
    except KeyboardInterrupt:
        print("\n\nInterrupted.")
    except (ConfigurationError, ProjectNotFoundError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
