"""Generator configuration module.

This module defines the options CourseGenerator reads when it builds its
prompt, so that course size can be tuned without touching the prompt text.
"""

from dataclasses import dataclass

from config import COURSE_MAX_MODULES, COURSE_MIN_MODULES


@dataclass
class CourseGeneratorConfig:
    """Shape of the course requested from the LLM."""

    min_modules: int = COURSE_MIN_MODULES
    max_modules: int = COURSE_MAX_MODULES
    min_summary_words: int = 300  # Per module summary
    min_questions: int = 3
    max_questions: int = 5
    output_language: str = "English"


# Predefined configurations for common scenarios

PRODUCTION_CONFIG = CourseGeneratorConfig()

# Small courses for demos and local development
FAST_CONFIG = CourseGeneratorConfig(
    min_modules=2,
    max_modules=3,
    min_summary_words=120,
    min_questions=2,
    max_questions=3,
)
