"""Course generation module.

This module turns a project's title, description and documentation into an
onboarding course: an ordered list of modules, each with a markdown summary
and a multiple-choice quiz.

The LLM is asked for strict JSON (optionally inside a ```json fence); the
reply is extracted, parsed and validated against the course schema before
anything reaches the store.
"""

import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError

from core.exceptions import CourseFormatError, LLMError
from generators.config import PRODUCTION_CONFIG, CourseGeneratorConfig
from schemas.course import CourseModule, GeneratedCourse, Quiz, QuizQuestion

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")

DOCUMENTATION_LABELS = (
    ("pr_template", "Pull request template"),
    ("code_nomenclature", "Code nomenclature"),
    ("gitflow_docs", "Gitflow documentation"),
    ("additional_docs", "Additional documentation"),
)

FORMAT_EXAMPLE = """```json
{
  "modules": [
    {
      "title": "Module title",
      "summary": "Detailed educational content for the module with explanations, examples and best practices.",
      "quiz": {
        "title": "Assessment: [Module title]",
        "questions": [
          {
            "question": "Question about the module content",
            "options": ["Option A", "Option B", "Option C", "Option D"],
            "correctAnswer": 0,
            "explanation": "Why this is the correct answer"
          }
        ]
      }
    }
  ]
}
```"""


def extract_json_text(text: str) -> str:
    """Return the body of the first ```json fence, or the whole text."""
    match = _FENCED_JSON.search(text)
    content = match.group(1) if match else text
    return content.strip()


def parse_course(text: str) -> GeneratedCourse:
    """Parse raw LLM output into a validated GeneratedCourse.

    Args:
        text: Raw model reply.

    Returns:
        The validated course.

    Raises:
        CourseFormatError: If the text is not JSON or does not match the
            course schema.
    """
    content = extract_json_text(text)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("Error parsing JSON from LLM: %s", e)
        logger.error("Raw response: %s", text)
        raise CourseFormatError("Invalid JSON in generated course") from e

    if not isinstance(data, dict) or not isinstance(data.get("modules"), list):
        logger.error("Raw response: %s", text)
        raise CourseFormatError("Invalid course structure: missing modules")

    try:
        return GeneratedCourse.model_validate(data)
    except ValidationError as e:
        logger.error("Schema validation failed for generated course: %s", e)
        raise CourseFormatError(f"Invalid course structure: {e}") from e


def build_project_context(
    title: str, description: Optional[str], documentation: Optional[Dict[str, Any]]
) -> str:
    """Render project info for the prompt, skipping empty documentation fields."""
    lines = [
        "**PROJECT INFORMATION:**",
        f"- Title: {title}",
        f"- Description: {description or ''}",
        "",
        "**TECHNICAL DOCUMENTATION:**",
    ]
    documentation = documentation or {}
    for field, label in DOCUMENTATION_LABELS:
        value = documentation.get(field)
        if value:
            lines.append(f"- {label}:\n{value}\n")
    return "\n".join(lines)


def placeholder_modules(project_name: str) -> List[CourseModule]:
    """Fixed two-module course used when the LLM cannot be reached."""
    return [
        CourseModule(
            title=f"Welcome to {project_name}",
            summary=(
                f"# Welcome to {project_name}\n\n"
                "This module introduces the project, its goals and the people "
                "working on it. Read the project description and documentation, "
                "set up your local environment and ask your team lead for access "
                "to the repositories and tools you will need."
            ),
            quiz=Quiz(
                title=f"Assessment: Welcome to {project_name}",
                questions=[
                    QuizQuestion(
                        question="Where should you look first to understand the project goals?",
                        options=[
                            "The project description and documentation",
                            "Random source files",
                            "Old chat messages",
                            "Nowhere, just start coding",
                        ],
                        correct_answer=0,
                        explanation="The description and documentation summarise the project goals.",
                    )
                ],
            ),
        ),
        CourseModule(
            title="Team workflow",
            summary=(
                "# Team workflow\n\n"
                "This module covers how the team works day to day: branching "
                "strategy, pull request conventions and code naming rules. "
                "Follow the pull request template, keep changes small and ask "
                "for review early."
            ),
            quiz=Quiz(
                title="Assessment: Team workflow",
                questions=[
                    QuizQuestion(
                        question="What should every pull request follow?",
                        options=[
                            "The team's pull request template",
                            "No particular format",
                            "The longest possible description",
                            "Whatever the last author did",
                        ],
                        correct_answer=0,
                        explanation="The template keeps reviews consistent across the team.",
                    )
                ],
            ),
        ),
    ]


class CourseGenerator:
    """Generates onboarding course modules from project documentation."""

    def __init__(self, llm: Any, config: Optional[CourseGeneratorConfig] = None):
        """Initialize CourseGenerator.

        Args:
            llm: LangChain chat model used for generation.
            config: Course shape settings. If None, uses PRODUCTION_CONFIG.
        """
        self.llm = llm
        self.config = config or PRODUCTION_CONFIG
        self._init_prompt()

    def _init_prompt(self):
        self.prompt = ChatPromptTemplate.from_messages([
            ("system",
             """You are an expert in creating onboarding courses for software development teams.

Based on the project information provided by the user, generate a complete onboarding course with structured modules.

**INSTRUCTIONS:**
Generate an onboarding course with {min_modules}-{max_modules} modules. Each module must include:
1. A descriptive title
2. Detailed educational summary content in markdown (at least {min_summary_words} words)
3. A quiz of {min_questions}-{max_questions} multiple-choice questions to check understanding

**Output Language**: All output must be in {output_language}.

**RESPONSE FORMAT (strict JSON):**
{format_example}

**IMPORTANT:**
- Respond ONLY with valid JSON, with no additional text
- Make sure the content is relevant to the project and documentation provided
- Modules must follow a logical learning progression
- Include practical examples where possible"""),
            ("human", "{project_context}"),
        ])
        self.chain = self.prompt | self.llm | StrOutputParser()

    async def generate(
        self,
        title: str,
        description: Optional[str] = None,
        documentation: Optional[Dict[str, Any]] = None,
    ) -> GeneratedCourse:
        """Generate course modules for a project.

        Args:
            title: Project title.
            description: Project description.
            documentation: Mapping with any of pr_template, code_nomenclature,
                gitflow_docs and additional_docs. Empty fields are left out of
                the prompt.

        Returns:
            The validated GeneratedCourse.

        Raises:
            LLMError: If the model call fails or returns nothing.
            CourseFormatError: If the reply cannot be parsed into a course.
        """
        start = time.time()
        logger.info("Generating onboarding course for project: %s", title)
        try:
            text = await self.chain.ainvoke({
                "min_modules": self.config.min_modules,
                "max_modules": self.config.max_modules,
                "min_summary_words": self.config.min_summary_words,
                "min_questions": self.config.min_questions,
                "max_questions": self.config.max_questions,
                "output_language": self.config.output_language,
                "format_example": FORMAT_EXAMPLE,
                "project_context": build_project_context(title, description, documentation),
            })
        except Exception as e:
            logger.error("Error calling LLM after %.2fs: %s", time.time() - start, e)
            raise LLMError(f"Failed to generate course: {e}") from e

        if not text or not text.strip():
            raise LLMError("LLM returned empty result")

        course = parse_course(text)
        if not self.config.min_modules <= len(course.modules) <= self.config.max_modules:
            logger.warning(
                "Generated %d modules, expected %d-%d",
                len(course.modules),
                self.config.min_modules,
                self.config.max_modules,
            )
        logger.info(
            "Generated %d modules in %.2fs", len(course.modules), time.time() - start
        )
        return course
