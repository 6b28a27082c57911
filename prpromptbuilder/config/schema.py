# prpromptbuilder/config/schema.py

from pydantic import BaseModel, Field
from typing import Dict, get_args

from ..core.models import LaunchMode, PromptMode, TokenBackend

PROMPT_MODES = get_args(PromptMode)

DEFAULT_PROMPT_TEMPLATES: Dict[str, str] = {
    "implement": (
        "### TASK\n"
        "Review the following pull-request diff and propose improvements."
    ),
    "review": (
        "### TASK\n"
        "You are reviewing the following pull-request diff and associated comments. "
        "Please provide constructive feedback, identify potential issues, and suggest improvements. "
        "Focus on clarity, correctness, performance, and adherence to coding standards."
    ),
    "adjust-pr": (
        "### TASK\n"
        "The PR title and/or body may be stale or incomplete. Based on the provided context "
        "(PR details, diffs), draft an improved PR title and body. The title should be concise "
        "and follow conventional commit guidelines if applicable. The body should clearly explain "
        "the purpose of the changes, how they were implemented, and any relevant context for reviewers."
    ),
    "respond": (
        "### TASK\n"
        "Draft a reply to the following comment thread(s). Address the questions or concerns raised, "
        "provide clarifications, or discuss the proposed changes. Be clear, concise, and constructive."
    ),
}


class AppConfig(BaseModel):
    default_clone_root: str = "~/git/work"
    launch_mode: LaunchMode = "workspace"
    default_mode: PromptMode = "implement"
    # Mode -> user-editable template text
    prompt_templates: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_PROMPT_TEMPLATES))
    token_counter_backend: TokenBackend = "openai"
    token_counter_model_openai: str = "cl100k_base"  # Default encoding for OpenAI
    token_counter_model_gemini: str = "gemini-1.5-flash"  # Default model for Gemini

    def template_for(self, mode: str) -> str:
        """Stored template for `mode`, falling back to the built-in default."""
        if mode in self.prompt_templates:
            return self.prompt_templates[mode]
        return DEFAULT_PROMPT_TEMPLATES.get(mode, "")
