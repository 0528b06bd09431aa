from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ProjectFile:
    """A single generated file."""
    filename: str
    content: str


@dataclass(frozen=True)
class GeneratedProject:
    """A project returned by the model, files kept in arrival order."""
    project_name: str
    files: Tuple[ProjectFile, ...]


class Phase(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class PromptHistory:
    """Submitted prompts, most recent first, without duplicates."""
    entries: List[str] = field(default_factory=list)
    display_limit: int = 5

    def record(self, prompt: str) -> None:
        if prompt in self.entries:
            self.entries.remove(prompt)
        self.entries.insert(0, prompt)

    def visible(self) -> List[str]:
        return self.entries[: self.display_limit]


@dataclass
class UsageTotals:
    """Token and cost totals for the running session."""
    last_tokens: int = 0
    last_cost: float = 0.0
    session_tokens: int = 0
    session_cost: float = 0.0

    def add(self, tokens: int, cost: float) -> None:
        self.last_tokens = tokens
        self.last_cost = cost
        self.session_tokens += tokens
        self.session_cost += cost


@dataclass
class SessionState:
    """Holds in-memory session state. Only the session controller writes it."""
    prompt_text: str = ""
    history: PromptHistory = field(default_factory=PromptHistory)
    current_project: Optional[GeneratedProject] = None
    generating_prompt: Optional[str] = None
    is_loading: bool = False
    last_error: Optional[str] = None

    @property
    def phase(self) -> Phase:
        if self.is_loading:
            return Phase.LOADING
        if self.last_error is not None:
            return Phase.FAILURE
        if self.current_project is not None:
            return Phase.SUCCESS
        return Phase.IDLE


__all__ = [
    "ProjectFile",
    "GeneratedProject",
    "Phase",
    "PromptHistory",
    "UsageTotals",
    "SessionState",
]
