# --- Data models for the trace ----------------------------------------------
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MethodIdentity:
    """
    A method node in the caller graph. Identity is (name, file): same-named
    overloads declared in one file collapse into a single node.
    """
    name: str  # e.g., "Submit_Click"
    file_path: str  # declaring source file

    def __str__(self) -> str:
        return f"{self.name} ({self.file_path})"


@dataclass(frozen=True)
class UiBinding:
    """A markup control whose event attribute is bound to a handler."""
    file_path: str  # markup file, e.g. ".../Default.aspx"
    text: str  # trimmed inner text, or the whole control markup if it has none


@dataclass
class ApiInvocationRecord:
    """One syntactic call to an API-surface method."""
    api_file: str
    api_method: str  # e.g., "GET_JWT"
    endpoint: str  # resolved argument 0, or a fallback descriptor
    immediate_method: MethodIdentity
    line: int
    col: int
    # Filled in once by the resolution phase
    top_level_method: Optional[MethodIdentity] = None
    ui_binding: Optional[UiBinding] = None

    @property
    def sort_key(self) -> tuple[str, int, int]:
        return (self.api_file, self.line, self.col)
