"""
Looks up the WebForms control that a code-behind event handler is wired to.

This is a pattern match over the raw markup, not a parser: controls nested
inside other server controls, or attributes split in unusual ways, may be
matched wrongly or missed.
"""
import logging
import re
from typing import Iterable, Optional

from api_trace.config import DEFAULT_EVENT_ATTRIBUTES
from api_trace.inputs.directory_scanning import read_text
from api_trace.models.ast_models import UiBinding

logger = logging.getLogger(__name__)


def control_pattern(handler: str, event_attributes: Iterable[str] = DEFAULT_EVENT_ATTRIBUTES) -> re.Pattern:
    """
    Regex for an `<asp:Xxx ...>` control whose event attribute is bound to
    `handler`. Group `inner` holds the inner text of a container control and
    is None for a self-closing one.
    """
    attributes = "|".join(re.escape(a) for a in event_attributes)
    return re.compile(
        r"<asp:\w+[^>]*?\b(?:" + attributes + r")\s*=\s*\""
        + re.escape(handler)
        + r"\"[^>]*?(?:/>|>(?P<inner>.*?)</asp:\w+\s*>)",
        re.IGNORECASE | re.DOTALL,
    )


def match_control(content: str, handler: str,
                  event_attributes: Iterable[str] = DEFAULT_EVENT_ATTRIBUTES) -> Optional[str]:
    """
    Display text of the first control in `content` bound to `handler`: its
    trimmed inner text, or the whole control markup when it has none.
    """
    match = control_pattern(handler, event_attributes).search(content)
    if match is None:
        return None
    text = (match.group("inner") or "").strip()
    if not text:
        text = match.group(0).strip()
    return text


class MarkupIndex:
    """Markup files of a project, read once and searched per handler name."""

    def __init__(self, files: Iterable[tuple[str, str]],
                 event_attributes: Iterable[str] = DEFAULT_EVENT_ATTRIBUTES):
        self.files = sorted(files)
        self.event_attributes = tuple(event_attributes)
        self._cache: dict[str, Optional[UiBinding]] = {}

    @classmethod
    def from_paths(cls, paths: Iterable[str],
                   event_attributes: Iterable[str] = DEFAULT_EVENT_ATTRIBUTES) -> "MarkupIndex":
        files = []
        for path in paths:
            try:
                files.append((path, read_text(path)))
            except OSError as e:
                logger.warning("Failed to read markup %s: %s", path, e)
        return cls(files, event_attributes)

    def find_binding(self, handler: str) -> Optional[UiBinding]:
        """First control bound to `handler`, scanning files in path order."""
        if handler in self._cache:
            return self._cache[handler]
        binding = None
        for path, content in self.files:
            text = match_control(content, handler, self.event_attributes)
            if text is not None:
                binding = UiBinding(file_path=path, text=text)
                break
        if binding is None:
            logger.debug("No markup control bound to %s", handler)
        self._cache[handler] = binding
        return binding

    def __len__(self) -> int:
        return len(self.files)
