"""
plugins/magic8ball/results.py

Launcher-facing result entries returned by the plugin's query and context
menu handlers. The host renders these and sends the attached action back
when the user selects one.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Action:
    """A command the host publishes when a result is selected."""

    subject: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"subject": self.subject, "payload": dict(self.payload)}


@dataclass
class QueryResult:
    """One entry in the launcher's result list."""

    title: str
    subtitle: str
    query_text: str = ""
    score: int = 100
    icon: Optional[str] = None
    action: Optional[Action] = None
    context_data: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "query_text": self.query_text,
            "score": self.score,
            "icon": self.icon,
            "action": self.action.to_dict() if self.action else None,
            "context_data": self.context_data,
        }


@dataclass
class ContextMenuResult:
    """One entry in a result's context menu."""

    plugin_name: str
    title: str
    glyph: str
    accelerator_key: str
    action: Action
    accelerator_modifiers: Optional[str] = None
    font_family: str = "Segoe Fluent Icons,Segoe MDL2 Assets"

    def to_dict(self) -> dict:
        return {
            "plugin_name": self.plugin_name,
            "title": self.title,
            "glyph": self.glyph,
            "font_family": self.font_family,
            "accelerator_key": self.accelerator_key,
            "accelerator_modifiers": self.accelerator_modifiers,
            "action": self.action.to_dict(),
        }
