"""E-mail templates for each MessageKind, kept in messages.yaml."""

from pathlib import Path

import yaml

from core.enums import MessageKind
from core.notifications.channels.email import escape_markdown

TEMPLATES_PATH = Path(__file__).parent / "messages.yaml"

_templates: dict | None = None


def load_templates() -> dict:
    """
    Read messages.yaml once and cache it.

    Raises:
        ValueError: If a MessageKind has no subject or body template
    """
    global _templates
    if _templates is None:
        with open(TEMPLATES_PATH) as f:
            loaded = yaml.safe_load(f)
        missing = [
            kind.value
            for kind in MessageKind
            if not {"email_subject", "email_body"} <= set(loaded.get(kind.value, {}))
        ]
        if missing:
            raise ValueError(f"messages.yaml is missing templates for: {missing}")
        _templates = loaded
    return _templates


def render_message(template: str, context: dict) -> str:
    """Fill {placeholders}; a missing variable raises KeyError."""
    return template.format(**context)


def render_email(kind: MessageKind, context: dict) -> tuple[str, str]:
    """
    Returns (subject, body) for the message kind.

    Values are escaped in the body so only the template's own markdown
    links become links.
    """
    template = load_templates()[kind.value]
    body_context = {
        key: escape_markdown(value) if isinstance(value, str) else value
        for key, value in context.items()
    }
    return (
        render_message(template["email_subject"], context),
        render_message(template["email_body"], body_context),
    )
