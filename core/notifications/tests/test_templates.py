"""Tests for message template loading and rendering."""

import pytest

from core.enums import MessageKind
from core.notifications.templates import load_templates, render_email, render_message


class TestLoadTemplates:
    def test_loads_yaml_file(self):
        templates = load_templates()
        assert isinstance(templates, dict)

    @pytest.mark.parametrize("kind", list(MessageKind))
    def test_every_kind_has_subject_and_body(self, kind):
        template = load_templates()[kind.value]
        assert "email_subject" in template
        assert "email_body" in template


class TestRenderMessage:
    def test_renders_simple_variable(self):
        assert render_message("Hello {name}!", {"name": "Alice"}) == "Hello Alice!"

    def test_missing_variable_raises(self):
        with pytest.raises(KeyError):
            render_message("Hello {name}!", {})


class TestRenderEmail:
    def test_assignment_notice(self):
        subject, body = render_email(
            MessageKind.assignment_notice,
            {
                "name": "alice",
                "santa_name": "alice",
                "recipient_name": "bob",
                "recipient_gift": "a warm scarf",
                "spending_min": 20,
                "spending_max": 30,
            },
        )

        assert subject == "Secret Santa Event"
        assert "You (alice) are the Secret Santa for bob!" in body
        assert "a warm scarf" in body
        assert "between $20 and $30" in body

    def test_registration_confirmation(self):
        subject, body = render_email(
            MessageKind.registration_confirmation,
            {
                "name": "alice",
                "event_title": "Secret Santa Party",
                "event_link": "https://calendar.example.com/evt",
                "community_line": "",
            },
        )

        assert subject == "Secret Santa Event"
        assert "Thank you for registering, alice!" in body
        assert "[Secret Santa Party](https://calendar.example.com/evt)" in body

    def test_missing_context_raises(self):
        with pytest.raises(KeyError):
            render_email(MessageKind.assignment_notice, {"name": "alice"})
