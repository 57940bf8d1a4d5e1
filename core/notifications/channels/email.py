"""SendGrid email delivery channel."""

import asyncio
import html
import logging
import re
from dataclasses import dataclass

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)

# Markdown links [text](url); a backslash-escaped bracket never opens or closes one
MARKDOWN_LINK_PATTERN = re.compile(
    r"(?<!\\)\[((?:\\.|[^\]\\])+)\]\(((?:\\.|[^)\\])+)\)"
)
MARKDOWN_ESCAPE_PATTERN = re.compile(r"\\([\\\[\]()])")
MARKDOWN_SPECIAL_PATTERN = re.compile(r"([\\\[\]()])")


def escape_markdown(text: str) -> str:
    """Backslash-escape link syntax so participant text can't form a link."""
    return MARKDOWN_SPECIAL_PATTERN.sub(r"\\\1", text)


def _unescape_markdown(text: str) -> str:
    return MARKDOWN_ESCAPE_PATTERN.sub(r"\1", text)


@dataclass
class EmailMessage:
    """Email message data."""

    to_email: str
    subject: str
    body: str


@dataclass
class SendResult:
    """Outcome of a single delivery attempt."""

    success: bool
    reason: str | None = None


def markdown_to_html(text: str) -> str:
    """
    Convert markdown-style links to HTML and wrap in basic HTML structure.

    Converts [text](url) to <a href="url">text</a> and preserves line breaks.
    Everything else is HTML-escaped, and escaped link syntax stays literal.
    """

    def _anchor(match: re.Match) -> str:
        label, url = (_unescape_markdown(g) for g in match.groups())
        return f'<a href="{url}">{label}</a>'

    html_body = MARKDOWN_LINK_PATTERN.sub(_anchor, html.escape(text))
    html_body = _unescape_markdown(html_body).replace("\n", "<br>\n")

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.5; color: #333;">
{html_body}
</body>
</html>"""


def markdown_to_plain_text(text: str) -> str:
    """
    Convert markdown-style links to plain text with URL in parentheses.

    Converts [text](url) to text (url) for plain text email fallback.
    """
    return _unescape_markdown(MARKDOWN_LINK_PATTERN.sub(r"\1 (\2)", text))


class SendGridGateway:
    """
    Outbound e-mail via SendGrid.

    One call is one attempt; retries belong to the dispatcher.
    """

    def __init__(self, api_key: str | None, from_email: str, from_name: str):
        self._api_key = api_key
        self._from_email = from_email
        self._from_name = from_name
        self._client: SendGridAPIClient | None = None

    def _get_client(self) -> SendGridAPIClient | None:
        if self._client is None and self._api_key:
            self._client = SendGridAPIClient(self._api_key)
        return self._client

    def _build_mail(self, message: EmailMessage) -> Mail:
        return Mail(
            from_email=(self._from_email, self._from_name),
            to_emails=message.to_email,
            subject=message.subject,
            plain_text_content=markdown_to_plain_text(message.body),
            html_content=markdown_to_html(message.body),
        )

    async def send(self, message: EmailMessage) -> SendResult:
        """
        Send an email via SendGrid.

        The body can contain markdown-style links [text](url) which will be
        converted to HTML links. Both plain text and HTML versions are sent.
        """
        client = self._get_client()
        if not client:
            return SendResult(False, "SendGrid not configured (SENDGRID_API_KEY not set)")

        try:
            mail = self._build_mail(message)
            response = await asyncio.to_thread(client.send, mail)
        except Exception as e:
            return SendResult(False, str(e))

        if response.status_code in (200, 201, 202):
            logger.info(f"Email sent to {message.to_email}: {response.status_code}")
            return SendResult(True)
        return SendResult(False, f"SendGrid returned status {response.status_code}")
