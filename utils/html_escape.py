"""
HTML Escaping for staff alerts sent in Telegram HTML mode.

Notification texts can contain customer-controlled data (cancellation
reasons, special instructions), so they are escaped before being wrapped
in formatting tags.
"""

import html
from typing import Optional


def safe_html(text: Optional[str]) -> str:
    """
    Escapes HTML special characters in user-provided text.

    Examples:
        >>> safe_html("Extra spicy</b><i>")
        "Extra spicy&lt;/b&gt;&lt;i&gt;"

        >>> safe_html(None)
        ""
    """
    if text is None:
        return ""
    return html.escape(str(text), quote=True)
