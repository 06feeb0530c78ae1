"""
Export helpers
Format the accumulated IMEI list for clipboard, email and files
"""

from pathlib import Path
from typing import Iterable, Union
from urllib.parse import quote

DEFAULT_SUBJECT = "IMEI Scanner Results"

# Characters encodeURIComponent leaves alone besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


def as_text(imeis: Iterable[str]) -> str:
    """One IMEI per line, in the given order, no trailing newline."""
    return "\n".join(imeis)


def mailto_url(imeis: Iterable[str], subject: str = DEFAULT_SUBJECT, recipient: str = "") -> str:
    """Build a ``mailto:`` link whose body is the newline-joined IMEI list."""
    body = as_text(imeis)
    return (
        f"mailto:{quote(recipient, safe='@')}"
        f"?subject={quote(subject, safe=_URI_COMPONENT_SAFE)}"
        f"&body={quote(body, safe=_URI_COMPONENT_SAFE)}"
    )


def save_text(imeis: Iterable[str], path: Union[str, Path]) -> Path:
    """Write the list to ``path`` (UTF-8, trailing newline if non-empty)."""
    path = Path(path)
    text = as_text(imeis)
    path.write_text(text + "\n" if text else "", encoding="utf-8")
    return path
