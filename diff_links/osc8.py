"""OSC 8 terminal hyperlink encoding."""

from __future__ import annotations

OSC = "\x1b]"
ST = "\x1b\\"


def format_osc8_hyperlink(url: str, text: str) -> str:
    """Wrap `text` in an OSC 8 hyperlink pointing at `url`.

    Neither argument is escaped; control characters in either one can break
    the sequence.
    """
    return f"{OSC}8;;{url}{ST}{text}{OSC}8;;{ST}"
