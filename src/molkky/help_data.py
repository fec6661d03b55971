# help_data.py - the two help pages (rules, strategy board) shown as modals
import json
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

HELP_FILE = os.path.join(os.path.dirname(__file__), "assets", "help", "help_en.json")

_pages: Optional[Dict[str, "HelpPage"]] = None


@dataclass(frozen=True)
class HelpPage:
    title: str
    lines: List[str]
    max_width: int = 900

    @classmethod
    def from_json(cls, page_id: str, raw) -> "HelpPage":
        try:
            title = str(raw["title"])
            lines = [str(line) for line in raw["lines"]]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Help page '{page_id}' needs a title and a list of lines") from exc
        return cls(title, lines, int(raw.get("max_width", 900)))


def help_pages() -> Dict[str, HelpPage]:
    """Pages keyed by id, read from disk on first use."""
    global _pages
    if _pages is None:
        with open(HELP_FILE, "r", encoding="utf-8") as f:
            raw = json.load(f)
        _pages = {key: HelpPage.from_json(key, value) for key, value in raw.items()}
    return _pages


def create_modal_help(page_id: str):
    from molkky.ui import ModalHelp

    page = help_pages()[page_id]
    return ModalHelp(page.title, list(page.lines), max_width=page.max_width)
