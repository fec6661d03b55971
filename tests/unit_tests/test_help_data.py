import pytest

from molkky import help_data
from molkky.help_data import HelpPage, create_modal_help, help_pages


def test_both_help_pages_load() -> None:
    pages = help_pages()
    assert set(pages) == {"rules", "strategy"}
    assert pages["rules"].title == "Mölkky Rules"
    assert any("exactly 50" in line for line in pages["rules"].lines)
    assert pages["strategy"].max_width == 820


def test_help_pages_are_read_once(monkeypatch) -> None:
    first = help_pages()
    monkeypatch.setattr(help_data, "HELP_FILE", "missing.json")
    assert help_pages() is first


def test_page_without_lines_is_rejected() -> None:
    with pytest.raises(ValueError, match="broken"):
        HelpPage.from_json("broken", {"title": "Broken"})


def test_modal_help_uses_page_text(scene_env) -> None:
    modal = create_modal_help("strategy")
    assert modal.title == "Strategy Board"
    assert modal.max_width == 820
    assert not modal.visible
