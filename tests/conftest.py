import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point every test at a fresh data directory with default settings."""
    path = tmp_path / "data"
    monkeypatch.setenv("MOLKKY_DATA_DIR", str(path))
    monkeypatch.delenv("MOLKKY_PHOTO", raising=False)
    from molkky import common as C
    C.load_settings()
    return path


class DummyFont:
    def __init__(self, size):
        self._size = max(1, int(size) if size else 1)

    def render(self, text, *_, **__):
        import pygame

        width = max(1, len(str(text)) * max(self._size // 2, 1))
        height = max(1, self._size)
        return pygame.Surface((width, height), pygame.SRCALPHA)

    def size(self, text):
        width = max(1, len(str(text)) * max(self._size // 2, 1))
        return width, max(1, self._size)

    def get_height(self):
        return max(1, self._size)


def _make_font(*args, size=None, **kwargs):
    if size is None and len(args) > 1:
        size = args[1]
    return DummyFont(size or 24)


@pytest.fixture
def dummy_fonts(monkeypatch):
    """Swap pygame fonts for fixed-width stand-ins so scenes draw headless."""
    import pygame

    monkeypatch.setattr(pygame.font, "SysFont", _make_font, raising=False)
    monkeypatch.setattr(pygame.font, "Font", _make_font, raising=False)
    monkeypatch.setattr(pygame.font, "get_default_font", lambda: "dummy", raising=False)
    from molkky import ui
    monkeypatch.setattr(ui, "FONT", DummyFont(18))
    return DummyFont


@pytest.fixture
def scene_env(dummy_fonts, monkeypatch):
    """Fonts set up and a fixed mouse position for driving scenes directly."""
    import pygame
    from molkky import common as C

    monkeypatch.setattr(C, "SCREEN_W", 1280)
    monkeypatch.setattr(C, "SCREEN_H", 800)
    C.setup_fonts()
    mouse = [0, 0]
    monkeypatch.setattr(pygame.mouse, "get_pos", lambda: (mouse[0], mouse[1]))
    return mouse
