# common.py - shared configuration, theme and scene plumbing for the scorekeeper
from typing import Dict, Generic, List, Optional, Tuple, TypeVar

import pygame

from molkky import storage

# --- Settings ---

_CURRENT_SETTINGS: Dict[str, bool] = dict(storage.DEFAULT_SETTINGS)


def get_current_settings() -> Dict[str, bool]:
    return dict(_CURRENT_SETTINGS)


def load_settings() -> Dict[str, bool]:
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS = storage.load_settings()
    apply_theme(_CURRENT_SETTINGS["dark_mode"])
    return get_current_settings()


def save_settings(new_values: Dict[str, bool]) -> Dict[str, bool]:
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS = storage.save_settings(new_values)
    apply_theme(_CURRENT_SETTINGS["dark_mode"])
    return get_current_settings()


def reset_settings() -> Dict[str, bool]:
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS = storage.reset_settings()
    apply_theme(_CURRENT_SETTINGS["dark_mode"])
    return get_current_settings()


# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1280, 800
TOP_BAR_H = 60

# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 40, 40)
GOLD = (230, 190, 80)
GREEN = (60, 170, 90)
LIGHT = (220, 220, 220)
GREY = (130, 130, 135)

# Birch pins on a grass field; dark mode swaps to a night palette
LIGHT_THEME = {
    "bg": (46, 120, 62),
    "panel": (236, 236, 230),
    "panel_text": (30, 30, 35),
    "text": WHITE,
    "pin": (222, 196, 150),
    "pin_fallen": (120, 104, 80),
    "highlight": GOLD,
}
DARK_THEME = {
    "bg": (24, 32, 40),
    "panel": (52, 58, 66),
    "panel_text": (230, 230, 235),
    "text": (225, 225, 230),
    "pin": (196, 172, 130),
    "pin_fallen": (80, 70, 56),
    "highlight": (240, 170, 60),
}
THEME = dict(LIGHT_THEME)
TABLE_BG = THEME["bg"]


def apply_theme(dark: bool):
    global TABLE_BG
    THEME.clear()
    THEME.update(DARK_THEME if dark else LIGHT_THEME)
    TABLE_BG = THEME["bg"]


# Load any persisted settings and apply now
load_settings()

# Fonts are initialized via setup_fonts() AFTER pygame.init() in __main__.py
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_TITLE = None
FONT_SCORE = None
FONT_PIN = None


def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_TITLE, FONT_SCORE, FONT_PIN
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_TITLE = pygame.font.SysFont(FONT_NAME, 44, bold=True)
    FONT_SCORE = pygame.font.SysFont(FONT_NAME, 56, bold=True)
    FONT_PIN = pygame.font.SysFont(FONT_NAME, 28, bold=True)


# ---------- UI ----------
class Button:
    def __init__(self, text, x, y, w=280, h=48, center=False):
        self.text = text
        self.rect = pygame.Rect(0, 0, w, h)
        self.enabled = True
        if center:
            self.rect.center = (x, y)
        else:
            self.rect.topleft = (x, y)

    def draw(self, screen, hover=False):
        if not self.enabled:
            col = (150, 150, 150)
        else:
            col = GOLD if hover else (200, 200, 200)
        pygame.draw.rect(screen, col, self.rect, border_radius=12)
        pygame.draw.rect(screen, BLACK, self.rect, 2, border_radius=12)
        t = FONT_UI.render(self.text, True, BLACK if self.enabled else (90, 90, 90))
        screen.blit(t, (self.rect.centerx - t.get_width() // 2,
                        self.rect.centery - t.get_height() // 2))

    def hovered(self, mouse_pos):
        return self.enabled and self.rect.collidepoint(mouse_pos)


def centered_column(labels: List[str], top: int, w: int = 280, h: int = 48, gap: int = 12) -> List[Button]:
    """Buttons stacked down the middle of the screen."""
    x = SCREEN_W // 2 - w // 2
    out = []
    for i, label in enumerate(labels):
        out.append(Button(label, x, top + i * (h + gap), w=w, h=h))
    return out


# ---------- Base Scene ----------
class Scene:
    def __init__(self, app):
        self.app = app
        self.next_scene = None
    def handle_event(self, e): pass
    def update(self, dt): pass
    def draw(self, screen): pass
    def draw_top_bar(self, screen, title, extra=""):
        bar = pygame.Surface((SCREEN_W, TOP_BAR_H), pygame.SRCALPHA)
        bar.fill((0, 0, 0, 70))
        screen.blit(bar, (0, 0))
        t = FONT_TITLE.render(title, True, THEME["text"])
        screen.blit(t, (20, 10))
        if extra:
            s = FONT_UI.render(extra, True, THEME["text"])
            screen.blit(s, (SCREEN_W - s.get_width() - 20, TOP_BAR_H // 2 - s.get_height() // 2))


def draw_panel(screen, rect: pygame.Rect, radius: int = 14):
    pygame.draw.rect(screen, THEME["panel"], rect, border_radius=radius)
    pygame.draw.rect(screen, GREY, rect, width=1, border_radius=radius)


T = TypeVar("T")


class UndoManager(Generic[T]):
    """
    Stack of immutable snapshots. Push the state before each change;
    undo pops the most recent snapshot so the caller can restore it.
    """
    def __init__(self):
        self._stack: List[T] = []

    def push(self, snapshot: T):
        self._stack.append(snapshot)

    def can_undo(self) -> bool:
        return len(self._stack) > 0

    def undo(self) -> Optional[T]:
        if self._stack:
            return self._stack.pop()
        return None

    def clear(self):
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)


def fit_text(font, text: str, max_w: int) -> str:
    """Trim ``text`` with an ellipsis until it fits ``max_w`` pixels."""
    if font.size(text)[0] <= max_w:
        return text
    while text and font.size(text + "…")[0] > max_w:
        text = text[:-1]
    return text + "…"


def wrap_text(font, text: str, max_w: int) -> List[str]:
    words = text.split()
    if not words:
        return [""]
    lines: List[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if font.size(candidate)[0] <= max_w:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def point_in_circle(pos: Tuple[int, int], center: Tuple[int, int], radius: int) -> bool:
    dx = pos[0] - center[0]
    dy = pos[1] - center[1]
    return dx * dx + dy * dy <= radius * radius


def draw_pin(screen, center: Tuple[int, int], number: int, radius: int,
             standing: bool = True, highlight: bool = False):
    """Pin seen from above: a birch disc with its number carved on top."""
    fill = THEME["pin"] if standing else THEME["pin_fallen"]
    pygame.draw.circle(screen, fill, center, radius)
    pygame.draw.circle(screen, BLACK, center, radius, width=2)
    if highlight:
        pygame.draw.circle(screen, THEME["highlight"], center, radius + 5, width=4)
    font = FONT_PIN or FONT_UI
    t = font.render(str(number), True, BLACK if standing else (60, 55, 45))
    screen.blit(t, (center[0] - t.get_width() // 2, center[1] - t.get_height() // 2))
