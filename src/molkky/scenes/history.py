# history.py - list of finished games
from typing import Any, Dict, List

import pygame

from molkky import common as C
from molkky import storage
from molkky.ui import ConfirmModal


def format_entry(item: Dict[str, Any]) -> List[str]:
    """Two display lines for one history item."""
    date = str(item.get("date", ""))[:16].replace("T", " ")
    winner = item.get("winner") or "No winner"
    rounds = item.get("rounds", "?")
    scores = ", ".join(
        f"{s.get('name', '?')} {s.get('score', 0)}"
        for s in item.get("final_scores", [])
        if isinstance(s, dict)
    )
    return [f"{date}   {winner}   ({rounds} rounds)", scores]


class HistoryScene(C.Scene):
    ROW_H = 72

    def __init__(self, app):
        super().__init__(app)
        self.entries = storage.get_game_history()
        self.scroll = 0
        self.confirm = ConfirmModal()
        self.list_rect = pygame.Rect(120, C.TOP_BAR_H + 30, C.SCREEN_W - 240, C.SCREEN_H - C.TOP_BAR_H - 140)
        by = C.SCREEN_H - 80
        cx = C.SCREEN_W // 2
        self.b_clear = C.Button("Clear History", cx - 216, by, w=200)
        self.b_back = C.Button("Back", cx + 16, by, w=200)
        self.b_clear.enabled = bool(self.entries)

    def get_button_rect(self, key: str):
        return {"clear": self.b_clear, "back": self.b_back}[key].rect

    def _visible_rows(self) -> int:
        return max(1, (self.list_rect.height - 20) // self.ROW_H)

    def _scroll_by(self, delta: int):
        max_scroll = max(0, len(self.entries) - self._visible_rows())
        self.scroll = max(0, min(max_scroll, self.scroll + delta))

    def ask_clear(self):
        self.confirm.open(
            "Delete every saved game from the history?",
            [("Clear History", self.clear)],
            title="Clear History",
        )

    def clear(self):
        storage.clear_game_history()
        self.entries = []
        self.scroll = 0
        self.b_clear.enabled = False

    def _back(self):
        from molkky.scenes.menu import MainMenuScene
        self.next_scene = MainMenuScene(self.app)

    def handle_event(self, e):
        if self.confirm.visible:
            self.confirm.handle_event(e)
            return
        if e.type == pygame.MOUSEWHEEL:
            self._scroll_by(-e.y)
        elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            if self.b_clear.hovered(e.pos):
                self.ask_clear()
            elif self.b_back.hovered(e.pos):
                self._back()
        elif e.type == pygame.KEYDOWN:
            if e.key == pygame.K_ESCAPE:
                self._back()
            elif e.key == pygame.K_UP:
                self._scroll_by(-1)
            elif e.key == pygame.K_DOWN:
                self._scroll_by(1)

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        self.draw_top_bar(screen, "History", f"{len(self.entries)} games")
        C.draw_panel(screen, self.list_rect)
        if not self.entries:
            t = C.FONT_UI.render("No finished games yet.", True, C.THEME["panel_text"])
            screen.blit(t, (self.list_rect.centerx - t.get_width() // 2, self.list_rect.centery - t.get_height() // 2))
        y = self.list_rect.y + 10
        width = self.list_rect.width - 40
        for item in self.entries[self.scroll:self.scroll + self._visible_rows()]:
            top, bottom = format_entry(item)
            a = C.FONT_UI.render(C.fit_text(C.FONT_UI, top, width), True, C.THEME["panel_text"])
            b = C.FONT_SMALL.render(C.fit_text(C.FONT_SMALL, bottom, width), True, C.GREY)
            screen.blit(a, (self.list_rect.x + 20, y + 6))
            screen.blit(b, (self.list_rect.x + 20, y + 10 + a.get_height()))
            y += self.ROW_H
            pygame.draw.line(screen, C.LIGHT, (self.list_rect.x + 14, y - 2), (self.list_rect.right - 14, y - 2))

        mp = pygame.mouse.get_pos()
        for b in (self.b_clear, self.b_back):
            b.draw(screen, hover=b.hovered(mp))
        if self.confirm.visible:
            self.confirm.draw(screen)
