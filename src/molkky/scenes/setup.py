# setup.py - player roster entry before a game starts
from typing import List, Optional

import pygame

from molkky import common as C
from molkky.rules import InvalidPlayerError, create_game

MAX_PLAYERS = 10
MAX_NAME_LEN = 18


class GameSetupScene(C.Scene):
    # Receives every key, not just the global allowlist
    text_entry = True

    ROW_W = 440

    def __init__(self, app, names: Optional[List[str]] = None):
        super().__init__(app)
        self.names: List[str] = list(names) if names else ["Player 1", "Player 2"]
        self.selected = len(self.names) - 1
        self.message = ""
        cx = C.SCREEN_W // 2
        by = C.SCREEN_H - 110
        bw, gap = 200, 16
        left = cx - (bw * 3 + gap * 2) // 2
        self.b_add = C.Button("Add Player", left, by, w=bw)
        self.b_start = C.Button("Start Game", left + bw + gap, by, w=bw)
        self.b_back = C.Button("Back", left + 2 * (bw + gap), by, w=bw)

    # ----- layout -----
    def _row_pitch(self) -> int:
        # Ten rows have to fit between the hint line and the buttons
        room = self.b_add.rect.top - 60 - 140
        return max(28, min(58, room // MAX_PLAYERS))

    def row_rect(self, index: int) -> pygame.Rect:
        pitch = self._row_pitch()
        top = 140 + index * pitch
        return pygame.Rect(C.SCREEN_W // 2 - self.ROW_W // 2, top, self.ROW_W, pitch - 8)

    def remove_rect(self, index: int) -> pygame.Rect:
        row = self.row_rect(index)
        r = pygame.Rect(0, 0, 36, 36)
        r.midleft = (row.right + 12, row.centery)
        return r

    def get_button_rect(self, key: str) -> Optional[pygame.Rect]:
        btn = {"add": self.b_add, "start": self.b_start, "back": self.b_back}.get(key)
        return btn.rect if btn is not None else None

    # ----- roster editing -----
    def add_player(self):
        if len(self.names) >= MAX_PLAYERS:
            self.message = f"At most {MAX_PLAYERS} players."
            return
        self.names.append(f"Player {len(self.names) + 1}")
        self.selected = len(self.names) - 1
        self.message = ""

    def remove_player(self, index: int):
        if len(self.names) <= 1 or not 0 <= index < len(self.names):
            return
        del self.names[index]
        self.selected = min(self.selected, len(self.names) - 1)

    def type_text(self, text: str):
        if not 0 <= self.selected < len(self.names):
            return
        current = self.names[self.selected]
        self.names[self.selected] = (current + text)[:MAX_NAME_LEN]

    def backspace(self):
        if 0 <= self.selected < len(self.names):
            self.names[self.selected] = self.names[self.selected][:-1]

    def start_game(self):
        names = [n.strip() for n in self.names if n.strip()]
        try:
            state = create_game(names)
        except InvalidPlayerError as exc:
            self.message = str(exc)
            return
        from molkky.scenes.game import GamePlayScene
        self.next_scene = GamePlayScene(self.app, state=state)

    def _back(self):
        from molkky.scenes.menu import MainMenuScene
        self.next_scene = MainMenuScene(self.app)

    # ----- events -----
    def handle_event(self, e):
        if e.type == pygame.TEXTINPUT:
            self.type_text(e.text)
            return
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            pos = e.pos
            if self.b_add.hovered(pos):
                self.add_player(); return
            if self.b_start.hovered(pos):
                self.start_game(); return
            if self.b_back.hovered(pos):
                self._back(); return
            for i in range(len(self.names)):
                if self.remove_rect(i).collidepoint(pos):
                    self.remove_player(i); return
                if self.row_rect(i).collidepoint(pos):
                    self.selected = i; return
        elif e.type == pygame.KEYDOWN:
            if e.key == pygame.K_ESCAPE:
                self._back()
            elif e.key == pygame.K_BACKSPACE:
                self.backspace()
            elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                if getattr(e, "mod", 0) & pygame.KMOD_CTRL:
                    self.start_game()
                else:
                    self.add_player()
            elif e.key == pygame.K_TAB and self.selected == len(self.names) - 1:
                self.add_player()
            elif e.key in (pygame.K_TAB, pygame.K_DOWN):
                self.selected = (self.selected + 1) % len(self.names)
            elif e.key == pygame.K_UP:
                self.selected = (self.selected - 1) % len(self.names)
            elif e.key == pygame.K_DELETE:
                self.remove_player(self.selected)

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        self.draw_top_bar(screen, "New Game", f"{len(self.names)} / {MAX_PLAYERS} players")
        hint = C.FONT_SMALL.render(
            "Click a row and type. Enter or Tab on the last row adds a player, Ctrl+Enter starts.",
            True, C.THEME["text"],
        )
        screen.blit(hint, (C.SCREEN_W // 2 - hint.get_width() // 2, C.TOP_BAR_H + 30))

        for i, name in enumerate(self.names):
            row = self.row_rect(i)
            C.draw_panel(screen, row, radius=10)
            if i == self.selected:
                pygame.draw.rect(screen, C.THEME["highlight"], row, width=3, border_radius=10)
            label = C.FONT_UI.render(f"{i + 1}.", True, C.THEME["panel_text"])
            screen.blit(label, (row.x + 12, row.centery - label.get_height() // 2))
            shown = name + ("|" if i == self.selected else "")
            t = C.FONT_UI.render(C.fit_text(C.FONT_UI, shown, row.width - 70), True, C.THEME["panel_text"])
            screen.blit(t, (row.x + 56, row.centery - t.get_height() // 2))
            if len(self.names) > 1:
                rr = self.remove_rect(i)
                pygame.draw.rect(screen, (200, 90, 90), rr, border_radius=8)
                x = C.FONT_UI.render("X", True, C.WHITE)
                screen.blit(x, (rr.centerx - x.get_width() // 2, rr.centery - x.get_height() // 2))

        if self.message:
            m = C.FONT_UI.render(self.message, True, C.GOLD)
            screen.blit(m, (C.SCREEN_W // 2 - m.get_width() // 2, self.b_add.rect.top - 44))

        mp = pygame.mouse.get_pos()
        for b in (self.b_add, self.b_start, self.b_back):
            b.draw(screen, hover=b.hovered(mp))
