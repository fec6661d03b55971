# menu.py - Main menu
from typing import Dict, Optional

import pygame

from molkky import common as C
from molkky import storage


MENU_ENTRIES = (
    ("new", "New Game"),
    ("continue", "Continue"),
    ("history", "History"),
    ("settings", "Settings"),
    ("quit", "Quit"),
)


class MainMenuScene(C.Scene):
    def __init__(self, app):
        super().__init__(app)
        labels = [label for _, label in MENU_ENTRIES]
        buttons = C.centered_column(labels, top=240)
        self._buttons: Dict[str, C.Button] = {
            key: btn for (key, _), btn in zip(MENU_ENTRIES, buttons)
        }
        self._buttons["continue"].enabled = storage.has_saved_game()

    def get_entry_rect(self, key: str) -> Optional[pygame.Rect]:
        btn = self._buttons.get(key)
        return btn.rect if btn is not None else None

    def _activate(self, key: str):
        if key == "new":
            from molkky.scenes.setup import GameSetupScene
            self.next_scene = GameSetupScene(self.app)
        elif key == "continue":
            state = storage.load_current_game()
            if state is not None and not state.game_over:
                from molkky.scenes.game import GamePlayScene
                self.next_scene = GamePlayScene(self.app, state=state)
        elif key == "history":
            from molkky.scenes.history import HistoryScene
            self.next_scene = HistoryScene(self.app)
        elif key == "settings":
            from molkky.scenes.settings import SettingsScene
            self.next_scene = SettingsScene(self.app)
        elif key == "quit":
            pygame.event.post(pygame.event.Event(pygame.QUIT))

    def handle_event(self, e):
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            for key, btn in self._buttons.items():
                if btn.hovered(e.pos):
                    self._activate(key)
                    return
        elif e.type == pygame.KEYDOWN:
            if e.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_n):
                self._activate("new")
            elif e.key == pygame.K_ESCAPE:
                from molkky.scenes.title import TitleScene
                self.next_scene = TitleScene(self.app)

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        title = C.FONT_TITLE.render("Mölkky Scorekeeper", True, C.THEME["text"])
        screen.blit(title, (C.SCREEN_W // 2 - title.get_width() // 2, 120))
        mp = pygame.mouse.get_pos()
        for btn in self._buttons.values():
            btn.draw(screen, hover=btn.hovered(mp))
