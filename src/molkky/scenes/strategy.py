# strategy.py - pin board and move advisor for the active player
import logging
import os
from typing import List, Optional

import pygame

from molkky import common as C
from molkky.advisor import OptimalMove, PinState, advise, summarize
from molkky.help_data import create_modal_help
from molkky.pin_detection import PinDetectionError, detect_pins, initial_pins, toggle_pin
from molkky.rules import MolkkyError, TARGET_SCORE
from molkky.ui import make_toolbar

logger = logging.getLogger(__name__)

PHOTO_ENV = "MOLKKY_PHOTO"


class StrategyScene(C.Scene):
    def __init__(self, app, game_scene, pins: Optional[List[PinState]] = None):
        super().__init__(app)
        self.game_scene = game_scene
        self.pins: List[PinState] = list(pins) if pins is not None else initial_pins()
        self.message = "Click a pin to mark it fallen or standing."
        self.move: Optional[OptimalMove] = None

        self.help = create_modal_help("strategy")
        self.toolbar = make_toolbar(
            {
                "Load Photo": {"on_click": self.load_photo},
                "All Standing": {"on_click": self.reset_pins},
                "Help": {"on_click": lambda: self.help.open()},
                "Back": {"on_click": self.back},
            },
            margin=(16, (C.TOP_BAR_H - 36) // 2),
        )
        self.compute_layout()
        self.refresh()

    def compute_layout(self):
        top = C.TOP_BAR_H + 30
        height = C.SCREEN_H - top - 40
        split = int(C.SCREEN_W * 0.48)
        self.board = pygame.Rect(30, top, split - 50, height)
        self.card = pygame.Rect(split, top, C.SCREEN_W - split - 30, height)
        self.pin_r = max(14, min(30, int((self.board.width - 60) * 0.075)))
        self.toolbar.relayout()

    @property
    def state(self):
        return self.game_scene.state

    def pin_center(self, pin: PinState):
        area = self.board.inflate(-60, -60)
        x, y = pin.position
        return (area.left + int(x * area.width), area.top + int(y * area.height))

    def refresh(self):
        try:
            self.move = advise(self.state, self.pins)
        except MolkkyError as exc:
            self.move = None
            self.message = str(exc)

    def toggle(self, number: int):
        self.pins = toggle_pin(self.pins, number)
        self.refresh()

    def reset_pins(self):
        self.pins = initial_pins()
        self.message = "All pins standing."
        self.refresh()

    def load_photo(self):
        path = os.environ.get(PHOTO_ENV) or None
        try:
            self.pins = detect_pins(path)
        except PinDetectionError as exc:
            logger.warning("Pin detection failed: %s", exc)
            self.message = str(exc)
            return
        standing = sum(1 for p in self.pins if p.is_standing)
        source = os.path.basename(path) if path else "demo layout"
        self.message = f"Loaded {source}: {standing} pins standing."
        self.refresh()

    def back(self):
        self.game_scene.next_scene = None
        self.next_scene = self.game_scene

    def handle_event(self, e):
        if self.help.visible:
            if self.help.handle_event(e):
                return
            if e.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.KEYDOWN):
                return
        if self.toolbar.handle_event(e):
            return
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            for pin in self.pins:
                if C.point_in_circle(e.pos, self.pin_center(pin), self.pin_r):
                    self.toggle(pin.number)
                    return
        elif e.type == pygame.KEYDOWN:
            if e.key in (pygame.K_ESCAPE, pygame.K_s):
                self.back()
            elif e.key == pygame.K_l:
                self.load_photo()
            elif e.key == pygame.K_r:
                self.reset_pins()
            elif e.key == pygame.K_h:
                self.help.open()

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        self.draw_top_bar(screen, "Strategy")
        C.draw_panel(screen, self.board)
        targets = set(self.move.target_pins) if self.move else set()
        for pin in self.pins:
            C.draw_pin(screen, self.pin_center(pin), pin.number, self.pin_r,
                       standing=pin.is_standing, highlight=pin.number in targets)

        C.draw_panel(screen, self.card)
        x, y = self.card.x + 20, self.card.y + 18
        active = self.state.active_player
        if active is not None:
            head = f"{active.name}: {active.score} points, {TARGET_SCORE - active.score} to go"
        else:
            head = "No active player"
        t = C.FONT_UI.render(C.fit_text(C.FONT_UI, head, self.card.width - 40), True, C.THEME["panel_text"])
        screen.blit(t, (x, y))
        y += t.get_height() + 16

        if self.move is not None:
            for line in summarize(self.move):
                for part in C.wrap_text(C.FONT_SMALL, line, self.card.width - 40):
                    s = C.FONT_SMALL.render(part, True, C.THEME["panel_text"])
                    screen.blit(s, (x, y))
                    y += s.get_height() + 4
                y += 8

        if self.message:
            y = self.card.bottom - 64
            for part in C.wrap_text(C.FONT_SMALL, self.message, self.card.width - 40)[:2]:
                s = C.FONT_SMALL.render(part, True, C.GREY)
                screen.blit(s, (x, y))
                y += s.get_height() + 4

        self.toolbar.draw(screen)
        if self.help.visible:
            self.help.draw(screen)
