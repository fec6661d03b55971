# game.py - scoreboard and throw entry for one game
import logging
from typing import List, Optional, Sequence, Set

import pygame

from molkky import common as C
from molkky import storage
from molkky.advisor import advise
from molkky.help_data import create_modal_help
from molkky.pin_detection import PIN_FORMATION, initial_pins
from molkky.rules import (
    MAX_MISSES,
    MAX_PIN,
    TARGET_SCORE,
    GameState,
    MolkkyError,
    ThrowRecord,
    apply_throw,
    create_game,
    player_ranking,
    points_for_knocked,
)
from molkky.ui import ConfirmModal, make_toolbar

logger = logging.getLogger(__name__)

# Number keys score their digit; the three keys right of Q cover 10-12
_KEY_POINTS = {getattr(pygame, f"K_{d}"): d for d in range(10)}
_KEY_POINTS.update({getattr(pygame, f"K_KP{d}"): d for d in range(10)})
_KEY_POINTS.update({pygame.K_q: 10, pygame.K_w: 11, pygame.K_e: 12})


def describe_throw(record: ThrowRecord) -> str:
    if record.missed:
        text = f"{record.player_name} missed"
        if record.eliminated:
            text += f" {MAX_MISSES} times in a row and is out"
        return text
    text = f"{record.player_name} scored {record.points}"
    if record.busted:
        return text + f", went over {TARGET_SCORE} and drops to {record.total_score}"
    return text + f" for {record.total_score}"


class GamePlayScene(C.Scene):
    POINT_H = 56
    POINT_GAP = 10

    def __init__(self, app, state: Optional[GameState] = None, names: Optional[Sequence[str]] = None):
        super().__init__(app)
        if state is None:
            state = create_game(names or ["Player 1", "Player 2"])
        self.state: GameState = state
        self.undo_mgr: C.UndoManager[GameState] = C.UndoManager()
        self.knocked: Set[int] = set()
        self.message: str = ""
        self.hint: str = ""
        self._recorded = state.game_over

        self.help = create_modal_help("rules")
        self.confirm = ConfirmModal()
        self.toolbar = make_toolbar(
            {
                "Undo": {"on_click": self.undo, "enabled": self.can_undo},
                "Strategy": {"on_click": self.open_strategy, "enabled": lambda: not self.state.game_over},
                "Help": {"on_click": lambda: self.help.open()},
                "Menu": {"on_click": self.open_menu},
            },
            margin=(16, (C.TOP_BAR_H - 36) // 2),
        )

        self._point_buttons: List[C.Button] = []
        self.compute_layout()

        self._refresh_hint()
        if state.game_over:
            self.message = self._result_text()

    # ----- layout -----
    def compute_layout(self):
        top = C.TOP_BAR_H + 20
        height = C.SCREEN_H - top - 30
        split = int(C.SCREEN_W * 0.42)
        self.score_panel = pygame.Rect(20, top, split - 30, height)
        self.throw_panel = pygame.Rect(split, top, C.SCREEN_W - split - 20, height)

        gap = self.POINT_GAP
        bw = max(40, min(84, (self.throw_panel.width - 40 - 6 * gap) // 7))
        left = self.throw_panel.left + 20
        y0 = self.throw_panel.top + 70
        self._point_buttons = []
        for points in range(MAX_PIN + 1):
            row, col = divmod(points, 7)
            x = left + col * (bw + gap)
            y = y0 + row * (self.POINT_H + gap)
            label = "Miss" if points == 0 else str(points)
            self._point_buttons.append(C.Button(label, x, y, w=bw, h=self.POINT_H))

        pin_w = max(200, min(320, self.throw_panel.width - 260))
        self.pin_area = pygame.Rect(left, y0 + 2 * (self.POINT_H + gap) + 50, pin_w, int(pin_w * 0.78))
        self.pin_r = max(12, min(24, int(pin_w * 0.075)))
        bx = self.pin_area.right + 20
        side_w = max(120, min(200, self.throw_panel.right - 20 - bx))
        self.b_record = C.Button("Record", bx, self.pin_area.top + 50, w=side_w)
        self.b_clear = C.Button("Clear", bx, self.pin_area.top + 114, w=side_w)

        cx, cy = C.SCREEN_W // 2, C.SCREEN_H // 2
        self.b_rematch = C.Button("Rematch", cx - 150, cy + 170, w=280, center=True)
        self.b_menu = C.Button("Main Menu", cx + 150, cy + 170, w=280, center=True)
        self.toolbar.relayout()

    def get_point_rect(self, points: int) -> pygame.Rect:
        return self._point_buttons[points].rect

    def pin_center(self, number: int):
        x, y = PIN_FORMATION[number]
        return (self.pin_area.left + int(x * self.pin_area.width),
                self.pin_area.top + int(y * self.pin_area.height))

    def get_result_rect(self, key: str) -> Optional[pygame.Rect]:
        btn = {"rematch": self.b_rematch, "menu": self.b_menu}.get(key)
        return btn.rect if btn is not None else None

    # ----- game actions -----
    def can_undo(self) -> bool:
        return self.undo_mgr.can_undo() and not self.state.game_over

    def throw(self, points: int) -> bool:
        try:
            new_state = apply_throw(self.state, points)
        except MolkkyError as exc:
            logger.warning("Rejected throw %r: %s", points, exc)
            self.message = str(exc)
            return False
        self.undo_mgr.push(self.state)
        self.state = new_state
        self.knocked.clear()
        record = new_state.history[-1]
        self.message = describe_throw(record)
        logger.info("Round %d: %s", record.round, self.message)
        if new_state.game_over:
            self._finish_game()
        else:
            storage.save_current_game(new_state)
        self._refresh_hint()
        return True

    def record_knocked(self) -> bool:
        try:
            points = points_for_knocked(sorted(self.knocked))
        except MolkkyError as exc:
            self.message = str(exc)
            return False
        return self.throw(points)

    def toggle_knocked(self, number: int):
        if number in self.knocked:
            self.knocked.remove(number)
        else:
            self.knocked.add(number)

    def undo(self):
        if not self.can_undo():
            return
        snapshot = self.undo_mgr.undo()
        if snapshot is None:
            return
        self.state = snapshot
        self.knocked.clear()
        self.message = "Last throw undone."
        storage.save_current_game(snapshot)
        self._refresh_hint()

    def _finish_game(self):
        if self._recorded:
            return
        self._recorded = True
        if C.get_current_settings().get("auto_save_games", True):
            storage.save_game_to_history(self.state)
        storage.clear_current_game()
        self.message = self._result_text()
        logger.info("Game over after %d rounds: %s", self.state.round, self.message)

    def _result_text(self) -> str:
        if self.state.winner is not None:
            return f"{self.state.winner.name} wins!"
        return "Everyone is out. No winner this time."

    def _refresh_hint(self):
        self.hint = ""
        if self.state.game_over or not C.get_current_settings().get("show_advisor_hints", True):
            return
        self.hint = advise(self.state, initial_pins()).recommendation

    # ----- navigation -----
    def open_strategy(self):
        if self.state.game_over:
            return
        from molkky.scenes.strategy import StrategyScene
        self.next_scene = StrategyScene(self.app, game_scene=self)

    def open_menu(self):
        if self.state.game_over:
            self._goto_menu()
            return
        self.confirm.open(
            "Leave the current game?",
            [("Save And Exit", self._save_and_exit), ("Abandon Game", self._abandon)],
            title="Menu",
        )

    def _save_and_exit(self):
        storage.save_current_game(self.state)
        self._goto_menu()

    def _abandon(self):
        storage.clear_current_game()
        self._goto_menu()

    def _goto_menu(self):
        from molkky.scenes.menu import MainMenuScene
        self.next_scene = MainMenuScene(self.app)

    def rematch(self):
        names = [p.name for p in self.state.players]
        self.next_scene = GamePlayScene(self.app, state=create_game(names))

    # ----- events -----
    def handle_event(self, e):
        if self.help.visible:
            if self.help.handle_event(e):
                return
            if e.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.KEYDOWN):
                return
        if self.confirm.visible:
            self.confirm.handle_event(e)
            return

        if self.toolbar.handle_event(e):
            return

        if self.state.game_over:
            if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                if self.b_rematch.hovered(e.pos):
                    self.rematch()
                elif self.b_menu.hovered(e.pos):
                    self._goto_menu()
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    self.rematch()
                elif e.key == pygame.K_ESCAPE:
                    self._goto_menu()
                elif e.key == pygame.K_h:
                    self.help.open()
            return

        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            for points, btn in enumerate(self._point_buttons):
                if btn.hovered(e.pos):
                    self.throw(points)
                    return
            for number in PIN_FORMATION:
                if C.point_in_circle(e.pos, self.pin_center(number), self.pin_r):
                    self.toggle_knocked(number)
                    return
            if self.b_record.hovered(e.pos):
                self.record_knocked()
            elif self.b_clear.hovered(e.pos):
                self.knocked.clear()
        elif e.type == pygame.KEYDOWN:
            if e.key in _KEY_POINTS:
                self.throw(_KEY_POINTS[e.key])
            elif e.key == pygame.K_u:
                self.undo()
            elif e.key == pygame.K_s:
                self.open_strategy()
            elif e.key == pygame.K_h:
                self.help.open()
            elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER) and self.knocked:
                self.record_knocked()
            elif e.key == pygame.K_BACKSPACE:
                self.knocked.clear()
            elif e.key == pygame.K_ESCAPE:
                self.open_menu()

    # ----- draw -----
    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        self.draw_top_bar(screen, f"Round {self.state.round}")
        self._draw_scoreboard(screen)
        self._draw_throw_panel(screen)
        self.toolbar.draw(screen)
        if self.state.game_over:
            self._draw_result(screen)
        if self.confirm.visible:
            self.confirm.draw(screen)
        if self.help.visible:
            self.help.draw(screen)

    def _draw_scoreboard(self, screen):
        panel = self.score_panel
        C.draw_panel(screen, panel)
        head = C.FONT_UI.render("Scoreboard", True, C.THEME["panel_text"])
        screen.blit(head, (panel.x + 16, panel.y + 12))
        row_h = min(64, (panel.height - 60) // max(1, len(self.state.players)))
        y = panel.y + 52
        for player in self.state.players:
            row = pygame.Rect(panel.x + 10, y, panel.width - 20, row_h - 6)
            if player.is_active:
                pygame.draw.rect(screen, C.THEME["highlight"], row, width=3, border_radius=10)
            color = C.GREY if player.is_eliminated else C.THEME["panel_text"]
            name = C.fit_text(C.FONT_UI, player.name, int(row.width * 0.45))
            t = C.FONT_UI.render(name, True, color)
            screen.blit(t, (row.x + 12, row.centery - t.get_height() // 2))
            if player.is_eliminated:
                tag = C.FONT_SMALL.render("OUT", True, C.RED)
                screen.blit(tag, (row.x + int(row.width * 0.5), row.centery - tag.get_height() // 2))
            else:
                for i in range(MAX_MISSES):
                    col = C.RED if i < player.consecutive_misses else C.LIGHT
                    pygame.draw.circle(screen, col, (row.x + int(row.width * 0.5) + 8 + i * 22, row.centery), 7)
            s = C.FONT_UI.render(f"{player.score} / {TARGET_SCORE}", True, color)
            screen.blit(s, (row.right - s.get_width() - 12, row.centery - s.get_height() // 2))
            y += row_h

    def _draw_throw_panel(self, screen):
        panel = self.throw_panel
        C.draw_panel(screen, panel)
        active = self.state.active_player
        if active is not None:
            need = TARGET_SCORE - active.score
            head = f"{active.name} to throw ({need} to go)"
        else:
            head = "Game over"
        t = C.FONT_UI.render(C.fit_text(C.FONT_UI, head, panel.width - 32), True, C.THEME["panel_text"])
        screen.blit(t, (panel.x + 16, panel.y + 20))

        mp = pygame.mouse.get_pos()
        playing = not self.state.game_over
        for btn in self._point_buttons:
            btn.enabled = playing
            btn.draw(screen, hover=btn.hovered(mp))

        label = C.FONT_SMALL.render("Or pick the knocked pins:", True, C.THEME["panel_text"])
        screen.blit(label, (self.pin_area.x, self.pin_area.top - 30))
        for number in PIN_FORMATION:
            knocked = number in self.knocked
            C.draw_pin(screen, self.pin_center(number), number, self.pin_r, standing=not knocked)

        try:
            preview = points_for_knocked(sorted(self.knocked))
        except MolkkyError:
            preview = 0
        self.b_record.text = f"Record {preview}" if self.knocked else "Record"
        self.b_record.enabled = playing and bool(self.knocked)
        self.b_clear.enabled = playing and bool(self.knocked)
        for btn in (self.b_record, self.b_clear):
            btn.draw(screen, hover=btn.hovered(mp))

        y = self.pin_area.bottom + 20
        for text, color in ((self.message, C.THEME["panel_text"]), (self.hint and f"Hint: {self.hint}", C.GREY)):
            if not text:
                continue
            for line in C.wrap_text(C.FONT_SMALL, text, panel.width - 32)[:2]:
                surf = C.FONT_SMALL.render(line, True, color)
                screen.blit(surf, (panel.x + 16, y))
                y += surf.get_height() + 4

    def _draw_result(self, screen):
        overlay = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 140))
        screen.blit(overlay, (0, 0))
        box = pygame.Rect(0, 0, 680, 440)
        box.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
        C.draw_panel(screen, box, radius=18)
        title = C.FONT_TITLE.render(self._result_text(), True, C.THEME["panel_text"])
        screen.blit(title, (box.centerx - title.get_width() // 2, box.y + 24))
        y = box.y + 90
        for place, player in enumerate(player_ranking(self.state.players)[:5], start=1):
            suffix = "  (out)" if player.is_eliminated else ""
            line = C.FONT_UI.render(f"{place}. {player.name}  {player.score}{suffix}", True, C.THEME["panel_text"])
            screen.blit(line, (box.centerx - line.get_width() // 2, y))
            y += line.get_height() + 6
        rounds = C.FONT_SMALL.render(f"{self.state.round} rounds", True, C.GREY)
        screen.blit(rounds, (box.centerx - rounds.get_width() // 2, y + 4))
        mp = pygame.mouse.get_pos()
        for btn in (self.b_rematch, self.b_menu):
            btn.draw(screen, hover=btn.hovered(mp))
