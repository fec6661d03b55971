import math
import pygame
from molkky import common as C
from molkky.pin_detection import PIN_FORMATION


class TitleScene(C.Scene):
    def __init__(self, app):
        super().__init__(app)
        self._prompt_text = "Click or press Enter/Space to play (Esc quits)"
        self._pulse_period_ms = 1600  # slow flash
        self._pin_radius = 26
        self._formation_rect = pygame.Rect(0, 0, 0, 0)
        self.compute_layout()

    def compute_layout(self):
        w = min(420, int(C.SCREEN_W * 0.4))
        h = int(w * 0.8)
        self._formation_rect = pygame.Rect(0, 0, w, h)
        self._formation_rect.centerx = C.SCREEN_W // 2
        self._formation_rect.centery = C.SCREEN_H // 2 + 10

    def _goto_menu(self):
        from molkky.scenes.menu import MainMenuScene
        self.next_scene = MainMenuScene(self.app)

    def handle_event(self, e):
        # Enter/Space: go to menu; Esc or Q: confirm quit
        if e.type == pygame.KEYDOWN:
            if e.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._goto_menu(); return
            elif e.key in (pygame.K_ESCAPE, pygame.K_q):
                pygame.event.post(pygame.event.Event(pygame.QUIT))
                return
        if e.type == pygame.MOUSEBUTTONDOWN:
            if e.button in (1, 2, 3):
                self._goto_menu(); return

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        title = C.FONT_TITLE.render("Mölkky Scorekeeper", True, C.THEME["text"])
        screen.blit(title, (C.SCREEN_W // 2 - title.get_width() // 2, self._formation_rect.top - title.get_height() - 30))

        r = self._formation_rect
        for number, (x, y) in PIN_FORMATION.items():
            center = (r.left + int(x * r.width), r.top + int(y * r.height))
            C.draw_pin(screen, center, number, self._pin_radius)

        prompt = C.FONT_UI.render(self._prompt_text, True, C.THEME["text"])
        # Pulse alpha between ~110 and 255
        t = pygame.time.get_ticks() % self._pulse_period_ms
        phase = (t / self._pulse_period_ms) * 2 * math.pi
        alpha = int(110 + 145 * (0.5 + 0.5 * math.sin(phase)))
        prompt.set_alpha(alpha)
        rect = prompt.get_rect()
        rect.centerx = C.SCREEN_W // 2
        rect.top = r.bottom + 24
        screen.blit(prompt, rect)
