import pygame
from molkky import common as C


SETTING_LABELS = (
    ("dark_mode", "Dark mode"),
    ("auto_save_games", "Save finished games to history"),
    ("show_advisor_hints", "Show advisor hints during play"),
)


class ToggleButton:
    def __init__(self, label: str, w: int = 520, h: int = 48, selected: bool = False):
        self.label = label
        self.rect = pygame.Rect(0, 0, w, h)
        self.selected = selected

    def set_center(self, x: int, y: int):
        self.rect.center = (x, y)

    def hovered(self, pos) -> bool:
        return self.rect.collidepoint(pos)

    def draw(self, screen):
        bg_sel = (190, 190, 205)  # darker when selected
        bg = (230, 230, 235)
        border = (160, 160, 170)
        fill = bg_sel if self.selected else bg
        pygame.draw.rect(screen, fill, self.rect, border_radius=10)
        pygame.draw.rect(screen, border, self.rect, width=1, border_radius=10)
        t = C.FONT_UI.render(self.label, True, (30, 30, 35))
        screen.blit(t, (self.rect.x + 18, self.rect.centery - t.get_height() // 2))
        state = C.FONT_UI.render("On" if self.selected else "Off", True, C.GREEN if self.selected else C.RED)
        screen.blit(state, (self.rect.right - state.get_width() - 18, self.rect.centery - state.get_height() // 2))


class SettingsScene(C.Scene):
    def __init__(self, app):
        super().__init__(app)
        self.title_text = "Settings"
        self.message = ""

        cx = C.SCREEN_W // 2
        y = 220
        self.toggles = {}
        for key, label in SETTING_LABELS:
            btn = ToggleButton(label)
            btn.set_center(cx, y)
            self.toggles[key] = btn
            y += 70
        self._sync_from(C.get_current_settings())

        # Buttons (center group horizontally)
        by = y + 60
        bw = 200
        gap = 16
        total = bw * 3 + gap * 2
        left_x = cx - total // 2
        self.b_save = C.Button("Save", left_x, by, w=bw, h=48, center=False)
        self.b_reset = C.Button("Reset", left_x + bw + gap, by, w=bw, h=48, center=False)
        self.b_back = C.Button("Back", left_x + 2 * (bw + gap), by, w=bw, h=48, center=False)

    def _sync_from(self, settings):
        for key, btn in self.toggles.items():
            btn.selected = bool(settings.get(key, False))

    def selected_values(self):
        return {key: btn.selected for key, btn in self.toggles.items()}

    def toggle(self, key: str):
        self.toggles[key].selected = not self.toggles[key].selected

    def get_toggle_rect(self, key: str):
        return self.toggles[key].rect

    def _apply_and_save(self):
        C.save_settings(self.selected_values())
        # After saving, return to main menu
        self._goto_menu()

    def _reset(self):
        self._sync_from(C.reset_settings())
        self.message = "Settings restored to defaults."

    def _goto_menu(self):
        from molkky.scenes.menu import MainMenuScene
        self.next_scene = MainMenuScene(self.app)

    def handle_event(self, e):
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            for key, btn in self.toggles.items():
                if btn.hovered(e.pos):
                    self.toggle(key)
                    return
            if self.b_save.hovered(e.pos):
                self._apply_and_save()
                return
            if self.b_reset.hovered(e.pos):
                self._reset()
                return
            if self.b_back.hovered(e.pos):
                self._goto_menu()
                return
        elif e.type == pygame.KEYDOWN and e.key == pygame.K_ESCAPE:
            self._goto_menu()

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        title = C.FONT_TITLE.render(self.title_text, True, C.THEME["text"])
        screen.blit(title, (C.SCREEN_W // 2 - title.get_width() // 2, 100))

        for btn in self.toggles.values():
            btn.draw(screen)

        if self.message:
            m = C.FONT_SMALL.render(self.message, True, C.THEME["text"])
            screen.blit(m, (C.SCREEN_W // 2 - m.get_width() // 2, self.b_save.rect.top - 36))

        mp = pygame.mouse.get_pos()
        for b in (self.b_save, self.b_reset, self.b_back):
            b.draw(screen, hover=b.hovered(mp))
