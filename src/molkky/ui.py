# ui.py - toolbar buttons and modal overlays shared by the game and strategy scenes
import pygame
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from molkky import common as C

pygame.font.init()

BUTTON_H = 36
BUTTON_PAD_X = 12
BUTTON_GAP = 8

# Colors
BTN_BG = (230, 230, 235)
BTN_BG_HOVER = (215, 215, 225)
BTN_BG_DISABLED = (200, 200, 205)
BTN_BORDER = (160, 160, 170)
BTN_TEXT = (30, 30, 35)
BTN_TEXT_DISABLED = (120, 120, 130)

FONT = pygame.font.SysFont("Segoe UI", 18)


class Button:
    """Toolbar button; ``enabled_fn`` is polled on every click and draw."""

    def __init__(self, label: str, on_click: Callable[[], None],
                 enabled_fn: Optional[Callable[[], bool]] = None):
        self.label = label
        self.on_click = on_click
        self.enabled_fn = enabled_fn
        self._hover = False
        w = FONT.render(label, True, BTN_TEXT).get_width() + BUTTON_PAD_X * 2
        self.rect = pygame.Rect(0, 0, w, BUTTON_H)

    def is_enabled(self) -> bool:
        return self.enabled_fn is None or bool(self.enabled_fn())

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEMOTION:
            self._hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos) and self.is_enabled():
                self.on_click()
                return True
        return False

    def draw(self, surface: pygame.Surface):
        enabled = self.is_enabled()
        if not enabled:
            bg = BTN_BG_DISABLED
        else:
            bg = BTN_BG_HOVER if self._hover else BTN_BG
        pygame.draw.rect(surface, bg, self.rect, border_radius=8)
        pygame.draw.rect(surface, BTN_BORDER, self.rect, width=1, border_radius=8)
        text = FONT.render(self.label, True, BTN_TEXT if enabled else BTN_TEXT_DISABLED)
        surface.blit(text, text.get_rect(center=self.rect.center))


class Toolbar:
    """A row of buttons pinned to the top right corner of the window."""

    def __init__(self, buttons: List[Button], margin: Tuple[int, int] = (12, 12)):
        self.buttons = buttons
        self.margin = margin
        self.relayout()

    def relayout(self):
        # Re-run after a window resize
        mx, my = self.margin
        total = sum(b.rect.width for b in self.buttons) + BUTTON_GAP * max(0, len(self.buttons) - 1)
        x = C.SCREEN_W - mx - total
        for b in self.buttons:
            b.rect.topleft = (x, my)
            x += b.rect.width + BUTTON_GAP

    def button(self, label: str) -> Optional[Button]:
        return next((b for b in self.buttons if b.label == label), None)

    def handle_event(self, event: pygame.event.Event) -> bool:
        return any(b.handle_event(event) for b in self.buttons)

    def draw(self, surface: pygame.Surface):
        for b in self.buttons:
            b.draw(surface)


def make_toolbar(actions: Dict[str, Dict], *, margin: Tuple[int, int] = (12, 12)) -> Toolbar:
    """Build a toolbar from ``{label: {"on_click": fn, "enabled": fn}}``, in order."""
    buttons = [Button(label, cfg["on_click"], cfg.get("enabled")) for label, cfg in actions.items()]
    return Toolbar(buttons, margin=margin)


class ModalHelp:
    """
    Simple modal help overlay: dims background, shows a centered panel with
    title, wrapped text, and a Close button. Consume ESC/Enter/H and clicks
    on Close to dismiss.
    """
    def __init__(self, title: str, lines: Sequence[str], max_width: int = 900):
        self.title = title
        self.lines = list(lines) if lines else []
        self.visible = False
        self.max_width = max_width
        # Close button; position is computed per-draw based on panel rect
        self._close_btn = C.Button("Close", 0, 0, w=180, h=44, center=False)

    def open(self):
        self.visible = True

    def close(self):
        self.visible = False

    def _wrap_lines(self, text_lines: List[str], max_w: int) -> List[pygame.Surface]:
        """Wrap provided lines to fit max_w using C.FONT_UI, return rendered surfaces."""
        out: List[pygame.Surface] = []
        font = C.FONT_UI if C.FONT_UI is not None else pygame.font.SysFont(pygame.font.get_default_font(), 24, bold=True)
        for raw in (text_lines or []):
            if not raw:
                # Blank line spacer
                out.append(font.render(" ", True, (30, 30, 35)))
                continue
            for line in C.wrap_text(font, raw, max_w):
                out.append(font.render(line, True, (30, 30, 35)))
        return out

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Return True if the event was handled/consumed."""
        if not self.visible:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_ESCAPE, pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_h):
                self.close()
            return True  # swallow other keys while visible
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._layout()
            if self._close_btn.hovered(event.pos):
                self.close()
            return True  # swallow other clicks while visible
        return False

    def _layout(self) -> Tuple[pygame.Rect, List[pygame.Surface]]:
        pad = 20
        panel_w = min(self.max_width, max(400, C.SCREEN_W - 2 * 40))
        wrapped = self._wrap_lines(self.lines, max_w=panel_w - 2 * pad)
        title_font = C.FONT_TITLE if C.FONT_TITLE is not None else pygame.font.SysFont(pygame.font.get_default_font(), 40, bold=True)
        title_surf = title_font.render(self.title, True, (20, 20, 25))
        text_h = sum(s.get_height() for s in wrapped)
        btn_h = self._close_btn.rect.height
        panel_h = min(C.SCREEN_H - 120, 40 + title_surf.get_height() + 10 + text_h + 12 + btn_h + 24)
        panel = pygame.Rect(0, 0, panel_w, panel_h)
        panel.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
        bx = panel.centerx - self._close_btn.rect.width // 2
        by = panel.bottom - self._close_btn.rect.height - 14
        self._close_btn.rect.topleft = (bx, by)
        return panel, [title_surf] + wrapped

    def draw(self, surface: pygame.Surface):
        if not self.visible:
            return
        dim = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
        dim.fill((0, 0, 0, 160))
        surface.blit(dim, (0, 0))

        panel, items = self._layout()
        pygame.draw.rect(surface, (240, 240, 245), panel, border_radius=12)
        pygame.draw.rect(surface, (120, 120, 130), panel, width=1, border_radius=12)

        y = panel.top + 16
        title_surf = items[0]
        surface.blit(title_surf, (panel.centerx - title_surf.get_width() // 2, y))
        y += title_surf.get_height() + 10
        for s in items[1:]:
            if y + s.get_height() > self._close_btn.rect.top - 8:
                break
            surface.blit(s, (panel.left + 20, y))
            y += s.get_height()

        mp = pygame.mouse.get_pos()
        self._close_btn.draw(surface, hover=self._close_btn.hovered(mp))


class ConfirmModal:
    """Yes/no style dialog. Each option is a (label, callback) pair; Cancel just closes."""

    WIDTH = 520
    BUTTON_W = 200
    BUTTON_H = 48

    def __init__(self):
        self.visible = False
        self.title = "Warning"
        self.message = ""
        self._options: List[Tuple[str, Callable[[], None]]] = []
        self._cancel_label: Optional[str] = "Cancel"

    def open(
        self,
        message: str,
        options: Sequence[Tuple[str, Callable[[], None]]],
        *,
        title: str = "Warning",
        cancel_label: Optional[str] = "Cancel",
    ):
        self.message = message
        self.title = title
        self._options = list(options)
        self._cancel_label = cancel_label
        self.visible = True

    def close(self):
        self.visible = False
        self._options = []

    def geometry(self) -> Tuple[pygame.Rect, List[pygame.Rect], Optional[pygame.Rect]]:
        labels = [label for label, _ in self._options]
        if self._cancel_label:
            labels.append(self._cancel_label)
        rows = max(1, len(labels))
        height = 150 + rows * (self.BUTTON_H + 12)
        modal = pygame.Rect(0, 0, self.WIDTH, height)
        modal.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
        rects = []
        y = modal.y + 130
        for _ in labels:
            r = pygame.Rect(0, 0, self.BUTTON_W + 80, self.BUTTON_H)
            r.midtop = (modal.centerx, y)
            rects.append(r)
            y += self.BUTTON_H + 12
        cancel = rects.pop() if self._cancel_label else None
        return modal, rects, cancel

    def option_rect(self, label: str) -> Optional[pygame.Rect]:
        _, rects, cancel = self.geometry()
        for (opt_label, _), rect in zip(self._options, rects):
            if opt_label == label:
                return rect
        if cancel is not None and label == self._cancel_label:
            return cancel
        return None

    def accept_default(self) -> bool:
        if not self._options:
            return False
        callback = self._options[0][1]
        self.close()
        callback()
        return True

    def handle_event(self, event: pygame.event.Event) -> bool:
        if not self.visible:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_ESCAPE, pygame.K_n):
                self.close()
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_y):
                self.accept_default()
            return True
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            _, rects, cancel = self.geometry()
            for (_, callback), rect in zip(self._options, rects):
                if rect.collidepoint(event.pos):
                    self.close()
                    callback()
                    return True
            if cancel is not None and cancel.collidepoint(event.pos):
                self.close()
            return True
        return False

    def draw(self, surface: pygame.Surface):
        if not self.visible:
            return
        overlay = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 160))
        surface.blit(overlay, (0, 0))
        modal, rects, cancel = self.geometry()
        pygame.draw.rect(surface, (245, 245, 245), modal, border_radius=16)
        pygame.draw.rect(surface, (90, 90, 95), modal, width=2, border_radius=16)
        title_font = C.FONT_TITLE or pygame.font.SysFont(pygame.font.get_default_font(), 34, bold=True)
        title = title_font.render(self.title, True, (40, 40, 45))
        surface.blit(title, (modal.centerx - title.get_width() // 2, modal.y + 18))
        msg_font = C.FONT_UI or pygame.font.SysFont(pygame.font.get_default_font(), 24)
        y = modal.y + 18 + title.get_height() + 12
        for line in [ln.strip() for ln in self.message.splitlines() if ln.strip()][:2]:
            surf = msg_font.render(line, True, (40, 40, 45))
            surface.blit(surf, (modal.centerx - surf.get_width() // 2, y))
            y += surf.get_height() + 4

        def draw_btn(rect: pygame.Rect, label: str) -> None:
            pygame.draw.rect(surface, (230, 230, 235), rect, border_radius=10)
            pygame.draw.rect(surface, (90, 90, 95), rect, width=1, border_radius=10)
            t = msg_font.render(label, True, (30, 30, 35))
            surface.blit(t, (rect.centerx - t.get_width() // 2, rect.centery - t.get_height() // 2))

        for (label, _), rect in zip(self._options, rects):
            draw_btn(rect, label)
        if cancel is not None and self._cancel_label:
            draw_btn(cancel, self._cancel_label)
