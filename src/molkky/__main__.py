# __main__.py - entry point
import logging
import os

import pygame

from molkky import common as C

logger = logging.getLogger(__name__)


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def _configure_logging():
    level_name = os.environ.get("MOLKKY_LOG_LEVEL", "WARNING").strip().upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _debug_scene(name: str):
    """Scene for ``MOLKKY_DEBUG_SCENE``, or None for the normal title start."""
    if name == "setup":
        from molkky.scenes.setup import GameSetupScene
        return GameSetupScene(app=None)
    if name == "game":
        from molkky.scenes.game import GamePlayScene
        return GamePlayScene(app=None)
    if name == "strategy":
        from molkky.scenes.game import GamePlayScene
        from molkky.scenes.strategy import StrategyScene
        return StrategyScene(app=None, game_scene=GamePlayScene(app=None))
    if name == "history":
        from molkky.scenes.history import HistoryScene
        return HistoryScene(app=None)
    if name == "settings":
        from molkky.scenes.settings import SettingsScene
        return SettingsScene(app=None)
    if name:
        logger.warning("Unknown MOLKKY_DEBUG_SCENE %r; starting at the title", name)
    return None


def _system_keys_set():
    names = [
        # Brightness / keyboard illumination
        "K_BRIGHTNESSUP", "K_BRIGHTNESSDOWN", "K_KBDILLUMUP", "K_KBDILLUMDOWN", "K_KBDILLUMTOGGLE",
        # Volume / media
        "K_VOLUMEUP", "K_VOLUMEDOWN", "K_MUTE", "K_AUDIOMUTE",
        "K_AUDIOPLAY", "K_AUDIOSTOP", "K_AUDIONEXT", "K_AUDIOPREV",
        "K_MEDIASELECT",
    ]
    names += [f"K_F{i}" for i in range(1, 13)]
    return {v for v in (getattr(pygame, n, None) for n in names) if isinstance(v, int)}


def _allowed_keys_set():
    names = [
        "K_ESCAPE", "K_RETURN", "K_KP_ENTER", "K_SPACE", "K_BACKSPACE",
        "K_UP", "K_DOWN",
        "K_n", "K_y", "K_u", "K_h", "K_s", "K_l", "K_r", "K_q", "K_w", "K_e",
    ]
    names += [f"K_{d}" for d in range(10)] + [f"K_KP{d}" for d in range(10)]
    return {v for v in (getattr(pygame, n, None) for n in names) if isinstance(v, int)}


def _confirm_modal_rects():
    mw, mh = 460, 180
    modal = pygame.Rect(0, 0, mw, mh)
    modal.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
    bw, bh = 120, 44
    gap = 30
    yes = pygame.Rect(0, 0, bw, bh)
    no = pygame.Rect(0, 0, bw, bh)
    yes.centerx = modal.centerx - (bw // 2 + gap)
    no.centerx = modal.centerx + (bw // 2 + gap)
    yes.bottom = modal.bottom - 20
    no.bottom = modal.bottom - 20
    return modal, yes, no


def _draw_quit_confirm(screen):
    overlay = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
    overlay.fill((0, 0, 0, 160))
    screen.blit(overlay, (0, 0))
    modal, yes_r, no_r = _confirm_modal_rects()
    pygame.draw.rect(screen, (240, 240, 240), modal, border_radius=16)
    pygame.draw.rect(screen, (80, 80, 80), modal, width=2, border_radius=16)
    title = C.FONT_TITLE.render("Quit?", True, (20, 20, 20))
    screen.blit(title, (modal.centerx - title.get_width() // 2, modal.y + 20))
    msg = C.FONT_UI.render("Games in progress are saved.", True, (30, 30, 30))
    screen.blit(msg, (modal.centerx - msg.get_width() // 2, modal.y + 20 + title.get_height() + 8))

    def draw_btn(rect, label):
        pygame.draw.rect(screen, (230, 230, 235), rect, border_radius=10)
        pygame.draw.rect(screen, (100, 100, 110), rect, 1, border_radius=10)
        t = C.FONT_UI.render(label, True, (20, 20, 25))
        screen.blit(t, (rect.centerx - t.get_width() // 2, rect.centery - t.get_height() // 2))

    draw_btn(yes_r, "Yes")
    draw_btn(no_r, "No")


def main():
    _configure_logging()
    # Center window and init
    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    # Pick a safe default size for this desktop
    w, h = _initial_window_size()
    C.SCREEN_W, C.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Mölkky Scorekeeper")
    C.setup_fonts()
    clock = pygame.time.Clock()

    # Developer debug: launch a specific scene via environment
    scene = _debug_scene(os.environ.get("MOLKKY_DEBUG_SCENE", "").strip().lower())
    if scene is None:
        from molkky.scenes.title import TitleScene
        scene = TitleScene(app=None)
    logger.info("Starting at %s", type(scene).__name__)

    system_keys = _system_keys_set()
    allowed_keys = _allowed_keys_set()

    running = True
    confirm_quit = False
    while running:
        dt = clock.tick(60) / 1000.0
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                confirm_quit = True
                continue
            if e.type == pygame.VIDEORESIZE:
                # Apply new size and relayout UI
                C.SCREEN_W, C.SCREEN_H = e.size
                screen = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H), pygame.RESIZABLE)
                if hasattr(scene, "compute_layout"):
                    scene.compute_layout()
                if hasattr(scene, "toolbar") and hasattr(scene.toolbar, "relayout"):
                    scene.toolbar.relayout()
                continue
            if confirm_quit:
                # Handle confirm dialog input only
                if e.type == pygame.KEYDOWN:
                    if e.key in (pygame.K_ESCAPE, pygame.K_n):
                        confirm_quit = False
                    elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_y):
                        running = False
                elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                    _, yes_r, no_r = _confirm_modal_rects()
                    if yes_r.collidepoint(e.pos):
                        running = False
                    elif no_r.collidepoint(e.pos):
                        confirm_quit = False
                continue
            if e.type == pygame.KEYDOWN:
                key = getattr(e, "key", None)
                # Detect Alt+F4 explicitly to trigger confirm
                if key == getattr(pygame, "K_F4", -1) and getattr(e, "mod", 0) & pygame.KMOD_ALT:
                    confirm_quit = True
                    continue
                if key in system_keys:
                    continue
                # Text entry scenes get every key; others only the allowlist
                if not getattr(scene, "text_entry", False) and key not in allowed_keys:
                    continue
            scene.handle_event(e)
        if scene.next_scene is not None:
            logger.debug("Scene change: %s -> %s", type(scene).__name__, type(scene.next_scene).__name__)
            scene = scene.next_scene
        scene.update(dt)
        scene.draw(screen)
        if confirm_quit:
            _draw_quit_confirm(screen)
        pygame.display.flip()
    logger.info("Shutting down")
    pygame.quit()


if __name__ == "__main__":
    main()
