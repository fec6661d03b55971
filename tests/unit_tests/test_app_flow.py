import importlib
import types

import pytest


@pytest.fixture
def app_env(monkeypatch, dummy_fonts):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    monkeypatch.delenv("MOLKKY_DEBUG_SCENE", raising=False)

    pygame = importlib.import_module("pygame")
    entry = importlib.import_module("molkky.__main__")

    class DummyClock:
        def tick(self, _fps):
            return 16

    monkeypatch.setattr(pygame.time, "Clock", lambda: DummyClock())
    monkeypatch.setattr(pygame.display, "Info", lambda: types.SimpleNamespace(current_w=1600, current_h=900))
    monkeypatch.setattr(pygame.display, "set_mode", lambda size, flags=0: pygame.Surface(size))
    monkeypatch.setattr(pygame.display, "flip", lambda: None)
    monkeypatch.setattr(pygame.display, "set_caption", lambda _title: None)
    monkeypatch.setattr(entry, "_initial_window_size", lambda: (1024, 768))

    last_mouse = [0, 0]
    monkeypatch.setattr(pygame.mouse, "get_pos", lambda: (last_mouse[0], last_mouse[1]))

    quit_calls = []
    real_quit = pygame.quit

    def tracked_quit():
        quit_calls.append(True)
        real_quit()

    monkeypatch.setattr(pygame, "quit", tracked_quit)

    def run(event_steps):
        index = {"value": 0}

        def scripted_events():
            step = index["value"]
            if step >= len(event_steps):
                return []
            events = event_steps[step]()
            assert events, f"No events returned for step {step}"
            for ev in events:
                if hasattr(ev, "pos"):
                    last_mouse[0], last_mouse[1] = ev.pos
            index["value"] += 1
            return events

        monkeypatch.setattr(pygame.event, "get", scripted_events)
        entry.main()
        assert index["value"] == len(event_steps), "Loop ended before every step ran"

    return types.SimpleNamespace(pygame=pygame, entry=entry, run=run, quit_calls=quit_calls)


def _click_pos(pygame, pos):
    mx, my = pos
    move = pygame.event.Event(pygame.MOUSEMOTION, {"pos": (mx, my), "rel": (0, 0), "buttons": (0, 0, 0)})
    down = pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (mx, my), "button": 1})
    return [move, down]


def _key(pygame, key, mod=0):
    return [pygame.event.Event(pygame.KEYDOWN, {"key": key, "mod": mod})]


def _log_scene(monkeypatch, module_name, class_name, transitions, captured):
    module = importlib.import_module(module_name)
    orig_cls = getattr(module, class_name)

    class Logged(orig_cls):
        def __init__(self, app, *args, **kwargs):
            super().__init__(app, *args, **kwargs)
            transitions.append(class_name)
            captured[class_name] = self

    monkeypatch.setattr(module, class_name, Logged)


def test_application_flow(monkeypatch, app_env):
    from molkky import storage

    pygame = app_env.pygame
    transitions = []
    captured = {}
    for module_name, class_name in (
        ("molkky.scenes.title", "TitleScene"),
        ("molkky.scenes.menu", "MainMenuScene"),
        ("molkky.scenes.setup", "GameSetupScene"),
        ("molkky.scenes.game", "GamePlayScene"),
    ):
        _log_scene(monkeypatch, module_name, class_name, transitions, captured)

    def click_menu(key):
        return lambda: _click_pos(pygame, captured["MainMenuScene"].get_entry_rect(key).center)

    def click_setup(key):
        return lambda: _click_pos(pygame, captured["GameSetupScene"].get_button_rect(key).center)

    def click_points(points):
        return lambda: _click_pos(pygame, captured["GamePlayScene"].get_point_rect(points).center)

    def click_toolbar(label):
        return lambda: _click_pos(pygame, captured["GamePlayScene"].toolbar.button(label).rect.center)

    def click_confirm(label):
        return lambda: _click_pos(pygame, captured["GamePlayScene"].confirm.option_rect(label).center)

    event_steps = [
        lambda: _key(pygame, pygame.K_RETURN),
        click_menu("new"),
        click_setup("start"),
        click_points(6),
        lambda: _key(pygame, pygame.K_0),
        lambda: _key(pygame, pygame.K_q),
        click_toolbar("Menu"),
        click_confirm("Save And Exit"),
        lambda: [pygame.event.Event(pygame.QUIT, {})],
        lambda: _key(pygame, pygame.K_RETURN),
    ]

    app_env.run(event_steps)

    assert app_env.quit_calls, "pygame.quit() should be called"
    assert transitions[0:4] == ["TitleScene", "MainMenuScene", "GameSetupScene", "GamePlayScene"]
    assert transitions.count("MainMenuScene") == 2, "Should return to main menu after leaving the game"

    game = captured["GamePlayScene"]
    assert [p.name for p in game.state.players] == ["Player 1", "Player 2"]
    assert [p.score for p in game.state.players] == [16, 0]
    assert game.state.players[1].consecutive_misses == 1

    saved = storage.load_current_game()
    assert saved == game.state
    assert storage.has_saved_game()


def test_continue_resumes_saved_game(monkeypatch, app_env):
    from molkky import storage
    from molkky.rules import apply_throw, create_game

    state = apply_throw(create_game(["Alice", "Bob"]), 9)
    storage.save_current_game(state)

    pygame = app_env.pygame
    transitions = []
    captured = {}
    _log_scene(monkeypatch, "molkky.scenes.menu", "MainMenuScene", transitions, captured)
    _log_scene(monkeypatch, "molkky.scenes.game", "GamePlayScene", transitions, captured)

    event_steps = [
        lambda: _key(pygame, pygame.K_SPACE),
        lambda: _click_pos(pygame, captured["MainMenuScene"].get_entry_rect("continue").center),
        lambda: _key(pygame, pygame.K_u),
        lambda: _key(pygame, pygame.K_5),
        lambda: [pygame.event.Event(pygame.QUIT, {})],
        lambda: _key(pygame, pygame.K_y),
    ]
    app_env.run(event_steps)

    game = captured["GamePlayScene"]
    # Undo has nothing to take back in a resumed game; Bob's 5 lands
    assert [p.score for p in game.state.players] == [9, 5]
    assert game.state.round == 2


def test_debug_scene_starts_directly(monkeypatch, app_env):
    monkeypatch.setenv("MOLKKY_DEBUG_SCENE", "settings")
    pygame = app_env.pygame
    transitions = []
    captured = {}
    _log_scene(monkeypatch, "molkky.scenes.settings", "SettingsScene", transitions, captured)
    _log_scene(monkeypatch, "molkky.scenes.menu", "MainMenuScene", transitions, captured)

    event_steps = [
        lambda: _click_pos(pygame, captured["SettingsScene"].get_toggle_rect("dark_mode").center),
        lambda: _click_pos(pygame, captured["SettingsScene"].b_save.rect.center),
        lambda: [pygame.event.Event(pygame.QUIT, {})],
        lambda: _key(pygame, pygame.K_RETURN),
    ]
    app_env.run(event_steps)

    from molkky import common as C
    from molkky import storage

    assert transitions == ["SettingsScene", "MainMenuScene"]
    assert storage.load_settings()["dark_mode"] is True
    assert C.TABLE_BG == C.DARK_THEME["bg"]
