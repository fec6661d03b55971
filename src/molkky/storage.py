# storage.py - JSON persistence for settings, game history and the resumable game
import json
import logging
import os
import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from molkky.rules import GameState, MolkkyError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, bool] = {
    "dark_mode": False,
    "auto_save_games": True,
    "show_advisor_hints": True,
}

HISTORY_LIMIT = 50


def data_dir() -> str:
    # Explicit override first, then %APPDATA% on Windows, else ~/.molkky_scorekeeper
    override = os.environ.get("MOLKKY_DATA_DIR")
    if override:
        return override
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "MolkkyScorekeeper")
    return os.path.join(os.path.expanduser("~"), ".molkky_scorekeeper")


def settings_path() -> str:
    return os.path.join(data_dir(), "settings.json")


def history_path() -> str:
    return os.path.join(data_dir(), "history.json")


def current_game_path() -> str:
    return os.path.join(data_dir(), "current_game.json")


def _safe_write_json(path: str, data: Any) -> bool:
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return True
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not write %s: %s", path, exc)
        return False


def _safe_read_json(path: str) -> Optional[Any]:
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None


def _safe_remove(path: str) -> bool:
    try:
        if os.path.isfile(path):
            os.remove(path)
        return True
    except OSError as exc:
        logger.warning("Could not remove %s: %s", path, exc)
        return False


# ---------- Settings ----------

def load_settings() -> Dict[str, bool]:
    settings = dict(DEFAULT_SETTINGS)
    data = _safe_read_json(settings_path())
    if isinstance(data, dict):
        for key, default in DEFAULT_SETTINGS.items():
            value = data.get(key, default)
            if isinstance(value, bool):
                settings[key] = value
    return settings


def save_settings(new_values: Mapping[str, Any]) -> Dict[str, bool]:
    # Merge onto what is stored and write back
    settings = load_settings()
    settings.update({
        k: bool(new_values[k]) for k in DEFAULT_SETTINGS if k in new_values
    })
    _safe_write_json(settings_path(), settings)
    return settings


def reset_settings() -> Dict[str, bool]:
    settings = dict(DEFAULT_SETTINGS)
    _safe_write_json(settings_path(), settings)
    return settings


# ---------- History ----------

def history_item(state: GameState) -> Dict[str, Any]:
    return {
        "id": uuid.uuid4().hex,
        "date": datetime.now().isoformat(timespec="seconds"),
        "players": [p.name for p in state.players],
        "winner": state.winner.name if state.winner else None,
        "rounds": state.round,
        "final_scores": [{"name": p.name, "score": p.score} for p in state.players],
    }


def get_game_history() -> List[Dict[str, Any]]:
    hist = _safe_read_json(history_path())
    if not isinstance(hist, list):
        return []
    return [h for h in hist if isinstance(h, dict)]


def save_game_to_history(state: GameState) -> Dict[str, Any]:
    """Prepend a finished game to the history file and return its entry."""
    item = history_item(state)
    hist = [item] + get_game_history()
    _safe_write_json(history_path(), hist[:HISTORY_LIMIT])
    return item


def clear_game_history() -> bool:
    return _safe_remove(history_path())


# ---------- Current game ----------

def save_current_game(state: GameState) -> bool:
    return _safe_write_json(current_game_path(), state.to_dict())


def load_current_game() -> Optional[GameState]:
    data = _safe_read_json(current_game_path())
    if not isinstance(data, dict):
        return None
    try:
        return GameState.from_dict(data)
    except (MolkkyError, TypeError, ValueError) as exc:
        logger.warning("Ignoring malformed saved game: %s", exc)
        return None


def has_saved_game() -> bool:
    state = load_current_game()
    return state is not None and not state.game_over


def clear_current_game() -> bool:
    return _safe_remove(current_game_path())
