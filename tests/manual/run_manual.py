#!/usr/bin/env python3
import os
import sys
from pathlib import Path
import subprocess


SCENES = [
    {"id": "setup", "label": "Game setup"},
    {"id": "game", "label": "Game play (Player 1 vs Player 2)"},
    {"id": "strategy", "label": "Strategy board"},
    {"id": "history", "label": "History"},
    {"id": "settings", "label": "Settings"},
]

LOG_LEVELS = ["WARNING", "INFO", "DEBUG"]


def pick(prompt, options):
    while True:
        print(prompt)
        for i, opt in enumerate(options, 1):
            print(f"  {i}) {opt}")
        sel = input("> ").strip()
        if sel.isdigit():
            idx = int(sel) - 1
            if 0 <= idx < len(options):
                return idx
        print("Invalid selection, please try again.\n")


def yes_no(prompt, default=True):
    d = "Y/n" if default else "y/N"
    while True:
        ans = input(f"{prompt} ({d}): ").strip().lower()
        if not ans:
            return default
        if ans in ("y", "yes"): return True
        if ans in ("n", "no"): return False
        print("Please answer y or n.")


def main():
    print("Manual Scene Launcher (developer-only)\n")
    scene = SCENES[pick("Select a scene:", [s["label"] for s in SCENES])]
    level = LOG_LEVELS[pick("Select log level:", LOG_LEVELS)]

    photo = ""
    if scene["id"] == "strategy" and yes_no("Use a photo for Load Photo?", default=False):
        photo = input("Photo path: ").strip()

    # Repo root is two levels up from this file: tests/manual/..
    repo_root = Path(__file__).resolve().parents[2]

    # Build environment for child process; scratch data dir keeps real saves untouched
    env = dict(os.environ)
    env["MOLKKY_DEBUG_SCENE"] = scene["id"]
    env["MOLKKY_LOG_LEVEL"] = level
    env.setdefault("MOLKKY_DATA_DIR", str(repo_root / ".manual_data"))
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(repo_root / "src"), env.get("PYTHONPATH", "")]))
    if photo:
        env["MOLKKY_PHOTO"] = photo

    print("\nLaunching:")
    print(f"  Scene    : {scene['label']} ({scene['id']})")
    print(f"  LogLevel : {level}")
    print(f"  DataDir  : {env['MOLKKY_DATA_DIR']}")
    if photo:
        print(f"  Photo    : {photo}")
    print("")
    try:
        subprocess.run([sys.executable, "-m", "molkky"], cwd=str(repo_root), env=env, check=False)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
