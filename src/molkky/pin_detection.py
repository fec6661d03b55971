"""Placeholder pin detection.

There is no vision model behind :func:`detect_pins`. A photo is opened only to
check that it is a readable image; the pin layout returned for it is drawn
from a seeded random generator. The function exists so the strategy scene has
a single seam where a real detector could later be plugged in.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Dict, List, Optional, Sequence, Tuple

import pygame

from molkky.advisor import PinState
from molkky.rules import MolkkyError

logger = logging.getLogger(__name__)


class PinDetectionError(MolkkyError):
    pass


# Opening formation seen from the throwing line, back row first.
FORMATION_ROWS: Tuple[Tuple[int, ...], ...] = (
    (7, 9, 8),
    (5, 11, 12, 6),
    (3, 10, 4),
    (1, 2),
)
_ROW_Y = (0.2, 0.4, 0.6, 0.8)
_PIN_SPACING = 0.15


def _formation() -> Dict[int, Tuple[float, float]]:
    out: Dict[int, Tuple[float, float]] = {}
    for row, y in zip(FORMATION_ROWS, _ROW_Y):
        start = 0.5 - _PIN_SPACING * (len(row) - 1) / 2
        for i, number in enumerate(row):
            out[number] = (round(start + i * _PIN_SPACING, 3), y)
    return out


PIN_FORMATION: Dict[int, Tuple[float, float]] = _formation()

# Layout returned when no photo is supplied.
DEMO_STANDING: Tuple[int, ...] = (2, 4, 6, 8, 12)


def initial_pins() -> List[PinState]:
    return [PinState(n, True, PIN_FORMATION[n]) for n in sorted(PIN_FORMATION)]


def demo_pins() -> List[PinState]:
    return [PinState(n, n in DEMO_STANDING, PIN_FORMATION[n]) for n in sorted(PIN_FORMATION)]


def _load_image_size(image_path: str) -> Tuple[int, int]:
    if not os.path.isfile(image_path):
        raise PinDetectionError(f"Photo not found: {image_path}")
    try:
        surface = pygame.image.load(image_path)
    except (pygame.error, OSError) as exc:
        raise PinDetectionError(f"Could not read photo {image_path}: {exc}") from exc
    return surface.get_size()


def _jitter(rng: random.Random, value: float) -> float:
    return round(min(1.0, max(0.0, value + rng.uniform(-0.03, 0.03))), 3)


def detect_pins(
    image_path: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[PinState]:
    """Return the pin layout "seen" in ``image_path``.

    Without a path the fixed demo layout is returned. With a path the image
    must load; each pin then stands with even odds.
    """

    if not image_path:
        logger.info("No photo supplied; using demo pin layout")
        return demo_pins()

    width, height = _load_image_size(image_path)
    if rng is None:
        rng = random.Random(width * 10007 + height)
    logger.info("Analysing photo %s (%dx%d) with placeholder detector", image_path, width, height)

    pins: List[PinState] = []
    for number in sorted(PIN_FORMATION):
        x, y = PIN_FORMATION[number]
        standing = rng.random() > 0.5
        pins.append(PinState(number, standing, (_jitter(rng, x), _jitter(rng, y))))
    return pins


def toggle_pin(pins: Sequence[PinState], number: int) -> List[PinState]:
    """Copy of ``pins`` with pin ``number`` knocked down or stood back up."""

    out: List[PinState] = []
    for pin in pins:
        if pin.number == number:
            out.append(PinState(pin.number, not pin.is_standing, pin.position))
        else:
            out.append(pin)
    return out

