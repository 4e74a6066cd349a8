"""Road scene: steering, the car sprite, obstacles and collisions."""

from __future__ import annotations

import random
import struct
from dataclasses import dataclass
from typing import Iterator

from .framebuffer import PixelFormat, Surface

MAX_OBSTACLES = 10
CAR_ORIG_WIDTH = 120
CAR_ORIG_HEIGHT = 200
CAR_SPRITE_WIDTH = CAR_ORIG_HEIGHT
CAR_SPRITE_HEIGHT = CAR_ORIG_WIDTH
CAR_RIGHT_GAP = 20
CAR_MARGIN = 10
LANE_COUNT = 3
LANE_SPEED = 30
TIRE_DRAW_SCALE = 0.5
TIRE_HIT_SCALE = 0.6
TREAD_COLOR = 0xFFFFFF

FREE_OBSTACLE_WIDTH = 40
FREE_OBSTACLE_HEIGHT = 40
FREE_SPEED = 15
FREE_CAR_LENGTH = 192

DASH_PERIOD = 40
DASH_LENGTH = 20

_F32 = struct.Struct("f")


def _f32(value: float) -> float:
    return _F32.unpack(_F32.pack(value))[0]


_F32_06 = _f32(0.6)


def steer_delta(accel_x: int) -> int:
    """Turn an X-axis accelerometer reading into a vertical car movement."""
    if -700 < accel_x < 700:
        return 0
    if 1000 < accel_x < 3000:
        return 10
    if accel_x > 3000:
        return 20
    if -3000 < accel_x < -1000:
        return -10
    if accel_x < -3000:
        return -20
    return 0


def _car_color(x: int, y: int) -> int:
    color = 0xFF2A2A
    if (x < 15 or x > 105) and 24 < y < 168:
        color = 0x1A1A1A
    if 50 < y < 142 and 30 < x < 90:
        color = 0x111111
    if y < 36 and 35 < x < 85:
        color = 0x66BFFF
    if y > 156 and 35 < x < 85:
        color = 0x66BFFF
    if y in (50, 142):
        color = 0x222222
    lamp_column = 18 < x < 38 or 82 < x < 102
    if y < 10 and lamp_column:
        color = 0xFFFF66
    if y > 182 and lamp_column:
        color = 0xFF3333
    if 80 < y < 85 and x in (34, 86):
        color = 0xDDDDDD
    if 58 < x < 62:
        color = 0x000000
    return color


def _car_shape(length: int) -> Iterator[tuple[int, int, int]]:
    """Yield (x, y, rgb) of a car turned to face left, rounded at the corners."""
    for y in range(length):
        for x in range(CAR_ORIG_WIDTH):
            dx = x - CAR_ORIG_WIDTH // 2
            dy = length // 4 - y if y < length // 2 else y - length * 3 // 4
            if (
                (y < 20 or y > length - 20)
                and (x < 20 or x > CAR_ORIG_WIDTH - 20)
                and dx * dx + dy * dy > 22 * 22
            ):
                continue
            yield length - 1 - y, x, _car_color(x, y)


def build_car_sprite(pixel_format: PixelFormat = PixelFormat()) -> Surface:
    """Render the car sprite; transparent pixels are zero."""
    sprite = Surface(CAR_SPRITE_WIDTH, CAR_SPRITE_HEIGHT)
    for x, y, rgb in _car_shape(CAR_ORIG_HEIGHT):
        sprite.put(
            x, y, pixel_format.pixel((rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF)
        )
    return sprite


def _tire_gray(x: int, length: int) -> int:
    half = length // 2
    dist = _f32(abs(x - half) / half)
    brightness = _f32(1.0 - _f32(dist * _F32_06))
    return int(_f32(brightness * 50))


@dataclass
class Obstacle:
    """An obstacle moving from the left edge toward the car."""

    x: int = 0
    lane: int = 0
    y: int = 0
    active: bool = False


class _Track:
    speed = 0

    def __init__(
        self,
        width: int,
        height: int,
        pixel_format: PixelFormat | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"screen size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixel_format = pixel_format or PixelFormat()
        self.rng = rng or random.Random()
        self.obstacles = [Obstacle() for _ in range(MAX_OBSTACLES)]

    def _deactivate_all(self) -> None:
        for obstacle in self.obstacles:
            obstacle.active = False

    def _move_obstacles(self) -> None:
        for obstacle in self.obstacles:
            if obstacle.active:
                obstacle.x += self.speed
                if obstacle.x > self.width:
                    obstacle.active = False

    def _free_slot(self) -> Obstacle | None:
        return next((o for o in self.obstacles if not o.active), None)

    def _clamp_top(self, top: int, size: int) -> int:
        if top < 0:
            top = 0
        if top + size > self.height:
            top = self.height - size
        return top

    def _check_surface(self, surface: Surface) -> None:
        if (surface.width, surface.height) != (self.width, self.height):
            raise ValueError("surface does not match the track size")

    def _draw_road(self, surface: Surface) -> None:
        fmt = self.pixel_format
        surface.fill(fmt.pixel(0x40, 0x40, 0x40))
        white = fmt.pixel(0xFF, 0xFF, 0xFF)
        rows = [r for r in (self.height // 3, self.height * 2 // 3) if 0 <= r < self.height]
        for start in range(0, self.width, DASH_PERIOD):
            for x in range(start, min(start + DASH_LENGTH, self.width)):
                for row in rows:
                    surface.put(x, row, white)

    def _put_clipped(self, surface: Surface, x: int, y: int, value: int) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            surface.put(x, y, value)


class LaneTrack(_Track):
    """Three-lane road with tyre obstacles and a sprite car near the right edge."""

    speed = LANE_SPEED

    def __init__(
        self,
        width: int,
        height: int,
        pixel_format: PixelFormat | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(width, height, pixel_format, rng)
        self.sprite = build_car_sprite(self.pixel_format)
        self._tire_h = int(CAR_ORIG_WIDTH * TIRE_DRAW_SCALE)
        self._tire_w = int(CAR_ORIG_HEIGHT * TIRE_DRAW_SCALE)
        treads = (self._tire_h // 4, self._tire_h // 2, self._tire_h * 3 // 4)
        self._tread_rows = {t + d for t in treads for d in (-1, 0, 1)}
        self._tire_columns = [
            (g << 16) | (g << 8) | g
            for g in (_tire_gray(x, self._tire_w) for x in range(self._tire_w))
        ]

    def reset(self) -> None:
        """Deactivate every obstacle."""
        self._deactivate_all()

    def advance(self) -> None:
        """Move active tyres right; drop those past the screen edge."""
        self._move_obstacles()

    def lane_top(self, lane: int, size: int) -> int:
        """Top row of an object of height ``size`` centred in ``lane``."""
        centres = {0: self.height // 6, 1: self.height // 2, 2: self.height * 5 // 6}
        return centres.get(lane, self.height // 2) - size // 2

    def car_position(self, offset: int) -> tuple[int, int]:
        """Top-left corner of the car for a vertical ``offset``."""
        x = self.width - (CAR_SPRITE_WIDTH + CAR_RIGHT_GAP)
        y = self.height // 2 - CAR_SPRITE_HEIGHT // 2 + offset
        return x, self._clamp_top(y, CAR_SPRITE_HEIGHT)

    def spawn(self) -> Obstacle | None:
        """Place a tyre at the left edge of a random lane, if a slot is free."""
        slot = self._free_slot()
        if slot is not None:
            slot.x = 0
            slot.lane = self.rng.randrange(LANE_COUNT)
            slot.active = True
        return slot

    def collision(self, offset: int) -> int | None:
        """Index of the first tyre that hits the car, or None."""
        car_x, car_y = self.car_position(offset)
        left = car_x + CAR_MARGIN
        right = car_x + CAR_SPRITE_WIDTH - CAR_MARGIN
        top = car_y + CAR_MARGIN
        bottom = car_y + CAR_SPRITE_HEIGHT - CAR_MARGIN
        obs_h = int(CAR_ORIG_WIDTH * TIRE_HIT_SCALE)
        obs_w = int(CAR_ORIG_HEIGHT * TIRE_HIT_SCALE)
        for index, obstacle in enumerate(self.obstacles):
            if not obstacle.active:
                continue
            obs_top = self.lane_top(obstacle.lane, obs_h)
            if (
                left < obstacle.x + obs_w
                and right > obstacle.x
                and top < obs_top + obs_h
                and bottom > obs_top
            ):
                return index
        return None

    def draw(self, surface: Surface, offset: int) -> None:
        """Draw road, car and tyres onto ``surface``."""
        self._check_surface(surface)
        self._draw_road(surface)
        car_x, car_y = self.car_position(offset)
        for i, value in enumerate(self.sprite.pixels):
            if value:
                sy, sx = divmod(i, CAR_SPRITE_WIDTH)
                self._put_clipped(surface, car_x + sx, car_y + sy, value)
        for obstacle in self.obstacles:
            if not obstacle.active:
                continue
            top = self.lane_top(obstacle.lane, self._tire_h)
            for y in range(self._tire_h):
                row = top + y
                if not 0 <= row < self.height:
                    continue
                tread = y in self._tread_rows
                for x in range(self._tire_w):
                    col = obstacle.x + x
                    if 0 <= col < self.width:
                        surface.put(
                            col, row, TREAD_COLOR if tread else self._tire_columns[x]
                        )


class FreeTrack(_Track):
    """Road with square obstacles at any height and a drawn car near the right edge."""

    speed = FREE_SPEED

    def __init__(
        self,
        width: int,
        height: int,
        pixel_format: PixelFormat | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(width, height, pixel_format, rng)
        self._car_pixels = list(_car_shape(FREE_CAR_LENGTH))

    def reset(self) -> None:
        """Deactivate every obstacle."""
        self._deactivate_all()

    def advance(self) -> None:
        """Move active obstacles right; drop those past the screen edge."""
        self._move_obstacles()

    def car_box(self, offset: int) -> tuple[int, int, int, int]:
        """Left, top, right and bottom of the car for a vertical ``offset``."""
        car_w = self.height // 5
        car_len = int(car_w * 2 * 0.8)
        x = self.width - (car_len + CAR_RIGHT_GAP)
        y = self._clamp_top(self.height // 2 - car_w // 2 + offset, car_w)
        return x, y, x + car_len, y + car_w

    def spawn(self) -> Obstacle | None:
        """Place an obstacle at the left edge at a random height, if a slot is free."""
        slot = self._free_slot()
        if slot is not None:
            slot.x = 0
            slot.y = self.rng.randrange(self.height - FREE_OBSTACLE_HEIGHT)
            slot.active = True
        return slot

    def collision(self, offset: int) -> int | None:
        """Index of the first obstacle that overlaps the car, or None."""
        left, top, right, bottom = self.car_box(offset)
        for index, obstacle in enumerate(self.obstacles):
            if not obstacle.active:
                continue
            if (
                left < obstacle.x + FREE_OBSTACLE_WIDTH
                and right > obstacle.x
                and top < obstacle.y + FREE_OBSTACLE_HEIGHT
                and bottom > obstacle.y
            ):
                return index
        return None

    def draw(self, surface: Surface, offset: int) -> None:
        """Draw road, car and blue obstacles onto ``surface``."""
        self._check_surface(surface)
        self._draw_road(surface)
        car_x, car_y, _, _ = self.car_box(offset)
        for x, y, rgb in self._car_pixels:
            self._put_clipped(surface, car_x + x, car_y + y, rgb)
        blue = self.pixel_format.pixel(0x00, 0x00, 0xFF)
        for obstacle in self.obstacles:
            if not obstacle.active:
                continue
            for y in range(obstacle.y, obstacle.y + FREE_OBSTACLE_HEIGHT):
                for x in range(obstacle.x, obstacle.x + FREE_OBSTACLE_WIDTH):
                    self._put_clipped(surface, x, y, blue)