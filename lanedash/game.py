"""The driving game: state machine, main loop and command-line entry point."""

from __future__ import annotations

import argparse
import contextlib
import enum
import random
import sys
import time
from pathlib import Path
from typing import Callable, Sequence

from .accel import ACCELPATH, Accelerometer
from .button import ButtonReader, Key
from .buzzer import BUZZER_BASE_SYS_PATH, Buzzer
from .fnd import FND_DRIVER_NAME, FndDisplay
from .framebuffer import FBDEV_FILE, Framebuffer, Surface, draw_bmp, load_bmp
from .leaderboard import LEADERBOARD_FILE, read_best_record, update_leaderboard
from .leds import LED_DRIVER_NAME, LED_COUNT, LedBank
from .scene import FreeTrack, LaneTrack, steer_delta
from .textlcd import TEXTLCD_DRIVER_NAME, TextLcd

START_LIVES = 3
LANE_SPAWN_INTERVAL_MS = 1000
FREE_SPAWN_INTERVAL_MS = 1500
COLLISION_POSITION = 2000
ALL_MINI_GAME_LEDS = 0b111
MINI_GAME_LEDS = 3

TITLE_IMAGE = "Title.bmp"
START_IMAGE = "Title_start.bmp"
MINI_GAME_IMAGE = "minigame.bmp"
GAME_OVER_IMAGE = "game_over.bmp"


class GameState(enum.IntEnum):
    """States of the game's main loop."""

    IDLE = 0
    LED_COUNTDOWN = 1
    FND_COUNTUP = 2
    GAME_MENU = 3
    GAME_RUNNING = 4
    GAME_OVER = 5
    MINI_GAME = 6


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class Game:
    """Ties the board's devices to a track and runs the game."""

    def __init__(
        self,
        *,
        leds,
        fnd,
        lcd,
        buzzer,
        accelerometer,
        buttons,
        track,
        screen=None,
        leaderboard_path: str | Path = LEADERBOARD_FILE,
        images_dir: str | Path = ".",
        spawn_interval_ms: int = LANE_SPAWN_INTERVAL_MS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], int] = _monotonic_ms,
        rng: random.Random | None = None,
    ) -> None:
        self.leds = leds
        self.fnd = fnd
        self.lcd = lcd
        self.buzzer = buzzer
        self.accelerometer = accelerometer
        self.buttons = buttons
        self.track = track
        self.screen = screen
        self.leaderboard_path = Path(leaderboard_path)
        self.images_dir = Path(images_dir)
        self.spawn_interval_ms = spawn_interval_ms
        self.sleep = sleep
        self.clock = clock
        self.rng = rng or random.Random()
        self.surface = Surface(track.width, track.height)

        self.state = GameState.GAME_MENU
        self.paused = False
        self.lives = 0
        self.elapsed_ms = 0
        self.paused_duration_ms = 0
        self.offset = 0
        self.last_key: int | None = None
        self._start_ms = 0
        self._pause_ms = 0
        self._last_spawn_ms = 0
        self._life_shown = False

    def _present(self) -> None:
        if self.screen is not None:
            self.screen.present(self.surface)

    def _show_image(self, name: str) -> None:
        try:
            image = load_bmp(self.images_dir / name)
        except (OSError, ValueError):
            print(f"fail load {name}")
        else:
            draw_bmp(self.surface, image, self.track.pixel_format)
        self._present()

    def _beep(self, scale: int, seconds: float) -> None:
        self.buzzer.play(scale)
        self.sleep(seconds)
        self.buzzer.stop()

    def reset(self) -> None:
        """Clear timers, pause, car offset, LEDs, the FND and all obstacles."""
        self.paused = False
        self.elapsed_ms = 0
        self.paused_duration_ms = 0
        self.offset = 0
        for index in range(LED_COUNT):
            self.leds.set(index, False)
        self.fnd.show(0, 0)
        self.track.reset()

    def handle_key(self, key: int, now: int) -> bool:
        """React to a key press; return True when play must resume at once."""
        self.last_key = key
        self._beep(5, 0.1)
        if key == Key.HOME:
            if self.state in (GameState.GAME_MENU, GameState.GAME_OVER):
                self.lcd.write("HELLO USER", "MAIN MENU")
                self.reset()
                self._show_image(START_IMAGE)
                self.sleep(2)
                self.lives = START_LIVES
                self.state = GameState.LED_COUNTDOWN
        elif key == Key.BACK:
            if self.state == GameState.GAME_RUNNING or self.paused:
                self.paused = not self.paused
                if self.paused:
                    self._pause_ms = now
                else:
                    self.paused_duration_ms += now - self._pause_ms
            elif self.state == GameState.GAME_OVER:
                self.lives = START_LIVES
                self.state = GameState.LED_COUNTDOWN
        elif key == Key.SEARCH:
            if self.state == GameState.MINI_GAME:
                self.mini_game()
                self.lives += 1
                self.state = GameState.GAME_RUNNING
                return True
        return False

    def mini_game(self) -> None:
        """Flash three LEDs at random until VOLUMEUP catches them all lit."""
        self._show_image(MINI_GAME_IMAGE)
        while True:
            event = self.buttons.poll()
            if event is not None:
                self.last_key = event.key
            for index in range(MINI_GAME_LEDS):
                self.leds.set(index, bool(self.rng.randrange(2)))
                self.sleep(0.1)
            if self.last_key == Key.VOLUMEUP:
                self.sleep(0.3)
                if self.leds.status() == ALL_MINI_GAME_LEDS:
                    self.lcd.write("minigame success", "CONGRATS!")
                    for scale in (1, 3, 5):
                        self._beep(scale, 0.3)
                    return

    def _countdown(self, now: int) -> None:
        best = read_best_record(self.leaderboard_path)
        if best is not None:
            self.fnd.show_time(best)
            self.sleep(0.5)
            self.fnd.show(0, 0)
            self.sleep(0.5)
        for index in range(MINI_GAME_LEDS):
            self.leds.set(index, True)
        self.sleep(0.3)
        for index in reversed(range(MINI_GAME_LEDS)):
            self.leds.set(index, False)
            self.buzzer.play(2)
            self.lcd.write("Game start at", "3 sec")
            self.sleep(0.03)
            self.buzzer.stop()
        self._start_ms = now
        self._last_spawn_ms = now
        self.state = GameState.GAME_RUNNING

    def _frame(self, now: int) -> None:
        if not self._life_shown:
            self.lcd.write("YOUR LIFE:", str(self.lives))
            self._life_shown = True
        self.elapsed_ms = now - self._start_ms - self.paused_duration_ms
        self.fnd.show_time(max(self.elapsed_ms, 0))

        if now - self._last_spawn_ms > self.spawn_interval_ms:
            self.track.spawn()
            self._last_spawn_ms = now

        self.track.advance()
        self.offset += steer_delta(self.accelerometer.latest().x)
        self.track.draw(self.surface, self.offset)
        self._present()

        hit = self.track.collision(self.offset)
        if hit is None:
            return
        obstacle = self.track.obstacles[hit]
        obstacle.x = COLLISION_POSITION
        obstacle.active = False
        print("Collision!")
        self.lives -= 1
        self._life_shown = False
        for _ in range(2):
            self._beep(1, 0.05)
        self.lcd.write("WATCH OUT!", "LIFE -1")
        if self.lives == 0:
            self.lcd.write("GAME OVER", "CONTINUE?")
            self.state = GameState.MINI_GAME
            self._show_image(MINI_GAME_IMAGE)
            self.fnd.show(0, 0)
        else:
            self.sleep(1)

    def _game_over(self) -> None:
        update_leaderboard(self.leaderboard_path, self.elapsed_ms)
        self.reset()
        self._show_image(GAME_OVER_IMAGE)
        if self.last_key == Key.MENU:
            self.state = GameState.GAME_MENU

    def step(self, now: int) -> None:
        """Run one pass of the main loop at time ``now`` in milliseconds."""
        event = self.buttons.poll()
        resume = False
        if event is not None:
            resume = self.handle_key(event.key, now)
        if self.paused and not resume:
            return
        if self.state == GameState.LED_COUNTDOWN:
            self._countdown(now)
        elif self.state == GameState.GAME_RUNNING:
            self._frame(now)
        elif self.state == GameState.GAME_OVER:
            self._game_over()

    def _boot_effect(self) -> None:
        for scale in range(1, LED_COUNT + 1):
            self.leds.set(scale - 1, True)
            self.buzzer.play(scale)
            self.sleep(0.05)
        for index in reversed(range(LED_COUNT)):
            self.leds.set(index, False)
            self.sleep(0.05)
        self.buzzer.stop()

    def run(self) -> None:
        """Play the start-up effect, show the title and loop until interrupted."""
        try:
            self._boot_effect()
            self.reset()
            self.state = GameState.GAME_MENU
            self._show_image(TITLE_IMAGE)
            while True:
                self.step(self.clock())
        except KeyboardInterrupt:
            pass
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Play the farewell sweep and release every device."""
        print("\nGood-bye!")
        for scale in range(LED_COUNT, 0, -1):
            self.buzzer.play(scale)
            self.sleep(0.05)
        self.buzzer.stop()
        self.leds.close()
        self.fnd.clear()
        self.buzzer.close()
        self.accelerometer.stop()
        self.buttons.stop()
        if self.screen is not None:
            self.screen.close()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lanedash", description="Tilt-steered car game.")
    parser.add_argument("--images", default=".", help="directory holding the BMP screens")
    parser.add_argument("--leaderboard", default=LEADERBOARD_FILE)
    parser.add_argument("--track", choices=("lanes", "free"), default="lanes")
    parser.add_argument("--led-device", default=LED_DRIVER_NAME)
    parser.add_argument("--fnd-device", default=FND_DRIVER_NAME)
    parser.add_argument("--lcd-device", default=TEXTLCD_DRIVER_NAME)
    parser.add_argument("--buzzer-base", default=BUZZER_BASE_SYS_PATH)
    parser.add_argument("--accel-path", default=ACCELPATH)
    parser.add_argument("--framebuffer", default=FBDEV_FILE)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Open the board's devices and play until interrupted."""
    args = _parse_args(argv)
    with contextlib.ExitStack() as stack:
        try:
            leds = LedBank(args.led_device).open()
            stack.callback(leds.close)
            fnd = FndDisplay(args.fnd_device)
            buzzer = Buzzer(base=args.buzzer_base)
            accelerometer = Accelerometer(args.accel_path)
            accelerometer.start()
            stack.callback(accelerometer.stop)
            screen = Framebuffer(args.framebuffer)
            stack.callback(screen.close)
        except (OSError, ValueError) as exc:
            print(f"HW init fail: {exc}", file=sys.stderr)
            return 1
        try:
            buttons = ButtonReader()
            buttons.start()
        except (OSError, ValueError) as exc:
            print(f"button init fail: {exc}", file=sys.stderr)
            return 1
        stack.pop_all()

    if args.track == "free":
        track = FreeTrack(screen.width, screen.height, screen.pixel_format)
        interval = FREE_SPAWN_INTERVAL_MS
    else:
        track = LaneTrack(screen.width, screen.height, screen.pixel_format)
        interval = LANE_SPAWN_INTERVAL_MS
    game = Game(
        leds=leds,
        fnd=fnd,
        lcd=TextLcd(args.lcd_device),
        buzzer=buzzer,
        accelerometer=accelerometer,
        buttons=buttons,
        track=track,
        screen=screen,
        leaderboard_path=args.leaderboard,
        images_dir=args.images,
        spawn_interval_ms=interval,
    )
    game.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())