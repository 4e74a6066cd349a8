# lanedash

A small arcade car game for a Linux board with a 32-bit framebuffer and a
set of simple peripherals. The car sits near the right edge of the screen
and obstacles roll towards it from the left; tilt the board to steer the car
up and down and avoid them for as long as you can.

## Hardware used

- `/dev/fb0` framebuffer (32 bits per pixel) for the road, car and images
- accelerometer under `/sys/class/misc/FreescaleAccelerometer/` for steering
- push buttons exposed as a Linux input device named `ecube-button`, found
  through `/proc/bus/input/devices`
- LED bank (`/dev/periled`) and 6-digit 7-segment display (`/dev/perifnd`)
- 16x2 text LCD (`/dev/peritextlcd`)
- buzzer under `/sys/bus/platform/devices/peribuzzer*`

## Installing

```
pip install .
```

## Playing

Start the game from the directory that holds `Title.bmp`,
`Title_start.bmp`, `minigame.bmp` and `game_over.bmp` (24-bit BMP files;
a missing image is reported as `fail load <name>` and the game carries on):

```
lanedash
```

Options:

- `--images DIR` — directory holding the BMP screens (default `.`)
- `--leaderboard FILE` — file of best times (default `leaderboard.csv`)
- `--track lanes|free` — `lanes` (default): three lanes with tyre obstacles,
  a new one every second; `free`: square blue obstacles at any height, a new
  one every 1.5 seconds
- `--led-device`, `--fnd-device`, `--lcd-device`, `--buzzer-base`,
  `--accel-path`, `--framebuffer` — override the device paths above

Buttons:

- **Home** — on the title screen, start a game with three lives. The best
  time in the leaderboard file (if any) flashes on the 7-segment display,
  then the LEDs count down.
- **Back** — pause and resume while driving.
- **Search** — once all lives are lost, start the mini game: three LEDs flash
  at random; after **Volume Up** has been pressed, the mini game is won as
  soon as all three are caught lit. Winning gives one life back and the
  drive continues.

The running time is shown on the 7-segment display as minutes, seconds and
hundredths. Each crash costs a life and is announced on the text LCD and
the buzzer. Press Ctrl+C to quit: a farewell sweep plays, the peripherals
are switched off and the console is put back into text mode.

## Using the parts on their own

Each peripheral and game piece is a plain module:

- `lanedash.leds.LedBank`, `lanedash.fnd.FndDisplay`,
  `lanedash.textlcd.TextLcd`, `lanedash.buzzer.Buzzer`,
  `lanedash.accel.Accelerometer`, `lanedash.button.ButtonReader`
- `lanedash.framebuffer` — `Surface`, `PixelFormat`, `load_bmp`, `draw_bmp`
  and the memory-mapped `Framebuffer`
- `lanedash.scene` — `steer_delta`, `build_car_sprite`, `LaneTrack`,
  `FreeTrack`
- `lanedash.leaderboard` — `load_records`, `read_best_record`,
  `update_leaderboard` (keeps the ten longest times, longest first)
- `lanedash.game` — `Game`, `GameState` and `main`

```python
from lanedash.fnd import time_to_fnd_number, digits_of
from lanedash.scene import steer_delta

time_to_fnd_number(83_450)   # 12345, shown as 01:23.45
digits_of(12345)             # (0, 1, 2, 3, 4, 5)
steer_delta(2000)            # 10: a gentle tilt moves the car
```

`lanedash.textlcd.run_lives_demo` counts lives down on the LCD and
`lanedash.accel.monitor` yields one `Accelerometer Data: X=..., Y=..., Z=...`
line per reading.

## What it does not do

There is no leaderboard screen, and a normal game never writes a time to the
leaderboard file: a run ends only in the mini game, and the game-over state
that records times is not reached from play. Use `update_leaderboard` to
record times yourself. There is no keyboard or desktop mode; the game needs
the board's devices.

## Running the tests

```
pip install .[test]
pytest
```