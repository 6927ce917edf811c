# chronoplay

chronoplay is a small simulation playground. Entities live in a `World`, and *emitting timers*
move and change them. The timers tick under adjustable time multipliers. They can run one at a
time or in looping and one-shot sequences. While they run, they drive interpolated value changes
through value calculators.

The sample game has two kinds of entity:

- **Orbs.** At most three exist at once. A `CollectAllOrbs` request pulls every orb to one point
  over a timer, then despawns the orbs.
- **Patrollers.** A patroller follows a square path and a diagonal path at the same time. Each
  path is a looping timer sequence.

Game input is held in `ButtonInput` resources:

- Pressing the `"Space"` key sends a request to slow the game time multiplier. Releasing it
  sends a request to restore it.
- A left click sends a `SpawnOrb` request at the cursor position.
- A right click sends a `CollectAllOrbs` request at the cursor position.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Running

```
chronoplay
```

This command builds the world with `chronoplay.app.build_app()` and runs frames until it is
interrupted. Each frame advances the world's time by the real time that has passed.

It also creates `game_logs/latest_game_session_log.txt` in the current directory. Log messages
in the crucial category are appended to that file.

Options:

- `--frames N` runs only N frames.
- `--fps F` sets the target frame rate. The default is 60.

Other log output goes through the standard `logging` module, under the logger named
`chronoplay`.

## Using the library

Build a world, drive its input and time, and update it:

```python
from chronoplay.app import build_app
from chronoplay.geometry import Vec2
from chronoplay.input import MOUSE_INPUT, MOUSE_LEFT, CursorWorldPosition

world = build_app()
world.resources[CursorWorldPosition].position = Vec2(10.0, 20.0)
world.resources[MOUSE_INPUT].press(MOUSE_LEFT)
world.time.advance_by(1 / 60)
world.update()  # an orb is spawned at (10, 20)
```

`World.add_system(system, system_set)` registers a function that takes the world.

- Systems with no set run first, in the order they were added.
- The other systems run in set order: the `InputSystemSet` members, then the
  `TickingSystemSet` members, then the `EndOfFrameSystemSet` members.

An event sent with `World.send` stays readable through `World.read_events` during the update in
which it was sent and during the next update.

The building blocks can also be used on their own.

Interpolation:

```python
from chronoplay.interpolation import Interpolator

Interpolator(2.0).calculate(1.0, 1.0, 0.5)  # 1.25
```

Fixed-capacity arrays:

```python
from chronoplay.vec_based_array import VecBasedArray

items = VecBasedArray([1, 2], 3)
items.remove_by_item(1)
list(items)  # [2]
```

Timers:

```python
from chronoplay.timer_types import EmittingTimer, TimerDoneEventType

timer = EmittingTimer([], [], 2.0, TimerDoneEventType.nothing())
timer.tick_and_get_normalized_progress(1.0)  # 0.5
```

The systems themselves live in these modules:

- `chronoplay.timer_systems`
- `chronoplay.sequencing`, which also holds `TimerSequence` for chaining timers
- `chronoplay.going_events`
- `chronoplay.multipliers`
- `chronoplay.despawning`
- `chronoplay.game`
- `chronoplay.input`

## What it does not do

chronoplay does not open a window or draw anything, and it reads no keyboard or mouse. Orbs,
patrollers and the camera are plain entities whose positions are held in `Transform`
components. Input happens only when code calls `ButtonInput.press` and `ButtonInput.release` on
the world's resources, so the `chronoplay` command runs the simulation without any way to play it
interactively.

## Tests

```
pytest
```