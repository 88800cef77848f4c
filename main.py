"""
main.py — Bootstrap

1. Parse command-line overrides
2. Load tuning constants
3. Create the app
4. Push the fireworks scene
5. Run

    python main.py --profile grand --seed 7
"""

from __future__ import annotations
import argparse

from components.profile import available_profiles
from core import tuning
from core.app import App
from core.constants import DEFAULT_FPS, DEFAULT_HEIGHT, DEFAULT_TITLE, DEFAULT_WIDTH
from scenes.fireworks_scene import FireworksScene


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Canvas firework show.")
    ap.add_argument("--profile", default=None,
                    help="profile name from [profiles] (default: [sim].profile)")
    ap.add_argument("--seed", type=int, default=None,
                    help="seed the show's RNG for a repeatable run")
    ap.add_argument("--width", type=int, default=None)
    ap.add_argument("--height", type=int, default=None)
    ap.add_argument("--fps", type=int, default=None)
    ap.add_argument("--tuning", default=None,
                    help="path to a tuning TOML (default: data/tuning.toml)")
    ap.add_argument("--no-audio", action="store_true", help="never open the mixer")
    ap.add_argument("--start-running", action="store_true",
                    help="start unpaused instead of waiting for a click")
    ap.add_argument("--list-profiles", action="store_true")
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    tuning.load(args.tuning)

    if args.list_profiles:
        for name in available_profiles():
            print(name)
        return

    app = App(
        title=tuning.get("display", "title", DEFAULT_TITLE),
        width=args.width or int(tuning.get("display", "width", DEFAULT_WIDTH)),
        height=args.height or int(tuning.get("display", "height", DEFAULT_HEIGHT)),
        fps=args.fps or int(tuning.get("display", "fps", DEFAULT_FPS)),
    )
    app.push_scene(FireworksScene(
        profile=args.profile,
        seed=args.seed,
        start_paused=False if args.start_running else None,
        audio=not args.no_audio,
    ))
    app.run()


if __name__ == "__main__":
    main()
