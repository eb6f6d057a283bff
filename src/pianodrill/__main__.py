"""Entry point for `python -m pianodrill` or the `pianodrill` console script."""

import argparse
import logging

from pianodrill.midi_input import MidiDeviceError, MidiInput
from pianodrill.models import HandScope, LeftHandPolicy
from pianodrill.settings import load_settings, save_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="pianodrill: adaptive piano note trainer")
    parser.add_argument("--hands", choices=[s.name.lower() for s in HandScope], help="Hand scope")
    parser.add_argument(
        "--left-hand", choices=[p.name.lower() for p in LeftHandPolicy], help="Left-hand content"
    )
    parser.add_argument("--no-durations", action="store_true", help="Don't check hold times")
    parser.add_argument("--metronome", action="store_true", help="Start with the metronome on")
    parser.add_argument("--soundfont", help="SoundFont (.sf2) for key echo and metronome")
    parser.add_argument("--port", type=int, help="MIDI input port index")
    parser.add_argument("--list-ports", action="store_true", help="List MIDI inputs and exit")
    parser.add_argument("--demo", action="store_true", help="F7/F8 play the target or a wrong key")
    parser.add_argument("--save", action="store_true", help="Remember these options")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_ports:
        try:
            ports = MidiInput.list_ports()
        except MidiDeviceError as exc:
            logging.getLogger(__name__).error("%s", exc)
            raise SystemExit(1) from exc
        for i, name in enumerate(ports):
            print(f"{i}: {name}")
        return

    settings = load_settings()
    if args.hands:
        settings.hand_scope = args.hands.upper()
    if args.left_hand:
        settings.left_hand_policy = args.left_hand.upper()
    if args.no_durations:
        settings.check_durations = False
    if args.metronome:
        settings.metronome = True
    if args.soundfont:
        settings.soundfont = args.soundfont
    if args.port is not None:
        settings.midi_port = args.port
    if args.save:
        save_settings(settings)

    from pianodrill.app import App

    App(settings, demo=args.demo).run()


if __name__ == "__main__":
    main()
