"""
Snakes & Ladders Board Mapper - Entry Point

Auto-detects board mappings, inspects saved mappings and plays a console
game against the AI using the active mapping.

Example:
    python main.py detect assets/board-default.jpg --save --debug
    python main.py show snl-mapping.json
    python main.py play --seed 42
    python main.py config min_confidence 0.6
"""

import sys
import json
import logging
import argparse
import random
from datetime import datetime
from typing import Optional

from PIL import Image

from src.detection import DEBUG_DIR, auto_detect_mapping, save_debug_image
from src.game import BoardConfig, GameSession, Player
from src.mapping import MappingDocument, MappingFormatError, MappingStore, export_mapping, import_mapping
from src.settings import load_settings, merge_settings, save_settings


logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Configure logging - output to both console and file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.StreamHandler(),  # Console output
            logging.FileHandler("snl.log", mode='w', encoding='utf-8')  # File output
        ]
    )


class Application:
    """
    Command dispatcher.

    Holds loaded settings and the mapping store shared by all commands.
    """

    def __init__(self, debug_mode: bool = False):
        """
        Initialize the application.

        Args:
            debug_mode: Enable debug images via CLI (overrides saved setting)
        """
        self.settings = load_settings()
        self.store = MappingStore(self.settings["mapping_store"])
        self.debug_mode = debug_mode or self.settings.get("debug_enabled", False)

    def detect(self, image: Optional[str], output: Optional[str], save: bool) -> int:
        """Run auto-detection on a board image."""
        source = image or self.settings["board_image"]
        logger.info(f"Auto-detecting mapping from {source}")

        result = auto_detect_mapping(source, lambda msg: logger.info(msg))
        if not result.success:
            logger.error(result.message)
            return 1

        mapping = result.mapping
        print(f"{result.message} Confidence {result.confidence * 100:.0f}% "
              f"(boundary {result.boundary_confidence * 100:.0f}%)")
        _print_mapping(mapping)

        if result.confidence < self.settings["min_confidence"]:
            logger.warning("Confidence below threshold - consider manual calibration")

        if output:
            export_mapping(mapping, output)
        if save:
            self.store.save(mapping)

        if self.debug_mode:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = DEBUG_DIR / f"debug_{timestamp}.png"
            save_debug_image(Image.fromarray(result.image), mapping, result, path)
            logger.info(f"Debug image saved: {path}")

        return 0

    def show(self, path: Optional[str]) -> int:
        """Print a mapping file or the stored mapping."""
        try:
            mapping = import_mapping(path) if path else self.store.load()
        except (MappingFormatError, OSError) as e:
            logger.error(f"Cannot read mapping: {e}")
            return 2

        if mapping is None:
            print("No mapping stored.")
            return 1

        _print_mapping(mapping)
        return 0

    def play(self, mapping_path: Optional[str], seed: Optional[int], auto: bool) -> int:
        """Play a console game against the AI."""
        try:
            mapping = import_mapping(mapping_path) if mapping_path else self.store.load()
        except (MappingFormatError, OSError) as e:
            logger.error(f"Cannot read mapping: {e}")
            return 2

        config = BoardConfig.from_mapping(mapping) if mapping else BoardConfig.default()
        session = GameSession(config, rng=random.Random(seed))
        shown = 0

        while session.winner is None:
            for message in session.messages[shown:]:
                print(f"[{message.sender}] {message.text}")
            shown = len(session.messages)

            if session.current_turn == Player.HUMAN:
                if not auto:
                    try:
                        answer = input(f"You are on {session.human_cell}, AI on {session.ai_cell}. "
                                       f"Press Enter to roll (q to quit): ")
                    except EOFError:
                        return 0
                    if answer.strip().lower() == "q":
                        return 0

            player = session.current_turn
            session.roll()
            if player == Player.HUMAN:
                print(f"You rolled {session.last_roll} -> {session.human_cell}")
            else:
                print(f"AI rolled {session.last_roll} -> {session.ai_cell}")

        for message in session.messages[shown:]:
            print(f"[{message.sender}] {message.text}")
        return 0

    def config(self, key: Optional[str], value: Optional[str]) -> int:
        """Show settings, or set one value (parsed as JSON when possible)."""
        if key is None:
            for name, current in sorted(self.settings.items()):
                print(f"{name} = {json.dumps(current)}")
            return 0

        if value is None:
            if key not in self.settings:
                logger.error(f"Unknown setting: {key}")
                return 1
            print(json.dumps(self.settings[key]))
            return 0

        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = value

        updated = merge_settings({**self.settings, key: parsed})
        if updated[key] != parsed:
            logger.error(f"Invalid value for '{key}': {value}")
            return 1

        save_settings(updated)
        self.settings = updated
        print(f"{key} = {json.dumps(parsed)}")
        return 0


def _print_mapping(mapping: MappingDocument) -> None:
    """Print a short summary of a mapping."""
    print(f"Note: {mapping.meta.get('note', '')}")
    print(f"Corners: {[(round(p.x, 1), round(p.y, 1)) for p in mapping.corners]}")
    print(f"Centers: {len(mapping.centers)}")
    print(f"Ladders: {', '.join(f'{b}->{t}' for b, t in sorted(mapping.ladders.items())) or '-'}")
    print(f"Snakes:  {', '.join(f'{h}->{t}' for h, t in sorted(mapping.snakes.items())) or '-'}")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Snakes & Ladders Board Mapper - board calibration and game"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Auto-detect a mapping from a board image")
    detect.add_argument("image", nargs="?", help="Image path or URL (default: board_image setting)")
    detect.add_argument("--output", "-o", help="Export the mapping to this JSON file")
    detect.add_argument("--save", "-s", action="store_true", help="Save the mapping to the mapping store")
    detect.add_argument("--debug", "-d", action="store_true", help="Save an annotated debug image")

    show = subparsers.add_parser("show", help="Show a mapping file or the stored mapping")
    show.add_argument("file", nargs="?", help="Mapping JSON file (default: stored mapping)")

    play = subparsers.add_parser("play", help="Play against the AI in the console")
    play.add_argument("--mapping", "-m", help="Mapping JSON file (default: stored mapping)")
    play.add_argument("--seed", type=int, help="Random seed for dice")
    play.add_argument("--auto", action="store_true", help="Roll automatically for the human player")

    config = subparsers.add_parser("config", help="Show or change settings in config.json")
    config.add_argument("key", nargs="?", help="Setting name (default: list all)")
    config.add_argument("value", nargs="?", help="New value, parsed as JSON when possible")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Run the selected command."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    application = Application(debug_mode=getattr(args, "debug", False))

    if args.command == "detect":
        return application.detect(args.image, args.output, args.save)
    if args.command == "show":
        return application.show(args.file)
    if args.command == "play":
        return application.play(args.mapping, args.seed, args.auto)
    return application.config(args.key, args.value)


if __name__ == "__main__":
    sys.exit(main())
