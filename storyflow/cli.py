"""
Command line interface for validating and playing story documents.

Usage:
    python -m storyflow validate story.json
    python -m storyflow play story.json --seed 42

Commands:
    validate   Check every layer for a single start node and unreachable nodes
    play       Play the story in the terminal (numbered choices, b back,
               r restart, q quit, enter to continue)
"""

import argparse
import sys
from typing import Dict, List, Optional

from .config import settings
from .engine import StoryEngine, validate_document
from .errors import StoryDocumentError
from .schemas import ConnectivityResult, Node, StoryDocument, load_story_document
from .utils import RandomSource
from .utils.logger import LogLevelContext, get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_NOT_READY = 1
EXIT_BAD_DOCUMENT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storyflow",
        description="Validate and play branching story documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help=f"Logging level (default: {settings.log_level})",
    )
    parser.add_argument("--log-file", default=None, help="Optional log file path")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Check graph connectivity")
    validate_parser.add_argument("file", help="Story document (JSON)")

    play_parser = subparsers.add_parser("play", help="Play a story in the terminal")
    play_parser.add_argument("file", help="Story document (JSON)")
    play_parser.add_argument("--seed", type=int, help="Seed for random decisions")
    play_parser.add_argument(
        "--force",
        action="store_true",
        help="Play even if the graph is not ready for playback",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level or settings.log_level,
        log_file=args.log_file or settings.log_file,
    )

    try:
        document = load_story_document(args.file)
    except StoryDocumentError as e:
        logger.error(f"Cannot load {args.file}: {e}")
        return EXIT_BAD_DOCUMENT

    if args.command == "validate":
        return validate_command(document)
    return play_command(document, seed=args.seed, force=args.force)


def validate_command(document: StoryDocument) -> int:
    results = _validate(document)
    for layer_id, result in results.items():
        print(_format_result(layer_id, result))
        for info in result.start_nodes if result.start_node_count > 1 else []:
            print(f"    start: {info.id} [{info.type}] {info.title}: {info.text_preview}")
        for info in result.unreachable_nodes_info:
            print(f"    unreachable: {info.id} [{info.type}] {info.title}: {info.text_preview}")

    if all(result.is_ready_for_playback for result in results.values()):
        return EXIT_OK
    return EXIT_NOT_READY


def play_command(
    document: StoryDocument, seed: Optional[int] = None, force: bool = False
) -> int:
    results = _validate(document)
    not_ready = [
        layer_id for layer_id, result in results.items()
        if not result.is_ready_for_playback
    ]
    if not_ready and not force:
        for layer_id in not_ready:
            print(_format_result(layer_id, results[layer_id]))
        print("Graph is not ready for playback (use --force to play anyway)")
        return EXIT_NOT_READY

    random_source = RandomSource(seed) if seed is not None else None
    engine = StoryEngine(random_source=random_source)
    engine.initialize(document)

    start_node = engine.get_start_node()
    if start_node is None:
        print("Story has no start node")
        return EXIT_NOT_READY

    engine.visit_node(start_node.id)
    _play_loop(engine)
    return EXIT_OK


def _play_loop(engine: StoryEngine) -> None:
    show = True
    while True:
        current = engine.get_current_node()
        if current is None:
            return
        choices = engine.get_available_choices(current.id)
        if show:
            _show_node(current, choices)
        show = False

        try:
            command = input("> ").strip().lower()
        except EOFError:
            return

        if command == "q":
            return
        elif command == "b":
            if engine.go_back() is None:
                print("Already at the start")
            else:
                show = True
        elif command == "r":
            start_node = engine.restart()
            if start_node is not None:
                engine.visit_node(start_node.id)
            show = True
        elif command.isdigit() and choices:
            index = int(command) - 1
            if not 0 <= index < len(choices):
                print(f"Pick a choice between 1 and {len(choices)}")
                continue
            if engine.execute_choice(choices[index].id) is None:
                print("-- The end --")
            else:
                show = True
        elif command == "" and not choices:
            if engine.move_forward(current.id) is None:
                print("-- The end --")
            else:
                show = True
        else:
            print("Unknown command")


def _show_node(node: Node, choices: List[Node]) -> None:
    print()
    if node.data.title:
        print(f"== {node.data.title} ==")
    if node.data.text:
        print(node.data.text)
    if choices:
        for number, choice in enumerate(choices, start=1):
            print(f"  {number}. {choice.data.text or choice.data.title or choice.id}")
        print("[number] choose, b back, r restart, q quit")
    else:
        print("[enter] continue, b back, r restart, q quit")


def _validate(document: StoryDocument) -> Dict[str, ConnectivityResult]:
    # Results are printed by the caller
    with LogLevelContext("WARNING", "storyflow.engine.connectivity"):
        return validate_document(document)


def _format_result(layer_id: str, result: ConnectivityResult) -> str:
    if result.is_ready_for_playback:
        return f"{layer_id}: ready for playback"
    if result.start_node_count == 0 and result.is_connected:
        return f"{layer_id}: empty"
    return f"{layer_id}: NOT READY - {result.message}"


if __name__ == "__main__":
    sys.exit(main())
