"""Armada entry point.

Usage:
    Host (waits for a peer):  python -m armada.main --host 23456
    Join a host:              python -m armada.main --join 127.0.0.1:23456
    Versus AI only:           python -m armada.main   (pick "Versus AI")
    Options: --difficulty admiral, --mute, --scale 4, -v
"""

from __future__ import annotations

import argparse
import logging

import pygame

from armada.config import AUDIO_SAMPLE_RATE, DEFAULT_PORT, DEFAULT_SCALE
from armada.game import Game
from armada.networking.udp_channel import UdpChannel
from armada.rendering.layout import window_size
from armada.simulation.state import Difficulty, Settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Armada - two-player Battleship")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--host", type=int, metavar="PORT", default=None,
        help=f"Host a multiplayer game on PORT (default {DEFAULT_PORT})",
    )
    group.add_argument(
        "--join", type=str, metavar="HOST:PORT",
        help="Join a multiplayer game at HOST:PORT",
    )
    parser.add_argument(
        "--difficulty", choices=[d.name.lower() for d in Difficulty],
        default=Difficulty.CAPTAIN.name.lower(),
        help="AI opponent rank",
    )
    parser.add_argument(
        "--mute", action="store_true",
        help="Start with sounds off",
    )
    parser.add_argument(
        "--scale", type=int, default=DEFAULT_SCALE, metavar="N",
        help="Window pixels per panel pixel",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    channel = UdpChannel()
    if args.join is not None:
        host, port = _parse_address(parser, args.join)
        try:
            channel.connect(host, port)
        except OSError as e:
            parser.error(f"cannot resolve {host}: {e}")
    else:
        channel.host(args.host if args.host is not None else DEFAULT_PORT)

    settings = Settings(
        sounds_enabled=not args.mute,
        difficulty=Difficulty[args.difficulty.upper()],
    )

    pygame.mixer.pre_init(AUDIO_SAMPLE_RATE, -16, 1)
    pygame.init()
    window = pygame.display.set_mode(window_size(max(1, args.scale)))
    pygame.display.set_caption("Armada")
    Game(window, channel, settings).run()
    pygame.quit()


def _parse_address(parser: argparse.ArgumentParser, addr: str) -> tuple[str, int]:
    parts = addr.rsplit(":", 1)
    if len(parts) != 2 or not parts[1].isdigit():
        parser.error(f"invalid address: {addr}. Expected HOST:PORT")
    return parts[0], int(parts[1])


if __name__ == "__main__":
    main()
