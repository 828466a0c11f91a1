"""Delve CLI entry point.

Provides subcommands for running the Socket.IO server, playing a game in the
terminal and printing a generated dungeon. Accepts configuration via flags and
environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
_COLOR_ENABLED = True

# Disable colors if output is not a real terminal (e.g., during pytest capture)
try:
    if not sys.stdout.isatty():  # pragma: no cover - environment dependent
        _COLOR_ENABLED = False
except (AttributeError, ValueError):  # pragma: no cover
    _COLOR_ENABLED = False


def _load_version() -> str:
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()

TILE_COLORS = {
    "#": Fore.WHITE + Style.DIM,
    "P": Fore.CYAN + Style.BRIGHT,
    "M": Fore.RED + Style.BRIGHT,
    "H": Fore.GREEN,
    "K": Fore.YELLOW + Style.BRIGHT,
    "E": Fore.MAGENTA + Style.BRIGHT,
    "V": Fore.BLUE,
}

PLAY_HELP = dedent(
    """
    Commands:
      w/a/s/d, up/down/left/right, north/south/east/west   Move
      status     Health, key and round
      look       Describe your surroundings
      map        Map overview
      ack        Continue to the next survival round
      restart    Restart the current game
      quit       Leave the game
    """
)

_SHORT_MOVES = {"w": "up", "a": "left", "s": "down", "d": "right", "n": "north", "e": "east"}


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Delve Dungeon Server

    Run the real-time Flask-SocketIO server, play a dungeon in the terminal, or
    print a generated dungeon as JSON. Configuration can be provided via CLI
    flags or environment variables. If both are present, CLI flags take
    precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                      Bind address for the web server (default: 0.0.0.0)
          PORT                      Port for the web server (default: 5000)
          DELVE_DEFAULT_DIFFICULTY  Difficulty for new Socket.IO games (default: normal)
          DUNGEON_SEED              Fixed generation seed
          DUNGEON_VOID_CHANCE       Probability of a void tile (default: 0.25)

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Play survival mode in the terminal
          python run.py play --difficulty survival

          # Print a seeded hard dungeon
          python run.py generate --difficulty hard --seed 42
        """
    )

    parser = argparse.ArgumentParser(
        prog="Delve",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Delve Dungeon Server {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the Socket.IO web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the real-time Flask/Socket.IO server",
    )
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode with verbose error pages")
    server_parser.set_defaults(command="server")

    play_parser = subparsers.add_parser(
        "play",
        help="Play a game in the terminal",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Interactive terminal game." + PLAY_HELP,
    )
    play_parser.add_argument("--difficulty", default="normal", help="easy, normal, hard, adventurer or survival")
    play_parser.add_argument("--seed", type=int, default=None, help="Session seed for reproducible dungeons")
    play_parser.set_defaults(command="play")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Print a generated dungeon and its metrics as JSON",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    gen_parser.add_argument("--difficulty", default="normal", help="easy, normal, hard or adventurer")
    gen_parser.add_argument("--seed", type=int, default=None, help="Generation seed")
    gen_parser.add_argument("--extra-monsters", type=int, default=0, help="Monsters added on top of the tier count")
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]
    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "server"
    return args


# ---------------------------------------------------------------- rendering --
def colorize(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text


def render_grid(rows) -> str:
    """Render fogged rows (None = unseen) as text, one line per row."""
    lines = []
    for row in rows:
        cells = []
        for tile in row:
            if tile is None:
                cells.append(" ")
            elif tile in TILE_COLORS:
                cells.append(colorize(tile, TILE_COLORS[tile]))
            else:
                cells.append(tile)
        lines.append(" ".join(cells))
    return "\n".join(lines)


def describe_event(ev: dict) -> str:
    kind = ev.get("type")
    if kind == "boundary-blocked":
        return "You cannot go that way; the dungeon ends there."
    if kind == "wall-bump":
        return "A solid wall blocks your path."
    if kind == "void-fall":
        return "The floor gives way and you fall into the void!"
    if kind == "monster-encountered":
        from delve.dungeon.monsters import archetype_name

        name = archetype_name(ev.get("archetype") or "")
        openers = {1: "A {} blocks your way!", 2: "The {} is still here.", 3: "The wounded {} snarls at you."}
        return openers[ev.get("tier_index", 1)].format(name)
    if kind == "combat-result":
        line = f"You hit for {ev['damage_dealt']}."
        if ev.get("monster_defeated"):
            return line + " The monster falls."
        return (
            line
            + f" It has {ev['monster_health']}/{ev['monster_max_health']} left"
            + f" and hits back for {ev['damage_taken']}. HP {ev['player_health']}."
        )
    if kind == "item-collected":
        if ev.get("kind") == "key":
            return colorize("You pick up a heavy iron key.", Fore.YELLOW)
        return colorize(f"You drink a potion (+{ev.get('healed', 0)}). HP {ev.get('player_health')}.", Fore.GREEN)
    if kind == "exit-locked":
        return "An ancient door, firmly locked. You need a key."
    if kind == "victory":
        return colorize("The key turns and you escape the dungeon!", Fore.GREEN + Style.BRIGHT)
    if kind == "defeat":
        return colorize("You have been slain.", Fore.RED + Style.BRIGHT)
    if kind == "round-advance":
        extra = ev.get("extra_monsters", 0)
        suffix = f", +{extra} monsters" if extra else ""
        return f"Round {ev['round']} awaits ({ev['tier']}{suffix}). Type 'ack' to descend."
    if kind == "moved":
        return "You step into an unexplored room." if ev.get("first_visit") else "You retrace your steps."
    if kind == "dungeon-generated":
        return f"A new {ev['size']}x{ev['size']} dungeon takes shape ({ev['tier']})."
    if kind == "dungeon-reset":
        return "You wake at the entrance; the dungeon has shifted around you."
    if kind == "map-revealed":
        return "The whole map is laid bare."
    return json.dumps(ev)


def play_loop(session, input_fn=input, out=print) -> int:
    """Drive ``session`` from typed commands until quit or end of input."""
    out(PLAY_HELP)
    while True:
        rows = session.revealed_grid()
        if rows is not None:
            out(render_grid(rows))
        try:
            raw = input_fn("> ")
        except EOFError:
            return 0
        cmd = raw.strip().lower()
        if not cmd:
            continue
        if cmd in ("quit", "exit", "q"):
            return 0
        if cmd in ("help", "?"):
            out(PLAY_HELP)
            continue
        if cmd == "look":
            cmd = "location"
        if cmd == "ack":
            cmd = "acknowledge"
        if cmd in ("status", "location", "map", "acknowledge", "restart"):
            result = session.dispatch(cmd)
        else:
            result = session.dispatch("move", direction=_SHORT_MOVES.get(cmd, cmd))
        if "error" in result:
            out(colorize(f"[{result['error']}]", Fore.RED))
            continue
        for ev in result.get("events", []):
            out(describe_event(ev))
        for key in ("status", "location", "map"):
            if key in result:
                out(json.dumps(result[key], indent=2))


# -------------------------------------------------------------- subcommands --
def generate_command(difficulty: str, seed, extra_monsters: int = 0, out=print) -> int:
    from delve.dungeon import DungeonConfig, UnknownDifficulty, generate_dungeon, get_tier

    try:
        tier = get_tier(difficulty)
    except UnknownDifficulty:
        out(f"[ERROR] Unknown difficulty: {difficulty}")
        return 1
    cfg = DungeonConfig.from_tier(tier, extra_monsters=extra_monsters, seed=seed).apply_env_overrides()
    d = generate_dungeon(cfg)
    out(
        json.dumps(
            {
                "tier": tier.name,
                "seed": d.seed,
                "has_void": d.has_void,
                "fallback": d.fallback,
                "rows": str(d.grid).splitlines(),
                "entities": d.entities.to_list(),
                "metrics": d.metrics,
            },
            indent=2,
        )
    )
    return 0


def play_command(difficulty: str, seed, input_fn=input, out=print) -> int:
    from delve.services.game_session import GameSession

    session = GameSession(seed=seed)
    result = session.dispatch("start", difficulty=difficulty)
    if "error" in result:
        out(f"[ERROR] Cannot start game: {result['error']}")
        return 1
    for ev in result["events"]:
        out(describe_event(ev))
    return play_loop(session, input_fn=input_fn, out=out)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return generate_command(args.difficulty, args.seed, args.extra_monsters)
    if mode == "play":
        return play_command(args.difficulty, args.seed)

    env_host = os.getenv("HOST", "0.0.0.0")
    env_port = int(os.getenv("PORT", "5000"))
    host = getattr(args, "host", None) or env_host
    port = int(getattr(args, "port", None) or env_port)

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoints only after environment is ready
    from delve.server import start_server

    title = colorize("Delve Dungeon Server Bootup", Fore.CYAN + Style.BRIGHT)

    def label(text: str) -> str:
        return colorize(text, Fore.YELLOW)

    def value(val) -> str:
        return colorize(str(val), Fore.GREEN)

    divider = colorize("=" * 40, Fore.MAGENTA)
    lines = [
        divider,
        f"  {title}",
        divider,
        f"  {label('Mode:'):12} {value(mode.upper())}",
        f"  {label('Host:'):12} {value(host)}",
        f"  {label('Port:'):12} {value(port)}",
        f"  {label('Difficulty:'):12} {value(os.getenv('DELVE_DEFAULT_DIFFICULTY', 'normal'))}",
        f"  {label('WebSockets:'):12} {value('enabled')}",
        divider,
        "",
    ]
    print("\n".join(lines))

    from delve.logging_utils import log

    log.info(event="startup", mode=mode, host=host, port=port)
    start_server(host=host, port=port, debug=bool(getattr(args, "debug", False)))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
