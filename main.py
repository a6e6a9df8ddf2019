# main.py
from __future__ import annotations

import argparse
from typing import List

from code_factory import build_rng
from debug import COMPONENTS, Debug
from engine import Config, Engine
from errors import EnigmaError
from snapshot import load_spec_file
from specs import CodeConfig
from suites import SUITES

# ────────────────────────────────────────────────────────────────────────
#  0. Logging
# ────────────────────────────────────────────────────────────────────────


debug = Debug()


# ────────────────────────────────────────────────────────────────────────
#  1. CLI helpers
# ────────────────────────────────────────────────────────────────────────


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Encipher text on a simulated rotor machine")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--spec", metavar="FILE", help="Load the machine from a JSON spec file instead of the built-in suite.")
    src.add_argument("--snapshot", metavar="FILE", help="Restore a saved engine snapshot (spec, code and history).")
    p.add_argument("--suite", choices=sorted(SUITES), default="legacy", help="Built-in rotor suite. Default: legacy")

    code = p.add_mutually_exclusive_group()
    code.add_argument("--code", metavar="CODE", help='Manual code, e.g. "<1,2,3><ODX><I>" or "<1,2,3><ODX><I><A|B,C|D>".')
    code.add_argument("--random", action="store_true", help="Pick a random code.")
    p.add_argument("--seed", type=int, help="Seed for --random (repeatable codes).")
    p.add_argument("--plugs", type=int, default=5, help="Maximum plug pairs for --random. Default: 5")

    p.add_argument("-m", "--message", metavar="TEXT", help="Text to process. If omitted, an interactive REPL starts.")
    p.add_argument("--trace", action="store_true", help="Print the signal path of every character.")
    p.add_argument("--save", metavar="FILE", help="Save a snapshot when done.")
    p.add_argument("--debug", metavar="COMPONENT", action="append", choices=COMPONENTS, default=[],
                   help=f"Enable debug logging for a component ({', '.join(COMPONENTS)}). Repeatable.")
    return p.parse_args(argv)


def build_engine(args: argparse.Namespace) -> Engine:
    engine = Engine(Config(max_random_plugs=args.plugs))

    if args.snapshot:
        engine.load_snapshot(args.snapshot)
    elif args.spec:
        engine.load_machine(load_spec_file(args.spec))
    else:
        engine.load_machine(SUITES[args.suite]())

    if args.code:
        engine.config_manual(CodeConfig.parse(args.code))
    elif args.random:
        engine.config_random(build_rng(args.seed))
    elif not engine.is_configured:
        # neither flag nor snapshot code → random, like a fresh daily key
        engine.config_random(build_rng(args.seed))
    return engine


def show(engine: Engine, text: str, *, trace: bool) -> None:
    result = engine.process(text)
    if trace:
        for t in result.traces:
            print(t)
            print()
    print(f"Output: {result.output}")


def repl(engine: Engine, *, trace: bool) -> None:
    spec = engine.machine_spec()
    print(f"\nLoaded machine with alphabet length {spec.alphabet.size()}.")
    print(f"Code: {engine.current_config()}")
    print("Commands: :reset  :history  :state  :save PATH")
    print("Type blank line to quit.\n")
    while True:
        txt = input("\nMessage: ")
        if not txt.strip():
            break
        cmd, _, arg = txt.strip().partition(" ")
        try:
            if cmd == ":reset":
                engine.reset()
                print("Rotors back at", "".join(engine.current_config().positions))
            elif cmd == ":history":
                print(engine.history())
            elif cmd == ":state":
                print(engine.machine_data())
            elif cmd == ":save":
                if not arg:
                    print("Usage: :save PATH")
                    continue
                print("Saved", engine.save_snapshot(arg.strip()))
            else:
                show(engine, txt, trace=trace)
        except EnigmaError as exc:
            print(f"❌  {exc}")


# ────────────────────────────────────────────────────────────────────────
#  2. Main entry point
# ────────────────────────────────────────────────────────────────────────


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    if args.debug:
        debug.enable(*args.debug)

    try:
        engine = build_engine(args)
    except EnigmaError as exc:
        print(f"❌  {exc}")
        return 1

    # one‑shot mode ------------------------------------------------------
    if args.message is not None:
        print(f"Code: {engine.current_config()}")
        try:
            show(engine, args.message, trace=args.trace)
        except EnigmaError as exc:
            print(f"❌  {exc}")
            return 1
    else:
        repl(engine, trace=args.trace)

    if args.save:
        try:
            print("Saved", engine.save_snapshot(args.save))
        except EnigmaError as exc:
            print(f"❌  {exc}")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
