# memory_match/simulation.py
# Autoplay: one perfect-memory player against the engine on an asyncio loop.
# Peek and tick delays are shortened so a whole game runs in well under a second.

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .engine import GameEngine
from .scheduler import AsyncioScheduler

COLOR = "\x1b[36m"
RESET = "\x1b[0m"


@dataclass
class Stats:
    total_flips: int = 0
    rejected_flips: int = 0
    matches: int = 0
    mismatches: int = 0
    notifications: int = 0


# ----- tiny helpers -----

async def timeout_ms(milliseconds: float) -> None:
    await asyncio.sleep(milliseconds / 1000.0)


async def wait_until_ready(engine: GameEngine, poll_ms: float) -> None:
    while engine.awaiting_resolution:
        await timeout_ms(poll_ms)


def hidden_positions(engine: GameEngine) -> List[int]:
    return [i for i, card in enumerate(engine.cards) if not card.face_up and not card.matched]


def known_pair(engine: GameEngine, memory: Dict[int, str]) -> Optional[Tuple[int, int]]:
    by_content: Dict[str, List[int]] = {}
    for pos, content in memory.items():
        if engine.cards[pos].matched:
            continue
        by_content.setdefault(content, []).append(pos)
    for positions in by_content.values():
        if len(positions) == 2:
            return positions[0], positions[1]
    return None


# ----- player -----

async def play(
    engine: GameEngine,
    stats: Stats,
    rng: random.Random,
    poll_ms: float = 2.0,
    verbose: bool = True,
) -> None:
    memory: Dict[int, str] = {}

    def say(message: str) -> None:
        if verbose:
            print(f"{COLOR}[player] {message}{RESET}")

    async def flip(pos: int) -> bool:
        await wait_until_ready(engine, poll_ms)
        if not engine.flip_at(pos):
            stats.rejected_flips += 1
            return False
        stats.total_flips += 1
        memory[pos] = engine.cards[pos].content
        return True

    def unseen() -> List[int]:
        return [i for i in hidden_positions(engine) if i not in memory]

    while not engine.finished:
        await wait_until_ready(engine, poll_ms)

        pair = known_pair(engine, memory)
        first = pair[0] if pair else rng.choice(unseen())
        if not await flip(first):
            continue
        say(f"flipped {first} -> {memory[first]}")

        content = memory[first]
        partner = next(
            (p for p, c in memory.items()
             if c == content and p != first and not engine.cards[p].matched),
            None,
        )
        if partner is None:
            partner = rng.choice(unseen())

        await timeout_ms(rng.random())
        if not await flip(partner):
            continue

        if engine.cards[partner].matched:
            stats.matches += 1
            say(f"MATCH {first}/{partner} ({content}) score={engine.score}")
        else:
            stats.mismatches += 1
            say(f"no match {first}/{partner} ({content} vs {memory[partner]}) score={engine.score}")


# ----- main -----

async def simulation_main(
    peek_delay: float = 0.05,
    tick_interval: float = 0.05,
    seed: Optional[int] = None,
    verbose: bool = True,
) -> Tuple[GameEngine, Stats]:
    rng = random.Random(seed)
    engine = GameEngine(
        AsyncioScheduler(),
        rng=random.Random(seed),
        peek_delay=peek_delay,
        tick_interval=tick_interval,
    )
    stats = Stats()

    def count() -> None:
        stats.notifications += 1

    engine.subscribe(count)

    if verbose:
        print("MEMORY MATCH - AUTOPLAY SIMULATION")
        print(f"peek delay {peek_delay}s, tick {tick_interval}s\n")

    await play(engine, stats, rng, verbose=verbose)

    if verbose:
        print("\nSIMULATION COMPLETE")
        print(f"Total flips: {stats.total_flips}")
        print(f"Matches: {stats.matches}")
        print(f"Mismatches: {stats.mismatches}")
        print(f"Ticks elapsed: {engine.elapsed}")
        print(f"Final score: {engine.score}")
    return engine, stats


if __name__ == "__main__":
    asyncio.run(simulation_main())
