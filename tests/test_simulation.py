import asyncio

from memory_match.simulation import simulation_main


def test_autoplay_finishes_a_game(capsys):
    engine, stats = asyncio.run(
        simulation_main(peek_delay=0.005, tick_interval=0.005, seed=3, verbose=False)
    )
    assert engine.finished is True
    assert engine.timer_running is False
    assert stats.matches == 8
    assert stats.rejected_flips == 0
    assert stats.total_flips == 2 * (stats.matches + stats.mismatches)
    assert stats.notifications > 0
    assert engine.score >= 0
    assert capsys.readouterr().out == ""


def test_autoplay_prints_progress(capsys):
    asyncio.run(simulation_main(peek_delay=0.005, tick_interval=0.005, seed=11))
    out = capsys.readouterr().out
    assert "SIMULATION COMPLETE" in out
    assert "Matches: 8" in out
