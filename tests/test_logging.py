"""Tests for the console logger."""

import pytest
from chip8cpu import CPU, UnsupportedOpcode
from chip8cpu.logging import ConsoleLogger


def test_level_filtering(capsys):
    logger = ConsoleLogger(name="Test", log_level="WARNING", use_colors=False, show_timestamps=False)
    logger.info("hidden")
    logger.error("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert out.strip() == "[   ERROR][Test] shown"


def test_unknown_level():
    with pytest.raises(ValueError):
        ConsoleLogger(log_level="LOUD")


def test_engine_logs_fault(capsys):
    cpu = CPU(logger=ConsoleLogger(name="CPU", log_level="ERROR", use_colors=False, show_timestamps=False))
    cpu.load_program([0x8AB9])
    with pytest.raises(UnsupportedOpcode):
        cpu.step()

    out = capsys.readouterr().out
    assert "Halted at PC=0x200" in out
    assert "8AB9" in out
