"""Tests for the stateful engine: lifecycle, stepping, timers and key wait."""

import numpy as np
import pytest
from chip8cpu import (
    CPU, ProgramTooLarge, UnsupportedOpcode, CallStackUnderflow, PROGRAM_START, DISPLAY_SIZE, FONT_DATA
)
from chip8cpu.logging import ConsoleLogger
from conftest import FakeClock


class TestLifecycle:
    """initialize and load_program."""

    def test_initialize_zeroes_everything(self, cpu):
        assert cpu.pc == 0
        assert cpu.index == 0
        assert cpu.registers == [0] * 16
        assert cpu.keyboard == 0
        assert not cpu.waiting_for_key
        assert int(np.sum(np.asarray(cpu.state.memory))) == 0
        assert cpu.display.shape == (DISPLAY_SIZE,)
        assert not cpu.display.any()

    def test_load_program_layout(self, cpu):
        cpu.load_program([0x00E0, 0x1234, 0xABCD])

        memory = np.asarray(cpu.state.memory)
        assert cpu.pc == PROGRAM_START
        assert list(memory[:80]) == list(np.asarray(FONT_DATA))
        assert list(memory[0x200:0x207]) == [0x00, 0xE0, 0x12, 0x34, 0xAB, 0xCD, 0x00]

    def test_load_program_fully_resets(self, cpu):
        cpu.load_program([0x6A07, 0xA321, 0x2300])
        cpu.run(3)
        cpu.set_key(0x4)

        cpu.load_program([0x1200])

        assert cpu.registers == [0] * 16
        assert cpu.index == 0
        assert cpu.state.stack.depth == 0
        assert cpu.pc == PROGRAM_START
        # host input survives a reload
        assert cpu.keyboard == 0x4

    def test_load_program_clears_timers_display_and_wait(self, cpu, clock):
        # V0 = 9; delay = sound = V0; draw glyph 0; wait for key into V1
        cpu.load_program([0x6009, 0xF015, 0xF018, 0xD005, 0xF10A])
        cpu.run(5)
        assert cpu.delay_timer == 9
        assert cpu.sound_timer == 9
        assert cpu.display.any()
        assert cpu.waiting_for_key
        assert cpu.state.last_timer_tick is not None

        cpu.load_program([0x1200])

        assert cpu.delay_timer == 0
        assert cpu.sound_timer == 0
        assert not cpu.sound_active
        assert not cpu.display.any()
        assert not cpu.waiting_for_key
        assert cpu.state.last_timer_tick is None
        assert not cpu.halted

    def test_largest_program_fits(self, cpu):
        cpu.load_program([0x1200] * 1792)
        assert np.asarray(cpu.state.memory)[0xFFF] == 0x00
        assert np.asarray(cpu.state.memory)[0xFFE] == 0x12

    def test_program_too_large(self, cpu):
        cpu.load_program([0x6001])
        with pytest.raises(ProgramTooLarge):
            cpu.load_program([0x1200] * 1793)
        # state untouched
        assert np.asarray(cpu.state.memory)[0x200] == 0x60

    def test_program_word_range(self, cpu):
        with pytest.raises(ValueError):
            cpu.load_program([0x10000])

    def test_load_rom_bytes_drops_odd_byte(self, cpu):
        cpu.load_rom(bytes([0x60, 0x05, 0x71]))
        memory = np.asarray(cpu.state.memory)
        assert list(memory[0x200:0x203]) == [0x60, 0x05, 0x00]

    def test_load_rom_file(self, cpu, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(bytes([0x6A, 0x2A, 0x12, 0x02]))
        cpu.load_rom(str(rom))
        cpu.step()
        assert cpu.registers[0xA] == 0x2A


class TestStep:
    """Fetch-decode-execute through the engine."""

    def test_step_advances_pc(self, cpu):
        cpu.load_program([0x6105, 0x7103])
        cpu.step()
        assert cpu.pc == 0x202
        cpu.step()
        assert cpu.pc == 0x204
        assert cpu.registers[1] == 0x08

    def test_jump_with_offset(self, cpu):
        cpu.load_program([0x6010, 0xB200])
        cpu.run(2)
        assert cpu.pc == 0x210

    def test_subroutine(self, cpu):
        # 0x200: call 0x206; 0x202: V2 = 2; 0x204: loop; 0x206: V1 = 1; return
        cpu.load_program([0x2206, 0x6202, 0x1204, 0x6101, 0x00EE])
        cpu.run(4)
        assert cpu.registers[1] == 1
        assert cpu.registers[2] == 2
        assert cpu.pc == 0x204

    def test_clear_screen(self, cpu):
        cpu.load_program([0xD005, 0x00E0])
        cpu.step()
        assert cpu.display.any()
        cpu.step()
        assert not cpu.display.any()

    def test_bcd_of_255(self, cpu):
        cpu.load_program([0x60FF, 0xA300, 0xF033])
        cpu.run(3)
        memory = np.asarray(cpu.state.memory)
        assert list(memory[0x300:0x303]) == [2, 5, 5]

    def test_shift_quirk_through_engine(self, clock):
        quirky = CPU(clock=clock, shift_sets_carry=True, logger=ConsoleLogger(log_level="CRITICAL"))
        quirky.load_program([0x6003, 0x8006])
        quirky.run(2)
        assert quirky.registers[0] == 1
        assert quirky.registers[15] == 1


class TestFaults:
    """Fatal conditions halt the engine."""

    def test_unsupported_opcode_halts(self, cpu):
        cpu.load_program([0x5001, 0x6001])

        with pytest.raises(UnsupportedOpcode) as excinfo:
            cpu.step()

        assert excinfo.value.opcode == 0x5001
        assert cpu.halted
        assert cpu.pc == PROGRAM_START

        with pytest.raises(UnsupportedOpcode):
            cpu.step()
        assert cpu.pc == PROGRAM_START
        assert cpu.registers[0] == 0

    def test_stack_underflow_halts(self, cpu):
        cpu.load_program([0x00EE])
        with pytest.raises(CallStackUnderflow):
            cpu.step()
        assert cpu.halted

    def test_reload_clears_fault(self, cpu):
        cpu.load_program([0xFFFF])
        with pytest.raises(UnsupportedOpcode):
            cpu.step()

        cpu.initialize()
        cpu.load_program([0x6001])
        cpu.step()
        assert not cpu.halted
        assert cpu.registers[0] == 1


class TestTimers:
    """Timers decay by elapsed clock time, not by step count."""

    def test_delay_timer_decays_to_zero(self, cpu, clock):
        # V0 = 5; delay = V0; loop forever
        cpu.load_program([0x6005, 0xF015, 0x1204])
        cpu.run(2)
        assert cpu.delay_timer == 5

        for _ in range(5):
            clock.advance(0.017)
            cpu.step()
        assert cpu.delay_timer == 0

        for _ in range(3):
            clock.advance(0.017)
            cpu.step()
        assert cpu.delay_timer == 0

    def test_timers_rate_limited(self, cpu, clock):
        cpu.load_program([0x6009, 0xF015, 0xF018, 0x1206])
        cpu.run(3)

        for _ in range(50):
            cpu.step()
        assert cpu.delay_timer == 9
        assert cpu.sound_timer == 9

        clock.advance(0.010)
        cpu.step()
        assert cpu.delay_timer == 9

        clock.advance(0.007)
        cpu.step()
        assert cpu.delay_timer == 8
        assert cpu.sound_timer == 8

    def test_tick_fires_at_exactly_one_period(self):
        clock = FakeClock(start=0.0)
        cpu = CPU(clock=clock, logger=ConsoleLogger(log_level="CRITICAL"))
        cpu.load_program([0x6002, 0xF015, 0x1204])
        cpu.run(2)

        clock.advance(0.016)
        cpu.step()
        assert cpu.delay_timer == 1

    def test_sound_active(self, cpu, clock):
        cpu.load_program([0x6001, 0xF018, 0x1204])
        cpu.run(2)
        assert cpu.sound_active

        clock.advance(0.02)
        cpu.step()
        assert not cpu.sound_active

    def test_read_delay_timer(self, cpu, clock):
        cpu.load_program([0x6003, 0xF015, 0xF107])
        cpu.run(2)
        clock.advance(0.017)
        cpu.step()
        assert cpu.registers[1] == 2


class TestKeyboard:
    """Single-key latch and the FX0A wait state."""

    def test_wait_for_key(self, cpu):
        cpu.load_program([0xF00A, 0x6105])
        cpu.step()
        assert cpu.waiting_for_key
        assert cpu.pc == 0x202

        for _ in range(10):
            cpu.step()
        assert cpu.pc == 0x202
        assert cpu.registers[0] == 0
        assert cpu.registers[1] == 0

        cpu.set_key(0x7)
        cpu.step()
        assert cpu.registers[0] == 0x7
        assert cpu.pc == 0x202
        assert not cpu.waiting_for_key

        cpu.step()
        assert cpu.registers[1] == 0x05

    def test_wait_stores_into_requested_register(self, cpu):
        cpu.load_program([0xFA0A])
        cpu.step()
        cpu.set_key(0xC)
        cpu.step()
        assert cpu.registers[0xA] == 0xC

    def test_timers_run_while_waiting(self, cpu, clock):
        cpu.load_program([0x6004, 0xF015, 0xF00A])
        cpu.run(3)
        clock.advance(0.017)
        cpu.step()
        assert cpu.waiting_for_key
        assert cpu.delay_timer == 3

    def test_key_skip(self, cpu):
        # V0 = 3; skip if key V0; V1 = 1; V2 = 2
        cpu.load_program([0x6003, 0xE09E, 0x6101, 0x6202])
        cpu.set_key(0x3)
        cpu.run(3)
        assert cpu.registers[1] == 0
        assert cpu.registers[2] == 2

    def test_clear_key(self, cpu):
        cpu.set_key(0xF)
        assert cpu.keyboard == 0xF
        cpu.clear_key()
        assert cpu.keyboard == 0

    @pytest.mark.parametrize("key", [-1, 16, 0xFF])
    def test_set_key_range(self, cpu, key):
        with pytest.raises(ValueError):
            cpu.set_key(key)
