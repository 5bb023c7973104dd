"""
Pygame host loop for the CHIP-8 engine
"""

import argparse

import numpy as np
import pygame

from chip8cpu import CPU, Chip8Error
from chip8cpu.logging import ConsoleLogger
from chip8cpu.rendering import chip8_display_to_rgb, create_color_scheme

# Modern key mapping
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
    pygame.K_UP: 0x2, pygame.K_DOWN: 0x8, pygame.K_LEFT: 0x4, pygame.K_RIGHT: 0x6,
}

SAMPLE_RATE = 44100


def make_tone(frequency=440, volume=0.2):
    """Build a one-period-aligned square wave that loops without clicks."""
    period = SAMPLE_RATE // frequency
    wave = np.where(np.arange(period * frequency) % period < period // 2, 1.0, -1.0)
    return pygame.sndarray.make_sound((wave * volume * 32767).astype(np.int16))


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a CHIP-8 ROM in a pygame window.")
    parser.add_argument("rom", help="Path to the CHIP-8 ROM file")
    parser.add_argument("--scale", type=int, default=10, help="Pixel upscaling factor")
    parser.add_argument("--ipf", type=int, default=16, help="Engine steps per 60 Hz frame")
    parser.add_argument(
        "--shift-quirk", action="store_true",
        help="Make 8XY6/8XYE store the shifted-out bit in VF",
    )
    parser.add_argument("--color-scheme", default="classic", help="Display color scheme")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for CXNN")
    parser.add_argument("--log-level", default="INFO", help="Console log level")
    return parser.parse_args(argv)


def run_emulator(rom_filename, scale=10, ipf=16, shift_quirk=False, color_scheme="classic",
                 seed=0, log_level="INFO"):
    """Main emulator loop: ipf engine steps and one redraw per frame"""
    logger = ConsoleLogger(name="Host", log_level=log_level)
    on_color, off_color = create_color_scheme(color_scheme)

    cpu = CPU(seed=seed, shift_sets_carry=shift_quirk, logger=ConsoleLogger(name="CPU", log_level=log_level))
    try:
        cpu.load_rom(rom_filename)
    except (OSError, Chip8Error) as e:
        logger.error(f"Could not load {rom_filename}: {e}")
        return

    pygame.mixer.pre_init(SAMPLE_RATE, -16, 1)
    pygame.init()
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption(f"CHIP-8 - {rom_filename}")
    clock = pygame.time.Clock()
    tone = make_tone()
    playing = False

    running = True
    paused = False

    logger.info("Controls: ESC=Quit, P=Pause, BACKSPACE=Reset, +/-=Speed")

    while running:
        clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                    logger.info("Paused" if paused else "Resumed")
                elif event.key == pygame.K_BACKSPACE:
                    cpu.initialize()
                    cpu.load_rom(rom_filename)
                    logger.info("Reset")
                elif event.key == pygame.K_EQUALS:
                    ipf = min(100, ipf + 2)
                    logger.info(f"Speed: {ipf} steps per frame")
                elif event.key == pygame.K_MINUS:
                    ipf = max(1, ipf - 2)
                    logger.info(f"Speed: {ipf} steps per frame")
                elif event.key in KEY_MAP:
                    cpu.set_key(KEY_MAP[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    cpu.clear_key()

        if not paused and not cpu.halted:
            try:
                cpu.run(ipf)
            except Chip8Error:
                logger.warning("Engine halted, press BACKSPACE to reset")

        if cpu.sound_active and not playing:
            tone.play(loops=-1)
            playing = True
        elif not cpu.sound_active and playing:
            tone.stop()
            playing = False

        frame = chip8_display_to_rgb(cpu.display, scale, on_color, off_color)
        pygame.surfarray.blit_array(screen, frame.transpose(1, 0, 2))
        pygame.display.flip()

    pygame.quit()


def main(argv=None):
    args = parse_args(argv)
    run_emulator(
        args.rom,
        scale=args.scale,
        ipf=args.ipf,
        shift_quirk=args.shift_quirk,
        color_scheme=args.color_scheme,
        seed=args.seed,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
