import threading
import time

import jax

from chip8vm import Machine, Keypad, create_state, load_rom, run_cycles

# Wait for a key, draw its glyph at (28, 12), loop
ROM = bytes([
    0xF0, 0x0A,  # 0x200: V0 = key
    0xF0, 0x29,  # 0x202: I = glyph(V0)
    0x61, 0x1C,  # 0x204: V1 = 28
    0x62, 0x0C,  # 0x206: V2 = 12
    0x00, 0xE0,  # 0x208: clear
    0xD1, 0x25,  # 0x20A: draw
    0x12, 0x00,  # 0x20C: jump 0x200
])

if __name__ == "__main__":
    keypad = Keypad()
    machine = Machine({"compatibility": "new"}, keypad=keypad)
    machine.load_rom(ROM)

    # Input arrives from another thread, as it would from a UI event loop
    presser = threading.Timer(0.2, keypad.set_key, args=(0xA,))
    presser.start()

    deadline = time.time() + 2.0
    while int(machine.state.V[0]) != 0xA and time.time() < deadline:
        machine.cycle()
    machine.run(6)
    keypad.unset_key()

    print(machine.display_as_text())

    # Compiled batch execution
    state = load_rom(create_state(jax.random.PRNGKey(0)), ROM)

    start_compile = time.time()
    compiled = jax.block_until_ready(run_cycles.lower(state, 10000, 700).compile())
    end_compile = time.time()
    print("Compilation time (s):", end_compile - start_compile)

    start_exec = time.time()
    final_state = jax.block_until_ready(compiled(state))
    end_exec = time.time()
    print("Execution time (s):", end_exec - start_exec)
    print("Still waiting for a key at", hex(int(final_state.pc)))
