# navylib

Building blocks of a small hobby kernel, modelled in plain Python. Nothing
here touches hardware: memory, tasks and ELF images are ordinary Python
objects and bytes.

## Modules

- `navylib.itoa` – `itoa(value, base)`, integer to lowercase text in any
  base from 2 to 36.
- `navylib.fmt` – `format_string(fmt, *args)` and
  `print_format(callback, fmt, *args)`. Each `{}` takes the next argument;
  for integers `{a}` gives 16-digit zero-padded hex, `{x}` hex and `{M}` a
  size with a `B`/`KB`/`MB`/`GB` unit. `Char` wraps a single character.
- `navylib.debug` – `Logger(out)` with `log(fmt, *args)` and
  `panic(fmt, *args)`; each line is prefixed with the caller's file and
  line, and `panic` raises `PanicError` after writing.
- `navylib.strutil` – `count`, `count_chr`, `first`, `first_chr`, `last`,
  `last_chr` substring and character searches.
- `navylib.ansi` – small C-library style routines: `isdigit`, `ipow`,
  `pow10`, `atoi`, `strrchr`, `strcmp`, `strncmp`, `strchrcount`, a
  linear congruential `Random` and a step-by-step `Tokenizer`.
- `navylib.bitmap` – `Bitmap(length)` with `set_bit`, `clear_bit` and
  `is_bit_set`.
- `navylib.handover` – boot information: `Range`, `MemmapType`, `Memmap`,
  `Module`, `Handover` (`find_module`, `memmap_lines`) and conversion of
  stivale2-style memory map and module tuples
  (`memmap_type_from_stivale`, `parse_stivale_memmap`,
  `parse_stivale_modules`).
- `navylib.pmm` – `PhysicalMemoryManager(handover)` with `alloc`, `free`
  and `set_used`, raising `OutOfMemoryError` when no run of pages fits;
  `align_up` and `align_down`.
- `navylib.elf` – `parse_header`, `program_headers` and `load_segments`
  for 64-bit little-endian ELF images, raising `ElfFormatError` on bad
  input.
- `navylib.scheduler` – a round-robin `Scheduler` of `Task`s switching
  every eight ticks, with `exit_current`, `idle`, and message passing
  through `Ipc` (`ipc_send`, `ipc_receive`).
- `navylib.lexer` and `navylib.parser` – `lex(text)` and `parse(text)` for
  the LISON configuration language; `Lison.get(key)` looks up a pair;
  malformed documents raise `LisonError` with a line number.
- `navylib.marshal_reader` – `MarshalReader` for a subset of the marshal
  format (none, booleans, ints, binary floats, strings, small tuples, code
  objects) and `read_pyc(data)` for compiled-module files with the
  3.10 magic number; errors raise `MarshalError`.
- `navylib.pyvm` – `VirtualMachine(out)` whose `run(code)` executes
  `LOAD_NAME`, `LOAD_CONST`, `STORE_NAME`, `CALL_FUNCTION`, `POP_TOP`,
  `BINARY_ADD` and `RETURN_VALUE`, with a single builtin, `debug_log`;
  anything else raises `VmError`.

## Installation

```
pip install .
```

## Examples

Formatting:

```python
from navylib.fmt import format_string
from navylib.itoa import itoa

itoa(255, 16)                       # "ff"
format_string("{} tasks", 3)        # "3 tasks"
```

Parsing a LISON document:

```python
from navylib.parser import parse

config = parse("'((name \"navy\") (version 1))")
config.get("name").value            # "navy"
config.get("version").value         # 1
```

Running a compiled module:

```python
from navylib.marshal_reader import read_pyc
from navylib.pyvm import VirtualMachine

with open("module.pyc", "rb") as handle:
    code = read_pyc(handle.read())

VirtualMachine().run(code)
```

Scheduling:

```python
from navylib.scheduler import Scheduler, Task

sched = Scheduler()
sched.push_task(Task("worker"))
for _ in range(8):
    sched.tick()
sched.current_pid()                 # 1
```

## Commands

Print `name @ kernel` for each entry under `entries` in a LISON file
(default path `./pkg/lison-test/test.lisp`):

```
navy-lison path/to/entries.lisp
```

Run a compiled module in the virtual machine (default path
`./pkg/marshal-test/test.pyc`):

```
navy-marshal path/to/module.pyc
```

## What it does not do

The package does not boot, drive devices, map virtual memory or run
machine code. Tasks have no registers or address spaces, loaded ELF
segments are returned as bytes rather than placed in memory, and the
virtual machine runs only the few opcodes listed above.

## Tests

```
pip install .[test]
pytest
```