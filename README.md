# iblessing

Helpers for analysing Objective-C code inside 64-bit ARM Mach-O binaries,
and for turning the results of that analysis into JSON reports, statistics
and IDA scripts.

The package is pure Python and has no runtime dependencies.

## What is inside

| Module | Purpose |
| --- | --- |
| `iblessing.method_chain` | `MethodChain`, `MethodCall` and `MethodCallArg`: the call graph between Objective-C methods |
| `iblessing.core_foundation` | `arguments_from_signature`, `resolve_type_encoding` and `SignatureError` for Objective-C type encodings |
| `iblessing.anti_wrapper` | `AntiWrapper`, `AntiWrapperBlock`, `AntiWrapperArgs`, `RegLink`, `RegLinkGraph` and `FunctionPrototype`: register links through simple wrapper functions |
| `iblessing.registers` | `ARM64RegisterX`, `ARM64RegisterSP`, `ARM64RegisterD` and `RegisterType`: simulated register values |
| `iblessing.thread_state` | `ThreadState` and `main_thread_state()`: the x0..x30, sp and d0..d31 register file |
| `iblessing.dyld` | `iter_binds`, `read_uleb128`, `read_sleb128`, `Segment`, `BindRecord` and `BindError`: decoding of dyld bind opcodes |
| `iblessing.virtual_memory` | `VirtualMemory`, `MemoryUnit`, `MemoryType` and `default_memory()`: a sparse memory model over a mapped file and a virtual heap |
| `iblessing.generator` | `Generator` and `GeneratorError`: the base of all generators |
| `iblessing.ida_xref`, `iblessing.ida_symbol_wrapper`, `iblessing.ida_symbolic`, `iblessing.xref_report`, `iblessing.xref_statistics` | the generators |
| `iblessing.dispatcher` | `GeneratorDispatcher`: looks generators up by id and runs them |

## Type encodings

```python
from iblessing.core_foundation import arguments_from_signature, resolve_type_encoding

arguments_from_signature("v24@0:8@16")   # ['v', 'id', ':', 'id']
resolve_type_encoding("i")               # 'int'
resolve_type_encoding("@")               # ''
```

Offsets and sizes are dropped. Typed objects come out as `@ClassName`,
blocks as `@?` and untyped objects as `id`. A signature that the parser
cannot make progress on raises `SignatureError`.

## Method chains

```python
from iblessing.method_chain import MethodChain

chain = MethodChain(0x100004000, "-", "AppDelegate", "application:didFinishLaunchingWithOptions:")
chain.common_desc()   # '-[AppDelegate application:didFinishLaunchingWithOptions:] (0x100004000)'
chain.compare_key()   # '-[AppDelegate application:didFinishLaunchingWithOptions:]'
```

Every chain gets a fresh, increasing `chain_id` when it is created.
`prev_methods` and `next_methods` are sets of `(chain, caller_address)`
pairs. Chains whose class name starts with `0x` share one compare key, so
reports from two builds of the same binary can be compared.

## Registers and thread state

```python
from iblessing.thread_state import ThreadState

state = ThreadState()
x3 = state.register("x3")      # 64-bit view of x3
x3.set_value(0x1122334455667788)
state.register("w3").value     # 0x55667788, the 32-bit view of the same register
state.register("v0")           # None: not a modelled register
```

`main_thread_state()` returns one shared `ThreadState`.

## Dyld binds

`iter_binds(data, segments, bind_off, bind_size)` walks the bind opcode
stream at `bind_off` and yields one `BindRecord` (address, type, symbol
name, flags, addend, library ordinal) for every bound pointer. A malformed
stream, an unknown segment index or a bind past the end of its segment
raises `BindError`.

## Virtual memory

`VirtualMemory(mapped_file, vmaddr_base, vmaddr_bss_start, vmaddr_bss_end)`
stores `MemoryUnit`s by address. Reads below the end of the mapped file go
to the file unless a unit was stored there; `store_object` places data on
a virtual heap starting at `0x300000000`. Reading a unit with the wrong
size or type raises `MemoryError_` (with `fatal=False`, `read_by_size`
returns `None` instead). `default_memory()` returns one shared instance.

## Generators

Each generator reads `input_path`, writes its result into the
`output_path` directory under a name built from the input's file name, and
returns the path it wrote. Failures raise `GeneratorError`.

| Id | Output |
| --- | --- |
| `ida-objc-msg-xref` | `<name>_ida_objc_msg_xrefs.iblessing.py`, an IDA script that adds `objc_msgSend` cross references |
| `objc-msg-xref-json` | `<name>_objc_msg_xrefs.iblessing.json`, a JSON report of all method chains (option `unprintable=0` keeps unprintable selectors) |
| `objc-msg-xref-statistic` | prints counts of pre- and post-references, or a diff against a second report given by the `diff` option; writes no file |
| `ida-symbol-wrapper-naming` | `<name>_ida_symbol_wrapper_naming.iblessing.py`, an IDA script that names symbol wrappers and applies their prototypes |
| `ida-symbolic` | `<name>_ida_symbolic.py`, an IDA script that names functions from a symbol table text file (`mode=jtool2`, or `delimiter`, `addrIdx` and `nameIdx`) |

The dispatcher takes the functions that load method-chain and
symbol-wrapper reports as arguments:

```python
from iblessing.dispatcher import GeneratorDispatcher

dispatcher = GeneratorDispatcher(chain_loader=load_chains, wrapper_loader=load_wrappers)
for generator in dispatcher.all_generators():
    print(generator.identifier, "-", generator.desc)

dispatcher.start("ida-symbolic", {"mode": "jtool2"}, "symbols.txt", "out")
```

A chain loader takes a path and returns a mapping of selector to
`MethodChain`; a wrapper loader returns a sequence of `SymbolWrapperInfo`.
An unknown generator id raises `GeneratorError`, and so does a generator
that needs a loader that was not given.

The rendering functions `render_xref_script`, `render_naming_script`,
`render_symbolic_script` and `build_report` work without touching the file
system; `resolve_layout`, `diff_chains`, `count_refs` and
`build_common_chains` are available on their own as well.

## What this package does not do

- It does not parse Mach-O files, disassemble or emulate code; the register,
  memory and bind models are building blocks fed by the caller.
- It does not read method-chain or symbol-wrapper reports from disk; the
  caller supplies the loaders.
- It has no server for querying cross references and no command-line tool.

## Running the tests

Install the package with its `test` extra and run `pytest` from the
project directory.