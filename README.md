# tdpkit

Small building blocks of the kind a table-driven Protobuf parser is made
from. The package has no dependencies outside the standard library.

## Modules

- `tdpkit.arena`: `Arena` is a bump allocator over blocks of zeroed bytes.
  - `Arena.alloc(size)` returns a `Pointer` and rounds the size up to `ALIGN` (8 bytes).
  - `Arena.read` and `Arena.write` access the memory.
  - `Arena.reserve` makes room ahead of time.
  - `Arena.grow` switches to a new block at least twice as large.
  - `Arena.keep_alive` holds a reference until the next `free`.
  - `Arena.free` drops every block except the largest. It zeroes that block and reuses it.
  - `suggest_size(n)` rounds a byte count up to a power of two, at least 64. It returns 0 for 0.
- `tdpkit.slice`: `Slice` is an immutable view of fixed-size values stored in an `Arena`.
  - Values are described by a `struct` format string.
  - `Slice.make`, `Slice.of`, `load`, `store`, `raw`, `rest`, `set_len`, `cap`, `append`, `append_one` and `grow`.
  - Operations that change the length or the capacity return a new slice.
  - `grow` extends the most recent allocation in place when it can.
- `tdpkit.scc`: `sort(root, graph)` runs Tarjan's algorithm over the nodes reachable from `root`.
  - `graph` is a function that returns a node's outgoing edges.
  - The result is a `DAG` whose `topological()` yields `Component`s, each after the components it depends on.
  - `DAG.for_node` finds the component that holds a node.
  - A component has `members()`, `deps()` and `index()`.
- `tdpkit.stats`: running statistics, safe to record from several threads.
  - `Mean` has `record`, `get` and `merge`.
  - `Median(n)` gives the median of the last `n` samples.
- `tdpkit.debug`: debugging helpers.
  - `fprintf`, `dict_format` and `describe_func` produce a lazily rendered `Formatter`.
  - `stack` renders the current call stack.
  - `unsupported` returns an `UnsupportedError` that names the calling function.
  - `assert_that` raises `InternalAssertionError`, in debug mode only.
  - `log` prints a line tagged with its caller, in debug mode only.
  - `with_testing(sink)` is a context manager that sends this thread's log lines to `sink` instead of stderr.
  - `Value` holds a value that may only be read in debug mode.
- `tdpkit.examples`: encoded sample data for a small weather-report protocol.
  - `weather_report_schema()` returns a serialized `google.protobuf.FileDescriptorSet`.
  - `read_weather_data()` returns a serialized `WeatherReport` message.

## Debug mode

Debug mode is read from environment variables when `tdpkit.debug` is imported:

- `TDPKIT_DEBUG`: set it to a non-empty value other than `0` to enable debug mode.
- `TDPKIT_DEBUG_FILTER`: a regular expression. Only log lines that match it are printed.
- `TDPKIT_DEBUG_NOCAPTURE`: when set, log lines go to stderr even inside `with_testing`.

## Example

```python
from tdpkit.arena import Arena
from tdpkit.slice import Slice
from tdpkit.scc import sort
from tdpkit.stats import Mean

arena = Arena()
s = Slice.of(arena, "<q", 1, 2, 3)
s = s.append_one(arena, 4)
print(s.raw())          # [1, 2, 3, 4]

edges = {0: [1], 1: [0, 2], 2: []}
dag = sort(0, lambda n: iter(edges[n]))
for comp in dag.topological():
    print(comp.index(), sorted(comp.members()))
# 0 [2]
# 1 [0, 1]

m = Mean()
for x in (5, 6, -10):
    m.record(x)
print(m.get())          # 0.333...
```

## What it does not do

tdpkit does not include a Protobuf message compiler or parser. It cannot turn
a descriptor into a message type. It cannot decode or reflect over messages.
`tdpkit.examples` only produces encoded bytes and does not interpret them.
There is no command-line tool.

## Tests

```
pip install -e .[test]
pytest
```