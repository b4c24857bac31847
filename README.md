# crux

Building blocks for working with Crucible resources from Python.

## Modules

- `crux.buildinfo` – `BuildInfo(version, stage, git_commit)` normalises the
  build values (`normalized_version()`, `normalized_stage()`, `commit()`,
  each `"(undefined)"` when unset) and renders `version_string()`, e.g.
  `1.2.3+staging a1b2c3d4 [arm64]`. The stage is omitted when it is `main`,
  and the whole string is `(local)` when any value is unset (`is_local()`).
  `arch()` gives the interpreter's architecture as `amd64`, `arm64`, and so on.
- `crux.validate` – resource error classes (`BuildError`, `RunnerError`,
  `InvalidStructureError`, `UnsupportedOperationError`, …, all subclasses of
  `ResourceError`) and checks on build output: `validate_image_structure(dir)`
  wants `image.tar`, `validate_widget_structure(dir)` wants `index.js`,
  `validate_package(path)` wants the archive itself. Each returns the checked
  path or raises `InvalidStructureError`.
- `crux.esbuild_report` – `Message`, `Location`, `Severity` and `ReportEntry`.
  `normalize_and_sort(errors, warnings)` lower-cases the first letter of each
  message, prefixes `file:line:column` where a location is known, and sorts
  stably by line and column. `process_build_result(errors, warnings)` logs the
  entries and returns them, or raises `BuildError` when any error is present.
- `crux.resolver` – `resolve_module(path, resolve_dir, kind, externals,
  working_dir)` passes entry points through, marks imports of `react`,
  `react-reconciler`, `@cruciblehq/ui` and `@cruciblehq/ui-web` (or their
  subpaths) as external, resolves relative imports against `resolve_dir` and
  other imports under `<working_dir>/node_modules`, trying `.js` for a missing
  file and `index.js` for a directory.
- `crux.watch` – `watch`, `watch_recursive` and `watch_all` return a `Watcher`
  that calls back with an `Event` (`path()`, `is_create()`, `is_write()`,
  `is_remove()`, `is_rename()`) for each change. `collect_dirs(root)` lists a
  directory tree.
- `crux.runtime_state` – the `State` of the runtime (`not created`, `stopped`,
  `running`), its error classes (subclasses of `RuntimeFailure`, including
  `CommandError`), `ExecResult`, and `cruxd_download_url(arch)`.
- `crux.lima` – `Lima(limactl, lima_home, host_socket)` drives a `limactl`
  binary for the instance named `crux`: `status()`, `stop()`, `destroy()`,
  `exec(command, *args)`, `run(*args)`. `extract_lima(stream, dest)` unpacks a
  gzipped distribution and returns the path of `bin/limactl`;
  `lima_download_url()` gives the release archive URL for this machine.

## Installation

```
pip install .
```

## Watching a directory

```python
from crux.watch import watch_recursive

def on_change(event):
    if event.is_write():
        print("modified:", event.path())

with watch_recursive("src", on_change) as watcher:
    error = watcher.wait()
```

If the callback raises, the watcher stops and keeps the exception; `err()`,
`wait()` and `close()` then return it. `wait(timeout)` raises `TimeoutError`
when the watcher is still running after `timeout` seconds. Directories created
after the watch starts are not added automatically; call `add()` or
`add_recursive()` from the callback. `add_all()` watches all paths or none,
and `remove()` raises `ValueError` for a path that is not watched.

## Checking a build

```python
from crux.validate import validate_image_structure, InvalidStructureError

try:
    image = validate_image_structure("build")
except InvalidStructureError:
    print("run the build first")
```

## Version string

```python
from crux.buildinfo import BuildInfo

info = BuildInfo(version="v1.2.3", stage="main", git_commit="a1b2c3d4")
print(info.version_string())   # 1.2.3 a1b2c3d4 [<arch>]
```

## Release locations

`lima_download_url()` and `cruxd_download_url(arch)` build URLs from a base
that defaults to a placeholder host; set `CRUX_LIMA_RELEASE_BASE` and
`CRUX_CRUXD_RELEASE_BASE` to point them at your release server.

## What this package does not do

- It has no command-line tool.
- It does not build, pack, push or pull resources, run the bundler, or talk to
  a registry or a daemon; it provides the checks, reports and resolution rules
  used around those steps.
- `Lima` does not download `limactl`, generate a VM configuration, or create
  and start the VM; it only queries, stops, deletes and runs commands in an
  existing instance.
- Nothing here installs or starts the runtime daemon on Linux;
  `cruxd_download_url` only builds its URL.

## Tests

```
pip install .[test]
pytest
```