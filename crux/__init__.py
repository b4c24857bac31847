"""Build metadata, build output checks, bundler reports, module resolution, file watching and runtime VM helpers."""

__version__ = "0.1.0"

__all__ = [
    "buildinfo",
    "runtime_state",
    "validate",
    "esbuild_report",
    "resolver",
    "watch",
    "lima",
]