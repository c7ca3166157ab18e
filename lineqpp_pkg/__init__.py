"""lineqpp package: linear equation preprocessor split into scanner, builder, engine, writer, and CLI."""

__all__ = [
    "config",
    "types",
    "nodes",
    "stack",
    "lexing",
    "builder",
    "dispatcher",
    "engine",
    "writer",
    "parser",
    "api",
    "cli",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "preprocess",
    "preprocess_file",
    "run",
    "process",
]
