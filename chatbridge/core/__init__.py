"""Core orchestration package.

Architectural role:
    Exposes the request-orchestration layer that sits between API/CLI entrypoints
    and the lower-level subsystems (validation and the LLM resolver).

Composition:
    - `engine`: validate-then-resolve control flow shared by HTTP and CLI.

Determinism and side effects:
    Package import itself is deterministic and side-effect free.
"""
