"""Core SAM primitives (definitions, state matching, action gating, sessions)."""
