"""Lazy awaitable tasks, blocking waits, when-all combinators, a thread pool, ring-buffer sequencers and write-only files."""

__version__ = "0.1.0"

__all__ = ["files", "sequencer", "static_thread_pool", "sync_wait", "task", "when_all"]