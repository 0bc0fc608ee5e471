from .jsonl import append_event

__all__ = ["append_event"]
