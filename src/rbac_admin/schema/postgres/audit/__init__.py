from ._activity_log import activity_log


__all__ = [
    "activity_log",
]
