from .capacity_consumer import (
    Disposition,
    capacity_consumer_loop,
    handle_capacity_event,
    process_capacity_event,
    retry_consumer_loop,
)

__all__ = [
    "Disposition",
    "capacity_consumer_loop",
    "handle_capacity_event",
    "process_capacity_event",
    "retry_consumer_loop",
]
