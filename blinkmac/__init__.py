"""Slotted MAC protocol logic: schedules, packets, scanning, transmit queue and association."""

__version__ = "0.1.0"

__all__ = [
    "association",
    "models",
    "packet_queue",
    "protocol",
    "scan",
    "scheduler",
    "schedules",
    "timing",
]