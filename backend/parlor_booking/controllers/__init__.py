# Controllers package initialization
# Each module exposes one Flask blueprint

from . import (
    appointment_controller,
    customer_controller,
    health_controller,
    service_controller,
)

__all__ = [
    "appointment_controller",
    "customer_controller",
    "health_controller",
    "service_controller",
]
