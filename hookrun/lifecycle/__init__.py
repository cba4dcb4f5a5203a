from .state import LifecycleState
from .controller import LifecycleController, LifecycleHandle

__all__ = [
    "LifecycleController",
    "LifecycleHandle",
    "LifecycleState",
]
