from infrastructure.component_store import InMemoryComponentStore

__all__ = [
    "InMemoryComponentStore",
]
