from turnos.shared.domain.lifecycle import LifecycleStatus

__all__ = ["LifecycleStatus"]
