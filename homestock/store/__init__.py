from homestock.store.observations import ObservationStore

__all__ = ["ObservationStore"]
