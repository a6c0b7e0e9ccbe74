from trips.lifecycle import TripLifecycle

__all__ = ["TripLifecycle"]
