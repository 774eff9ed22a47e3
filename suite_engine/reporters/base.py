"""Abstract base class for event observers."""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from suite_engine.events import Event, EventBus, Handler


class Reporter(ABC):
    """Observer that subscribes a set of handlers to a runner's event bus."""

    @abstractmethod
    def subscriptions(self) -> Mapping[Event, Handler]:
        """Return the handler to register for each event of interest."""

    def attach(self, bus: EventBus) -> None:
        for event, handler in self.subscriptions().items():
            bus.subscribe(event, handler)

    def detach(self, bus: EventBus) -> None:
        for event, handler in self.subscriptions().items():
            bus.unsubscribe(event, handler)
