"""Fake notifier — records published notifications for testing."""

from dining.notifier.port import OrderNotification, OrderNotifier


class FakeNotifier(OrderNotifier):
    """Notifier that keeps notifications in memory for test assertions."""

    def __init__(self) -> None:
        self.published: list[OrderNotification] = []
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification service unavailable"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def publish(self, notification: OrderNotification) -> None:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)
        self.published.append(notification)

    def reset(self) -> None:
        self.published.clear()
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"
