import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class NotificationController:
    """
    Raises user-facing notifications. Every notification is logged and, when a
    sink is given (a desktop notifier, a UI queue), forwarded to it.
    """

    def __init__(self, sink: Optional[Callable[[str, str], None]] = None):
        self.sink = sink
        self.history: List[Tuple[str, str]] = []

    def send_notification(self, title, message):
        """
        Sends a notification to the user.

        :param title: The title of the notification.
        :param message: The message to send in the notification.
        """
        if not message or not title:
            raise ValueError("Title and message cannot be empty.")

        self.history.append((title, message))
        logger.info(f"Notification! : {title} : {message}")

        if self.sink is not None:
            try:
                self.sink(title, message)
            except Exception as e:
                logger.error(f"Notification sink failed: {e}")

    def come_back(self):
        self.send_notification("Verdant - Come back!",
                               "Your forest growth has paused. Return to continue!")

    def wildfire_alert(self):
        self.send_notification("Wildfire Alert!",
                               "A wildfire is starting! Refocus to save your trees!")

    def fire_contained(self):
        self.send_notification("Fire Contained!",
                               "The wildfire has been stopped. Your forest is recovering!")
