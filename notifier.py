"""
Notification boundary for successful checkouts.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from models import Member

logger = logging.getLogger("library.notifier")


class Notifier(ABC):
    """Delivers a message to a member. The transport is up to the implementation."""

    @abstractmethod
    def send(self, member: Member, message: str) -> None:
        ...


class LoggingNotifier(Notifier):
    """Writes each notification to the library log."""

    def send(self, member: Member, message: str) -> None:
        logger.info("Notify | memberId=%s name=%s message=%s", member.memberId, member.name, message)
