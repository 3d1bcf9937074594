"""Log sink notification adapter.

Renders the configured template and hands the message to a logger, which is
the delivery surface for new-entry announcements.
"""

from __future__ import annotations

import logging
from typing import Optional

from adapters.notification_formatting import render_template
from core.models import CatalogEntry

NOTIFICATION_LOGGER = "forgewatch.notifications"


class LogSinkNotifier:
    """Notifier adapter that writes announcements to a log sink."""

    def __init__(self, template: str, logger: Optional[logging.Logger] = None) -> None:
        self._template = template
        self._logger = logger or logging.getLogger(NOTIFICATION_LOGGER)

    async def send(self, entry: CatalogEntry) -> None:
        """Send the formatted announcement to the log sink."""

        self._logger.info(render_template(self._template, entry))
