"""Audit notifications — fire-and-forget, outside the request transaction.

``build_audit_created`` renders the message while the ORM object is still
attached; ``send`` runs later as a FastAPI background task, after the
response. The bundled ``LogNotifier`` writes messages to the application
log instead of a mail transport.
"""


import logging
from dataclasses import dataclass

from rgaa_audit.core.config import settings
from rgaa_audit.domain.audit import Audit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    sender: str
    recipients: tuple[str, ...]
    subject: str
    body: str


class LogNotifier:
    def __init__(self, frontend_url: str, sender: str, enabled: bool = True):
        self._frontend_url = frontend_url.rstrip("/")
        self._sender = sender
        self.enabled = enabled

    def edit_link(self, audit: Audit) -> str:
        return f"{self._frontend_url}/audits/{audit.edit_unique_id}/generation"

    def report_link(self, audit: Audit) -> str:
        return f"{self._frontend_url}/rapports/{audit.consult_unique_id}"

    def build_audit_created(self, audit: Audit) -> Notification:
        body = (
            f"Bonjour {audit.auditor_name},\n\n"
            f"L'audit « {audit.procedure_name} » a été créé.\n"
            f"Lien d'édition (à conserver, ne pas partager) : {self.edit_link(audit)}\n"
            f"Lien du rapport : {self.report_link(audit)}\n"
        )
        return Notification(
            sender=self._sender,
            recipients=(audit.auditor_email,),
            subject=f"Audit créé : {audit.procedure_name}",
            body=body,
        )

    async def send(self, notification: Notification) -> None:
        if not self.enabled:
            logger.debug("Notifications disabled, dropping %r", notification.subject)
            return
        logger.info(
            "Notification to %s: %s\n%s",
            ", ".join(notification.recipients),
            notification.subject,
            notification.body,
        )


def get_notifier() -> LogNotifier:
    """FastAPI dependency returning the configured notifier."""
    return LogNotifier(settings.frontend_url, settings.mail_from, settings.notifications_enabled)
