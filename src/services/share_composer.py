"""Share message composition and delivery"""

import asyncio
import inspect
import logging
import re
import webbrowser
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

from src.config import settings
from src.errors import ShareError
from src.models.decimal_wire import format_currency
from src.models.line_items import LineItemSet
from src.models.vehicle_record import VehicleRecord

logger = logging.getLogger(__name__)

ITEM_SEPARATOR = ", "
# Characters encodeURIComponent leaves as-is
_URI_COMPONENT_SAFE = "-_.!~*'()"

NativeShare = Callable[[Dict[str, str]], Any]


@dataclass
class ShareMessage:
    title: str
    text: str

    def as_payload(self) -> Dict[str, str]:
        return {"title": self.title, "text": self.text}


@dataclass
class ShareResult:
    channel: str  # "native" or "link"
    link: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _describe_items(items: LineItemSet) -> str:
    return ITEM_SEPARATOR.join(
        f"{item.description.strip()} ({format_currency(item.amount)})"
        for item in items.filled_items()
    )


class ShareComposer:
    """Builds the client message and hands it to a share channel"""

    def __init__(
        self,
        shop_display_name: str = "Taller JYM",
        title: Optional[str] = None,
        whatsapp_base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.shop_display_name = shop_display_name
        self.title = title or settings.SHARE_TITLE
        self.whatsapp_base_url = (whatsapp_base_url or settings.WHATSAPP_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.SHARE_TIMEOUT_SECONDS

    def compose(self, record: VehicleRecord) -> ShareMessage:
        lines = [
            f"Hola {record.client_name}, tu vehículo {record.model} (Placa: {record.plate}) "
            f"ha sido ingresado al {self.shop_display_name}.",
            "",
            f"Trabajo: {_describe_items(record.work_items)}",
        ]
        if not record.part_items.is_blank():
            lines.append(f"Repuestos: {_describe_items(record.part_items)}")
        lines += [
            f"Costo Estimado: {format_currency(record.cost)}",
            "",
            "Gracias por tu confianza.",
        ]
        return ShareMessage(title=self.title, text="\n".join(lines))

    def whatsapp_link(self, contact: str, text: str) -> str:
        """Messaging deep link; every non-digit is stripped from the contact"""
        digits = re.sub(r"\D", "", contact or "")
        return f"{self.whatsapp_base_url}/{digits}?text={quote(text, safe=_URI_COMPONENT_SAFE)}"

    async def deliver(
        self,
        record: VehicleRecord,
        native_share: Optional[NativeShare] = None,
        open_link: Callable[[str], Any] = webbrowser.open,
    ) -> ShareResult:
        """
        Share the record summary

        Uses ``native_share`` when the runtime provides one, otherwise opens
        the messaging link. Failures are logged and reported in the result,
        never raised.
        """
        message = self.compose(record)

        if native_share is not None:
            try:
                outcome = native_share(message.as_payload())
                if inspect.isawaitable(outcome):
                    await asyncio.wait_for(outcome, timeout=self.timeout)
                return ShareResult(channel="native")
            except Exception as e:
                error = ShareError(f"Native share failed: {e!r}")
                logger.warning(f"Error sharing: {error}")
                return ShareResult(channel="native", error=str(error))

        link = self.whatsapp_link(record.contact, message.text)
        try:
            open_link(link)
        except Exception as e:
            error = ShareError(f"Could not open share link: {e!r}")
            logger.warning(f"Error sharing: {error}")
            return ShareResult(channel="link", link=link, error=str(error))
        return ShareResult(channel="link", link=link)
