"""Client domain entity: a registered household contact (read-only reference data)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from foodbank.logic.calendar.dates import to_datetime

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _epoch_seconds(value: Any) -> float:
    dt = to_datetime(value)
    if dt is None:
        if value not in (None, ""):
            logger.debug("Unparseable updatedAt %r treated as 0", value)
        return 0.0
    try:
        return dt.timestamp()
    except (OverflowError, OSError, ValueError):
        logger.debug("Out-of-range updatedAt %r treated as 0", value)
        return 0.0


class Client:
    def __init__(self, id: str = "", first_name: str = "", last_name: str = "", phone: str = "",
                 address: str = "", zip: str = "", county: str = "", dob: str = "",
                 updated_at: float = 0.0, name: str = ""):
        self.id = id
        self.first_name = first_name
        self.last_name = last_name
        self.phone = phone
        self.address = address
        self.zip = zip
        self.county = county
        self.dob = dob
        self.updated_at = updated_at
        # Legacy single-field name on older records
        self.name = name

    def __str__(self) -> str:
        return f"{self.full_name or '?'} ({self.id or 'no id'})"

    __repr__ = __str__

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Client":
        '''Creates a Client from a stored client record. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, Mapping) else {}
        return Client(
            id=_text(d.get("id")),
            first_name=_text(d.get("firstName")),
            last_name=_text(d.get("lastName")),
            phone=_text(d.get("phone")),
            address=_text(d.get("address") or d.get("address1")),
            zip=_text(d.get("zip")),
            county=_text(d.get("county")),
            dob=_text(d.get("dob")),
            updated_at=_epoch_seconds(d.get("updatedAt")),
            name=_text(d.get("name")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "address": self.address,
            "zip": self.zip,
            "county": self.county,
            "dob": self.dob,
            "updatedAt": self.updated_at,
        }


def as_client(value: Any) -> Client:
    return value if isinstance(value, Client) else Client.from_dict(value)


def index_by_id(clients) -> Dict[str, Client]:
    """Map client id -> Client (later duplicates win, as a dict build would)."""
    index: Dict[str, Client] = {}
    for raw in clients or []:
        client = as_client(raw)
        if client.id:
            index[client.id] = client
    return index
