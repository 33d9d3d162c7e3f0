"""
Template slot resolution.

Maps a (template family, document kind) pair onto the markup sources used
for the header, body and footer regions of the document. The mapping is a
fixed decision table; every input resolves to a slot set with a body.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class TemplateFamily(str, Enum):
    """Template families shipped under templates/"""
    STANDARD = "standard"
    TALLY = "tally"
    THERMAL = "thermal"
    ACCOUNT_STATEMENT = "account_statement"


class SlotName(str, Enum):
    HEADER = "header"
    BODY = "body"
    FOOTER = "footer"


DEFAULT_FAMILY = TemplateFamily.STANDARD

# Normalised selector -> family. Keys are lower-case with separators removed.
FAMILY_ALIASES: Dict[str, TemplateFamily] = {
    "standard": TemplateFamily.STANDARD,
    "templatea": TemplateFamily.STANDARD,
    "default": TemplateFamily.STANDARD,
    "tally": TemplateFamily.TALLY,
    "thermal": TemplateFamily.THERMAL,
    "accountstatement": TemplateFamily.ACCOUNT_STATEMENT,
}


@dataclass(frozen=True)
class TemplateSlot:
    """A named region of the document and the markup source that renders it"""
    name: SlotName
    source: str


@dataclass(frozen=True)
class TemplateSlotSet:
    """Resolved slots for one request, in document order"""
    family: TemplateFamily
    slots: Tuple[TemplateSlot, ...]

    def get(self, name: SlotName) -> Optional[TemplateSlot]:
        for slot in self.slots:
            if slot.name == name:
                return slot
        return None

    @property
    def header(self) -> Optional[TemplateSlot]:
        return self.get(SlotName.HEADER)

    @property
    def body(self) -> TemplateSlot:
        return self.get(SlotName.BODY)

    @property
    def footer(self) -> Optional[TemplateSlot]:
        return self.get(SlotName.FOOTER)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(slot.name.value for slot in self.slots)


# (header, body, footer) file names; None means the slot is omitted
_Wiring = Tuple[Optional[str], str, Optional[str]]

_FULL: _Wiring = ("header.html", "body.html", "footer.html")
_BODY_ONLY: _Wiring = (None, "body.html", None)

_FAMILY_DEFAULTS: Dict[TemplateFamily, _Wiring] = {
    TemplateFamily.STANDARD: _FULL,
    TemplateFamily.TALLY: _FULL,
    TemplateFamily.THERMAL: _BODY_ONLY,
    TemplateFamily.ACCOUNT_STATEMENT: _BODY_ONLY,
}

_RECEIPT_PAYMENT: _Wiring = (None, "receipt_payment_body.html", None)
_PURCHASE: _Wiring = ("po_pb_header.html", "po_pb_body.html", "footer.html")

# Per-family document kind overrides, keyed by normalised kind
_KIND_OVERRIDES: Dict[TemplateFamily, Dict[str, _Wiring]] = {
    TemplateFamily.STANDARD: {
        "receipt": _RECEIPT_PAYMENT,
        "payment": _RECEIPT_PAYMENT,
        "purchaseorder": _PURCHASE,
        "po": _PURCHASE,
        "purchasebill": _PURCHASE,
        "purchase": _PURCHASE,
        "pb": _PURCHASE,
    },
}


def _normalize(value: Optional[str]) -> str:
    if not value:
        return ""
    return "".join(ch for ch in value.lower() if ch.isalnum())


def normalize_family(template_family: Optional[str]) -> TemplateFamily:
    """Resolve a family selector; unknown selectors map to the default family."""
    if isinstance(template_family, TemplateFamily):
        return template_family
    return FAMILY_ALIASES.get(_normalize(template_family), DEFAULT_FAMILY)


def normalize_kind(document_kind: Optional[str]) -> str:
    return _normalize(document_kind)


def resolve_template_slots(template_family: Optional[str], document_kind: Optional[str]) -> TemplateSlotSet:
    """
    Resolve the slot set for a request.

    Args:
        template_family: Family selector (e.g. "Standard", "TALLY")
        document_kind: Document kind (e.g. "Invoice", "purchase_order")

    Returns:
        TemplateSlotSet with exactly one body slot
    """
    family = normalize_family(template_family)
    wiring = _KIND_OVERRIDES.get(family, {}).get(normalize_kind(document_kind), _FAMILY_DEFAULTS[family])

    header, body, footer = wiring
    slots = []
    if header:
        slots.append(TemplateSlot(SlotName.HEADER, f"{family.value}/{header}"))
    slots.append(TemplateSlot(SlotName.BODY, f"{family.value}/{body}"))
    if footer:
        slots.append(TemplateSlot(SlotName.FOOTER, f"{family.value}/{footer}"))

    return TemplateSlotSet(family=family, slots=tuple(slots))
