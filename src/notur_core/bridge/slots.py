"""Slot ids shared by the host and every extension bundle.

Adding a slot id is an append-only, backward-compatible change.
"""

from dataclasses import dataclass

from notur_core.types import SlotType


@dataclass(frozen=True)
class SlotDefinition:
    """A named mount point in the host UI."""

    id: str
    type: SlotType
    description: str


SLOT_DEFINITIONS: tuple[SlotDefinition, ...] = (
    SlotDefinition("navbar", SlotType.PORTAL, "Top navigation bar"),
    SlotDefinition("navbar.left", SlotType.PORTAL, "Navbar left area (near logo)"),
    SlotDefinition("server.subnav", SlotType.NAV, "Server sub-navigation"),
    SlotDefinition("server.header", SlotType.PORTAL, "Server header area"),
    SlotDefinition("server.page", SlotType.ROUTE, "Server area page"),
    SlotDefinition("server.footer", SlotType.PORTAL, "Server footer area"),
    SlotDefinition("server.terminal.buttons", SlotType.PORTAL, "Terminal power buttons"),
    SlotDefinition("server.console.header", SlotType.PORTAL, "Console page header"),
    SlotDefinition("server.console.sidebar", SlotType.PORTAL, "Console sidebar area"),
    SlotDefinition("server.console.footer", SlotType.PORTAL, "Console page footer"),
    SlotDefinition("server.files.actions", SlotType.PORTAL, "File manager toolbar"),
    SlotDefinition("server.files.header", SlotType.PORTAL, "File manager header"),
    SlotDefinition("server.files.footer", SlotType.PORTAL, "File manager footer"),
    SlotDefinition("dashboard.header", SlotType.PORTAL, "Dashboard header area"),
    SlotDefinition("dashboard.widgets", SlotType.PORTAL, "Dashboard widgets"),
    SlotDefinition("dashboard.serverlist.before", SlotType.PORTAL, "Dashboard server list (before)"),
    SlotDefinition("dashboard.serverlist.after", SlotType.PORTAL, "Dashboard server list (after)"),
    SlotDefinition("dashboard.footer", SlotType.PORTAL, "Dashboard footer area"),
    SlotDefinition("dashboard.page", SlotType.ROUTE, "Dashboard page"),
    SlotDefinition("account.header", SlotType.PORTAL, "Account header area"),
    SlotDefinition("account.page", SlotType.ROUTE, "Account page"),
    SlotDefinition("account.footer", SlotType.PORTAL, "Account footer area"),
    SlotDefinition("account.subnav", SlotType.NAV, "Account sub-navigation"),
)

SLOT_IDS: tuple[str, ...] = tuple(d.id for d in SLOT_DEFINITIONS)

SLOT_DEFINITION_MAP: dict[str, SlotDefinition] = {d.id: d for d in SLOT_DEFINITIONS}


def is_known_slot(slot_id: str) -> bool:
    return slot_id in SLOT_DEFINITION_MAP
