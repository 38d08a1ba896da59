"""Wallet pass payload construction.

A PassPayload is the JSON description handed to the signer: styling,
visual fields, the barcode and a serial number. Building is pure. The
same member state always yields the same payload, apart from the optional
relevantDate, which identity() leaves out for comparisons.
"""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from goldpass.db.store import MemberRecord
from goldpass.passes.urls import require_https_url

log = logging.getLogger(__name__)

PASS_FORMAT_VERSION = 1
PASS_TYPE = "storeCard"
BARCODE_FORMAT = "PKBarcodeFormatQR"


@dataclass(frozen=True)
class PassFamily:
    """Serial prefix and styling shared by every pass of one card family."""

    name: str
    serial_prefix: str
    description: str
    tier_label: str
    background_color: str
    foreground_color: str
    label_color: str
    organization_name: str = "Hushh Technologies"
    logo_text: str = "HUSHH"


PASS_FAMILIES: dict[str, PassFamily] = {
    "gold": PassFamily(
        name="gold",
        serial_prefix="HUSHH-GOLD",
        description="Hushh Gold Membership",
        tier_label="GOLD MEMBER",
        background_color="rgb(117, 65, 10)",
        foreground_color="rgb(255, 248, 235)",
        label_color="rgb(216, 178, 111)",
    ),
    "personal": PassFamily(
        name="personal",
        serial_prefix="HUSHH-PERSONAL",
        description="Hushh Personal Data Card",
        tier_label="PERSONAL",
        background_color="rgb(26, 26, 26)",
        foreground_color="rgb(255, 250, 245)",
        label_color="rgb(180, 175, 170)",
    ),
    "brand": PassFamily(
        name="brand",
        serial_prefix="HUSHH-BRAND",
        description="Hushh Brand Preference Card",
        tier_label="BRAND",
        background_color="rgb(35, 42, 49)",
        foreground_color="rgb(255, 250, 245)",
        label_color="rgb(180, 175, 170)",
    ),
}


@dataclass(frozen=True)
class PassPayload:
    serial_number: str
    body: dict[str, Any]
    relevant_date: str | None = None

    def identity(self) -> dict[str, Any]:
        """Payload content without relevantDate."""
        return copy.deepcopy(self.body)

    def to_dict(self) -> dict[str, Any]:
        data = self.identity()
        if self.relevant_date:
            data["relevantDate"] = self.relevant_date
        return data


def serial_number(family: PassFamily, uid: str) -> str:
    return f"{family.serial_prefix}-{uid}"


class PassPayloadBuilder:
    """Builds signer payloads for one pass family."""

    def __init__(self, family: str = "gold"):
        try:
            self.family = PASS_FAMILIES[family]
        except KeyError:
            raise ValueError(f"Unknown pass family: {family}") from None

    def build(self, member: MemberRecord, relevant_date: datetime | None = None) -> PassPayload:
        """Build the payload for a member.

        Raises:
            PassPayloadError: If the public or profile URL is not a
                well-formed https URL once whitespace is removed.
        """
        family = self.family
        public_url = require_https_url(member.public_url, field="barcode.message")
        profile_url = require_https_url(member.profile_url, field="backFields.complete_profile")
        serial = serial_number(family, member.uid)

        barcode = {
            "message": public_url,
            "format": BARCODE_FORMAT,
            "messageEncoding": "iso-8859-1",
            "altText": member.uid,
        }

        auxiliary = []
        if member.created_at:
            auxiliary.append({
                "key": "member_since",
                "label": "MEMBER SINCE",
                "value": member.created_at.strftime("%Y-%m-%d"),
            })

        body = {
            "formatVersion": PASS_FORMAT_VERSION,
            "passType": PASS_TYPE,
            "serialNumber": serial,
            "description": family.description,
            "organizationName": family.organization_name,
            "logoText": family.logo_text,
            "backgroundColor": family.background_color,
            "foregroundColor": family.foreground_color,
            "labelColor": family.label_color,
            "headerFields": [
                {"key": "status", "label": "STATUS", "value": member.pass_status.upper()},
            ],
            "primaryFields": [
                {"key": "tier", "label": "TIER", "value": family.tier_label},
            ],
            "secondaryFields": [
                {"key": "member_name", "label": "MEMBER", "value": member.name},
                {"key": "member_id", "label": "MEMBER ID", "value": member.uid},
            ],
            "auxiliaryFields": auxiliary,
            "backFields": [
                {
                    "key": "complete_profile",
                    "label": "Complete Your Profile",
                    "value": f"Tap to add your address and preferences:\n{profile_url}",
                },
                {
                    "key": "verify",
                    "label": "Verify Membership",
                    "value": public_url,
                },
            ],
            "barcode": barcode,
            "barcodes": [dict(barcode)],
            "sharingProhibited": True,
        }

        log.debug(f"Built {family.name} payload {serial}", extra={"uid": member.uid})
        return PassPayload(
            serial_number=serial,
            body=body,
            relevant_date=relevant_date.isoformat() if relevant_date else None,
        )
