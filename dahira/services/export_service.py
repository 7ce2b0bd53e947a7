"""CSV export of the member registry."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import date

from dahira.models.member import Member

EXPORT_HEADERS = (
    "ID Carte",
    "Prénom",
    "Nom",
    "Genre",
    "Rôle",
    "Téléphone",
    "Profession",
    "Cotisation",
    "Date d'adhésion",
    "Tuteur (Nom)",
    "Tuteur (Tél)",
)
EXPORT_DELIMITER = ";"
EMPTY_CELL = "-"

# Spreadsheet tools only detect UTF-8 when the file starts with a BOM.
UTF8_BOM = "\ufeff"


def export_filename(today: date | None = None) -> str:
    export_day = today or date.today()
    return f"membres_dahira_{export_day.isoformat()}.csv"


def member_row(member: Member) -> list[str]:
    return [
        member.card_number,
        member.first_name,
        member.last_name,
        str(member.gender),
        str(member.role),
        member.phone,
        member.profession or EMPTY_CELL,
        str(member.annual_fee),
        member.join_date.isoformat(),
        member.guardian_name or EMPTY_CELL,
        member.guardian_phone or EMPTY_CELL,
    ]


def members_to_csv(members: Iterable[Member]) -> str:
    """Render members as a semicolon-separated document."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=EXPORT_DELIMITER, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for member in members:
        writer.writerow(member_row(member))
    return UTF8_BOM + buffer.getvalue()
