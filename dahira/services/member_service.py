"""Member domain services."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from dahira.core.constants import PHONE_PATTERN, Gender
from dahira.core.exceptions import MemberStoreError
from dahira.models.member import Member
from dahira.repositories import member_repo
from dahira.schemas.member import (
    MemberBaseInput,
    MemberCreateInput,
    MemberFilterInput,
    MemberUpdateInput,
)

logger = logging.getLogger(__name__)

MEMBER_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "role",
    "gender",
    "annual_fee",
    "card_number",
    "join_date",
    "profession",
    "photo_url",
    "guardian_name",
    "guardian_phone",
)

# Column widths of the member table for the fields checked by the ordered rules.
MAX_FIELD_LENGTHS = {
    "first_name": 100,
    "last_name": 100,
    "card_number": 50,
    "guardian_name": 200,
}

REQUIRED_FIELDS_MESSAGE = "Veuillez remplir tous les champs obligatoires (*)"
ADULT_PHONE_REQUIRED_MESSAGE = "Le numéro de téléphone est obligatoire pour les adultes."
GUARDIAN_REQUIRED_MESSAGE = "Le nom et le téléphone du tuteur sont obligatoires pour un enfant."
INVALID_PHONE_MESSAGE = "Numéro de téléphone membre invalide."
INVALID_GUARDIAN_PHONE_MESSAGE = "Numéro de téléphone du tuteur invalide."
INVALID_INPUT_MESSAGE = "Veuillez vérifier les informations du membre."
FIELD_TOO_LONG_MESSAGE = "Un des champs du membre dépasse la longueur autorisée."
MEMBER_NOT_FOUND_MESSAGE = "Membre introuvable."
STORE_FAILURE_MESSAGE = "Erreur lors de l'enregistrement du membre. Veuillez réessayer."


def duplicate_card_message(card_number: str) -> str:
    return f"Le numéro de carte {card_number} existe déjà."


@dataclass(frozen=True)
class MemberPage:
    """One page of the filtered member list."""

    items: Sequence[Member]
    page: int
    total_pages: int
    total_items: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def parse_member_create_input(form_data: Mapping[str, object]) -> MemberCreateInput | None:
    """Return validated create payload or ``None``."""

    try:
        return MemberCreateInput.model_validate(_member_payload(form_data))
    except ValidationError:
        return None


def parse_member_update_input(form_data: Mapping[str, object]) -> MemberUpdateInput | None:
    """Return validated update payload or ``None``."""

    try:
        return MemberUpdateInput.model_validate(_member_payload(form_data))
    except ValidationError:
        return None


def parse_member_filters(query_params: Mapping[str, str]) -> MemberFilterInput:
    """Return list filters, ignoring values that do not parse."""

    values = dict(query_params)
    try:
        return MemberFilterInput.model_validate(values)
    except ValidationError as exc:
        invalid_fields = {error["loc"][0] for error in exc.errors() if error["loc"]}
    return MemberFilterInput.model_validate(
        {key: value for key, value in values.items() if key not in invalid_fields}
    )


def validate_member_rules(input_data: MemberBaseInput) -> str | None:
    """Return the first business-rule violation, or ``None``.

    Rules run in a fixed order: required identity fields, adult phone,
    guardian fields for minors, phone formats, then field lengths.
    """

    if not input_data.first_name or not input_data.last_name or not input_data.card_number:
        return REQUIRED_FIELDS_MESSAGE
    if not input_data.is_minor and not input_data.phone:
        return ADULT_PHONE_REQUIRED_MESSAGE
    if input_data.is_minor and (not input_data.guardian_name or not input_data.guardian_phone):
        return GUARDIAN_REQUIRED_MESSAGE
    if input_data.phone and not PHONE_PATTERN.fullmatch(input_data.phone):
        return INVALID_PHONE_MESSAGE
    if input_data.guardian_phone and not PHONE_PATTERN.fullmatch(input_data.guardian_phone):
        return INVALID_GUARDIAN_PHONE_MESSAGE
    for field_name, max_length in MAX_FIELD_LENGTHS.items():
        if len(getattr(input_data, field_name) or "") > max_length:
            return FIELD_TOO_LONG_MESSAGE
    return None


def list_members(session: Session) -> Sequence[Member]:
    """Return members for admin listing."""

    return member_repo.list_members(session)


def get_member(session: Session, member_id: int) -> Member | None:
    return member_repo.get_member_by_id(session, member_id)


def create_member(
    session: Session,
    input_data: MemberCreateInput,
) -> tuple[Member | None, str | None]:
    """Create a member or return a validation error message."""

    error_message = validate_member_rules(input_data)
    if error_message is not None:
        return None, error_message

    if member_repo.get_member_by_card_number(session, input_data.card_number) is not None:
        return None, duplicate_card_message(input_data.card_number)

    member = Member(
        first_name=input_data.first_name,
        last_name=input_data.last_name,
        role=input_data.role,
        gender=input_data.gender,
        card_number=input_data.card_number,
        join_date=input_data.join_date,
    )
    _apply_details(member, input_data)
    return _save(session, member)


def update_member(
    session: Session,
    member_id: int,
    input_data: MemberUpdateInput,
) -> tuple[Member | None, str | None]:
    """Update a member or return an error message."""

    member = member_repo.get_member_by_id(session, member_id)
    if member is None:
        return None, MEMBER_NOT_FOUND_MESSAGE

    error_message = validate_member_rules(input_data)
    if error_message is not None:
        return None, error_message

    holder = member_repo.get_member_by_card_number(session, input_data.card_number)
    if holder is not None and holder.id != member.id:
        return None, duplicate_card_message(input_data.card_number)

    member.first_name = input_data.first_name
    member.last_name = input_data.last_name
    member.role = input_data.role
    member.gender = input_data.gender
    member.card_number = input_data.card_number
    member.join_date = input_data.join_date
    _apply_details(member, input_data)
    return _save(session, member)


def delete_member(session: Session, member_id: int) -> str | None:
    """Delete a member or return an error message."""

    member = member_repo.get_member_by_id(session, member_id)
    if member is None:
        return MEMBER_NOT_FOUND_MESSAGE

    card_number = member.card_number
    try:
        member_repo.delete_member(session, member)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Deleting member %s failed", member_id)
        raise MemberStoreError(STORE_FAILURE_MESSAGE) from exc
    logger.info("Deleted member %s (%s)", member_id, card_number)
    return None


def filter_members(members: Sequence[Member], filters: MemberFilterInput) -> list[Member]:
    """Apply the list search box and the gender/role selectors."""

    needle = filters.q.lower()
    matched: list[Member] = []
    for member in members:
        if needle and not (
            needle in member.first_name.lower()
            or needle in member.last_name.lower()
            or needle in member.card_number.lower()
            or filters.q in member.phone
        ):
            continue
        if filters.gender is not None and member.gender != filters.gender:
            continue
        if filters.role is not None and member.role != filters.role:
            continue
        matched.append(member)
    return matched


def paginate_members(members: Sequence[Member], page: int, page_size: int) -> MemberPage:
    """Slice ``members`` to ``page``, clamped into the available range."""

    total_pages = max(1, math.ceil(len(members) / page_size))
    current_page = min(max(page, 1), total_pages)
    start = (current_page - 1) * page_size
    return MemberPage(
        items=members[start : start + page_size],
        page=current_page,
        total_pages=total_pages,
        total_items=len(members),
    )


def contact_phone_digits(member: Member) -> str | None:
    """Digits to reach a member on WhatsApp, preferring the guardian."""

    raw_phone = member.guardian_phone or member.phone
    digits = re.sub(r"[^0-9]", "", raw_phone or "")
    return digits or None


def _member_payload(form_data: Mapping[str, object]) -> dict[str, object]:
    return {key: form_data[key] for key in MEMBER_FIELDS if key in form_data}


def _apply_details(member: Member, input_data: MemberBaseInput) -> None:
    member.phone = input_data.phone
    member.annual_fee = input_data.annual_fee
    member.profession = input_data.profession
    member.photo_url = input_data.photo_url
    if input_data.gender == Gender.ENFANT:
        member.guardian_name = input_data.guardian_name
        member.guardian_phone = input_data.guardian_phone
    else:
        member.guardian_name = None
        member.guardian_phone = None


def _save(session: Session, member: Member) -> tuple[Member | None, str | None]:
    card_number = member.card_number
    try:
        return member_repo.save_member(session, member), None
    except IntegrityError:
        session.rollback()
        return None, duplicate_card_message(card_number)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Saving member %s failed", card_number)
        raise MemberStoreError(STORE_FAILURE_MESSAGE) from exc
