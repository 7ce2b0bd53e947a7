"""Database access helpers for members."""

from __future__ import annotations

from collections.abc import Sequence

from sqlmodel import Session, col, select

from dahira.models.member import Member


def list_members(session: Session) -> Sequence[Member]:
    """Return all members, newest first."""

    return session.exec(
        select(Member).order_by(col(Member.created_at).desc(), col(Member.id).desc())
    ).all()


def get_member_by_id(session: Session, member_id: int) -> Member | None:
    """Return member by primary key."""

    return session.get(Member, member_id)


def get_member_by_card_number(session: Session, card_number: str) -> Member | None:
    """Return member holding ``card_number``."""

    return session.exec(select(Member).where(col(Member.card_number) == card_number)).first()


def save_member(session: Session, member: Member) -> Member:
    """Persist a new or updated member."""

    session.add(member)
    session.commit()
    session.refresh(member)
    return member


def delete_member(session: Session, member: Member) -> None:
    """Hard-delete a member."""

    session.delete(member)
    session.commit()
