from datetime import date
from typing import List, Optional

from psycopg import errors

from sunmile.core.domain.professional import Professional
from sunmile.core.domain.user import ROLE_PRO
from sunmile.infrastructure.db import connection as db
from sunmile.infrastructure.db import user_repository

TABLE_DDL = """
CREATE TABLE IF NOT EXISTS professionals (
    id BIGSERIAL PRIMARY KEY,
    user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    bio TEXT,
    phone_number TEXT NOT NULL,
    pro_registration TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT uq_professionals_user UNIQUE (user_id),
    CONSTRAINT uq_professionals_phone_number UNIQUE (phone_number),
    CONSTRAINT uq_professionals_pro_registration UNIQUE (pro_registration)
);
"""

COLUMNS = ["id", "user_id", "bio", "phone_number", "pro_registration"]

USER_PREFIX = "u_"


def ensure_table() -> None:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(TABLE_DDL)
        conn.commit()


def select_columns(alias: str = "p", prefix: str = "") -> str:
    if not prefix:
        return ", ".join(f"{alias}.{c}" for c in COLUMNS)
    return ", ".join(f"{alias}.{c} AS {prefix}{c}" for c in COLUMNS)


def row_to_professional(row, prefix: str = "", user_prefix: Optional[str] = USER_PREFIX) -> Professional:
    getter = row.get if hasattr(row, "get") else lambda k: row[k]
    user = None
    if user_prefix is not None and getter(f"{user_prefix}id") is not None:
        user = user_repository.row_to_user(row, prefix=user_prefix)
    return Professional(
        id=getter(f"{prefix}id"),
        user_id=getter(f"{prefix}user_id"),
        bio=getter(f"{prefix}bio"),
        phone_number=getter(f"{prefix}phone_number"),
        pro_registration=getter(f"{prefix}pro_registration"),
        user=user,
    )


JOINED_SELECT = f"""
SELECT {select_columns("p")}, {user_repository.select_columns("u", USER_PREFIX)}
FROM professionals p
JOIN users u ON u.id = p.user_id
"""


def create_professional(
    *,
    name: str,
    username: str,
    email: str,
    cpf: str,
    birth_date: date,
    password_hash: str,
    bio: Optional[str],
    phone_number: str,
    pro_registration: str,
) -> Professional:
    """
    Insert the backing user (role ``pro``) and the professional profile in a
    single transaction; a failure on either insert leaves no rows behind.
    """
    pool = db.get_pool()
    try:
        with pool.connection() as conn, conn.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO users (name, username, email, cpf, birth_date, password_hash, role)
                VALUES (%(name)s, %(username)s, %(email)s, %(cpf)s, %(birth_date)s, %(password_hash)s, %(role)s)
                RETURNING {user_repository.select_columns()}
                """,
                {
                    "name": name,
                    "username": username,
                    "email": email.lower(),
                    "cpf": cpf,
                    "birth_date": birth_date,
                    "password_hash": password_hash,
                    "role": ROLE_PRO,
                },
            )
            user_row = cur.fetchone()
            cur.execute(
                f"""
                INSERT INTO professionals (user_id, bio, phone_number, pro_registration)
                VALUES (%(user_id)s, %(bio)s, %(phone_number)s, %(pro_registration)s)
                RETURNING {", ".join(COLUMNS)}
                """,
                {
                    "user_id": user_row["id"],
                    "bio": bio,
                    "phone_number": phone_number,
                    "pro_registration": pro_registration,
                },
            )
            pro_row = cur.fetchone()
            conn.commit()
    except errors.UniqueViolation as exc:
        raise user_repository.conflict_from(exc) from exc

    professional = row_to_professional(pro_row, user_prefix=None)
    professional.user = user_repository.row_to_user(user_row)
    return professional


def _get_one(where: str, params: dict) -> Optional[Professional]:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(f"{JOINED_SELECT} WHERE {where}", params)
        row = cur.fetchone()
    return row_to_professional(row) if row else None


def get_professional_by_id(professional_id: int) -> Optional[Professional]:
    return _get_one("p.id = %(id)s", {"id": professional_id})


def get_professional_by_user_id(user_id: int) -> Optional[Professional]:
    return _get_one("p.user_id = %(user_id)s", {"user_id": user_id})


def get_professional_by_phone(phone_number: str) -> Optional[Professional]:
    return _get_one("p.phone_number = %(phone)s", {"phone": phone_number})


def get_professional_by_registration(pro_registration: str) -> Optional[Professional]:
    return _get_one("p.pro_registration = %(reg)s", {"reg": pro_registration})


def list_professionals() -> List[Professional]:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(f"{JOINED_SELECT} ORDER BY p.id")
        rows = cur.fetchall()
    return [row_to_professional(r) for r in rows]


def save_professional(professional: Professional) -> Optional[Professional]:
    """Persist the profile and its backing user together."""
    pool = db.get_pool()
    try:
        with pool.connection() as conn, conn.cursor() as cur:
            if professional.user is not None:
                cur.execute(
                    user_repository.UPDATE_SQL,
                    user_repository.update_params(professional.user),
                )
            cur.execute(
                """
                UPDATE professionals
                SET bio = %(bio)s,
                    phone_number = %(phone_number)s,
                    updated_at = now()
                WHERE id = %(id)s
                """,
                {
                    "id": professional.id,
                    "bio": professional.bio,
                    "phone_number": professional.phone_number,
                },
            )
            conn.commit()
    except errors.UniqueViolation as exc:
        raise user_repository.conflict_from(exc) from exc
    return get_professional_by_id(professional.id)


def delete_professional(professional: Professional) -> bool:
    """Removing the backing user cascades to the profile and its posts."""
    return user_repository.delete_user(professional.user_id)
