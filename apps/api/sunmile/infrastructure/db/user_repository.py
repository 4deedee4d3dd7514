from datetime import date
from typing import List, Optional

from psycopg import errors

from sunmile.core.domain.errors import ConflictError
from sunmile.core.domain.user import ROLE_USER, User
from sunmile.infrastructure.db import connection as db

TABLE_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id BIGSERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    username TEXT NOT NULL,
    email TEXT NOT NULL,
    cpf TEXT NOT NULL,
    birth_date DATE NOT NULL,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'user',
    profile_pic_url TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT uq_users_username UNIQUE (username),
    CONSTRAINT uq_users_email UNIQUE (email),
    CONSTRAINT uq_users_cpf UNIQUE (cpf),
    CONSTRAINT ck_users_role CHECK (role IN ('user', 'pro', 'admin'))
);
"""

COLUMNS = [
    "id",
    "name",
    "username",
    "email",
    "cpf",
    "birth_date",
    "password_hash",
    "role",
    "profile_pic_url",
]

# Unique constraint name -> field it guards, for both user and professional tables.
UNIQUE_CONSTRAINTS = {
    "uq_users_username": "username",
    "uq_users_email": "email",
    "uq_users_cpf": "cpf",
    "uq_professionals_phone_number": "phone_number",
    "uq_professionals_pro_registration": "pro_registration",
    "uq_professionals_user": "user_id",
}


def conflict_from(exc: errors.UniqueViolation) -> ConflictError:
    constraint = getattr(exc.diag, "constraint_name", None)
    return ConflictError.for_field(UNIQUE_CONSTRAINTS.get(constraint or "", ""))


def ensure_table() -> None:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(TABLE_DDL)
        conn.commit()


def select_columns(alias: str = "", prefix: str = "") -> str:
    """Column list for SELECTs; ``prefix`` namespaces columns in joined rows."""
    table = f"{alias}." if alias else ""
    if not prefix:
        return ", ".join(f"{table}{c}" for c in COLUMNS)
    return ", ".join(f"{table}{c} AS {prefix}{c}" for c in COLUMNS)


def row_to_user(row, prefix: str = "") -> User:
    getter = row.get if hasattr(row, "get") else lambda k: row[k]
    return User(
        id=getter(f"{prefix}id"),
        name=getter(f"{prefix}name"),
        username=getter(f"{prefix}username"),
        email=getter(f"{prefix}email"),
        cpf=getter(f"{prefix}cpf"),
        birth_date=getter(f"{prefix}birth_date"),
        password_hash=getter(f"{prefix}password_hash"),
        role=getter(f"{prefix}role"),
        profile_pic_url=getter(f"{prefix}profile_pic_url"),
    )


def create_user(
    *,
    name: str,
    username: str,
    email: str,
    cpf: str,
    birth_date: date,
    password_hash: str,
    role: str = ROLE_USER,
) -> User:
    pool = db.get_pool()
    try:
        with pool.connection() as conn, conn.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO users (name, username, email, cpf, birth_date, password_hash, role)
                VALUES (%(name)s, %(username)s, %(email)s, %(cpf)s, %(birth_date)s, %(password_hash)s, %(role)s)
                RETURNING {select_columns()}
                """,
                {
                    "name": name,
                    "username": username,
                    "email": email.lower(),
                    "cpf": cpf,
                    "birth_date": birth_date,
                    "password_hash": password_hash,
                    "role": role,
                },
            )
            row = cur.fetchone()
            conn.commit()
    except errors.UniqueViolation as exc:
        raise conflict_from(exc) from exc
    return row_to_user(row)


def _get_one(where: str, params: dict) -> Optional[User]:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(f"SELECT {select_columns()} FROM users WHERE {where}", params)
        row = cur.fetchone()
    return row_to_user(row) if row else None


def get_user_by_id(user_id: int) -> Optional[User]:
    return _get_one("id = %(id)s", {"id": user_id})


def get_user_by_email(email: str) -> Optional[User]:
    return _get_one("email = %(email)s", {"email": email.lower()})


def get_user_by_username(username: str) -> Optional[User]:
    return _get_one("username = %(username)s", {"username": username})


def get_user_by_cpf(cpf: str) -> Optional[User]:
    return _get_one("cpf = %(cpf)s", {"cpf": cpf})


def list_users() -> List[User]:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(f"SELECT {select_columns()} FROM users ORDER BY id")
        rows = cur.fetchall()
    return [row_to_user(r) for r in rows]


UPDATE_SQL = f"""
UPDATE users
SET name = %(name)s,
    username = %(username)s,
    email = %(email)s,
    password_hash = %(password_hash)s,
    role = %(role)s,
    profile_pic_url = %(profile_pic_url)s,
    updated_at = now()
WHERE id = %(id)s
RETURNING {select_columns()}
"""


def update_params(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "username": user.username,
        "email": user.email.lower(),
        "password_hash": user.password_hash,
        "role": user.role,
        "profile_pic_url": user.profile_pic_url,
    }


def save_user(user: User) -> Optional[User]:
    """Persist every mutable column of ``user``; None when the row is gone."""
    pool = db.get_pool()
    try:
        with pool.connection() as conn, conn.cursor() as cur:
            cur.execute(UPDATE_SQL, update_params(user))
            row = cur.fetchone()
            conn.commit()
    except errors.UniqueViolation as exc:
        raise conflict_from(exc) from exc
    return row_to_user(row) if row else None


def delete_user(user_id: int) -> bool:
    """Professional profile and posts go with the user (ON DELETE CASCADE)."""
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM users WHERE id = %(id)s RETURNING id", {"id": user_id})
        row = cur.fetchone()
        conn.commit()
    return row is not None
