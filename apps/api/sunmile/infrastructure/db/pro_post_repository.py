import json
from typing import List, Optional

from sunmile.core.domain.pro_post import ProPost
from sunmile.infrastructure.db import connection as db
from sunmile.infrastructure.db import professional_repository, user_repository

TABLE_DDL = """
CREATE TABLE IF NOT EXISTS pro_posts (
    id BIGSERIAL PRIMARY KEY,
    professional_id BIGINT NOT NULL REFERENCES professionals(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    image_urls JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_pro_posts_professional ON pro_posts(professional_id);
"""

PRO_PREFIX = "p_"

JOINED_SELECT = f"""
SELECT pp.id, pp.professional_id, pp.title, pp.content, pp.image_urls, pp.created_at,
       {professional_repository.select_columns("p", PRO_PREFIX)},
       {user_repository.select_columns("u", professional_repository.USER_PREFIX)}
FROM pro_posts pp
JOIN professionals p ON p.id = pp.professional_id
JOIN users u ON u.id = p.user_id
"""


def ensure_table() -> None:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(TABLE_DDL)
        conn.commit()


def _parse_urls(val) -> List[str]:
    if val is None:
        return []
    return list(val) if isinstance(val, list) else json.loads(val)


def _row_to_post(row) -> ProPost:
    return ProPost(
        id=row["id"],
        professional_id=row["professional_id"],
        title=row["title"],
        content=row["content"],
        image_urls=_parse_urls(row["image_urls"]),
        created_at=row["created_at"],
        professional=professional_repository.row_to_professional(row, prefix=PRO_PREFIX),
    )


def create_post(
    *, professional_id: int, title: str, content: str, image_urls: List[str]
) -> ProPost:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO pro_posts (professional_id, title, content, image_urls)
            VALUES (%(professional_id)s, %(title)s, %(content)s, %(image_urls)s::jsonb)
            RETURNING id
            """,
            {
                "professional_id": professional_id,
                "title": title,
                "content": content,
                "image_urls": json.dumps(image_urls),
            },
        )
        row = cur.fetchone()
        conn.commit()
    return get_post_by_id(row["id"])


def get_post_by_id(post_id: int) -> Optional[ProPost]:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(f"{JOINED_SELECT} WHERE pp.id = %(id)s", {"id": post_id})
        row = cur.fetchone()
    return _row_to_post(row) if row else None


def list_posts() -> List[ProPost]:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(f"{JOINED_SELECT} ORDER BY pp.id")
        rows = cur.fetchall()
    return [_row_to_post(r) for r in rows]


def save_post(post: ProPost) -> Optional[ProPost]:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(
            """
            UPDATE pro_posts
            SET title = %(title)s,
                content = %(content)s,
                image_urls = %(image_urls)s::jsonb,
                updated_at = now()
            WHERE id = %(id)s
            """,
            {
                "id": post.id,
                "title": post.title,
                "content": post.content,
                "image_urls": json.dumps(post.image_urls),
            },
        )
        conn.commit()
    return get_post_by_id(post.id)


def delete_post(post_id: int) -> bool:
    pool = db.get_pool()
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM pro_posts WHERE id = %(id)s RETURNING id", {"id": post_id})
        row = cur.fetchone()
        conn.commit()
    return row is not None
