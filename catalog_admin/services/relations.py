"""Replace-all maintenance of product link tables.

Each call deletes every link of the product in one table and re-inserts
the submitted set. This trades write amplification for not having to diff
link sets; the UI always submits the complete list for a relation type.
"""
import logging
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from catalog_admin.errors import translate_db_error

logger = logging.getLogger(__name__)


def dedupe_ids(ids):
    """Drop null/empty ids and duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for value in ids or []:
        if value is None or value == "":
            continue
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def insert_ignore(session, table):
    """INSERT ... ON CONFLICT DO NOTHING for the session's dialect."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as pg_insert

        return pg_insert(table), True
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert

        return sqlite_insert(table), True
    return insert(table), False


def link_ids(session, link, product_id):
    """Current target ids of a product in one link table."""
    target = link.table.c[link.target_column]
    rows = session.execute(
        select(target).where(link.table.c.product_id == product_id)
    )
    return [row[0] for row in rows]


def replace_links(session, link, product_id, target_ids):
    """Make `target_ids` the full link set of `product_id` in `link.table`.

    Idempotent. Any store failure raises and aborts the surrounding save.
    """
    ids = dedupe_ids(target_ids)
    table = link.table
    try:
        session.execute(delete(table).where(table.c.product_id == product_id))
        if not ids:
            return []
        rows = [{"product_id": product_id, link.target_column: i} for i in ids]
        stmt, supports_conflict = insert_ignore(session, table)
        if supports_conflict:
            stmt = stmt.on_conflict_do_nothing(
                index_elements=["product_id", link.target_column]
            )
        session.execute(stmt, rows)
    except SQLAlchemyError as exc:
        raise translate_db_error(
            exc, "Unable to update product relationships.", table=table.name
        ) from exc
    logger.debug("Linked product %s to %d rows in %s", product_id, len(ids), table.name)
    return ids


def add_link(session, link, product_id, target_id):
    """Insert a single link, ignoring an existing one."""
    stmt, supports_conflict = insert_ignore(session, link.table)
    if supports_conflict:
        stmt = stmt.on_conflict_do_nothing(
            index_elements=["product_id", link.target_column]
        )
        session.execute(stmt, [{"product_id": product_id, link.target_column: target_id}])
    elif target_id not in link_ids(session, link, product_id):
        session.execute(stmt, [{"product_id": product_id, link.target_column: target_id}])


def clear_links(session, product_id, links):
    for link in links:
        session.execute(delete(link.table).where(link.table.c.product_id == product_id))
