"""
Catalog Store - DuckDB persistence for categories and products

Handles:
- Schema creation (UNIQUE name/slug on categories, UNIQUE sku on products)
- Idempotent category inserts (INSERT OR IGNORE, then re-lookup)
- Category listing with rolled-up product counts, update, delete, clean-all
- Product insert, storefront listing and search
"""

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

import duckdb

from teslashop.config import CATALOG_DB_PATH, SEARCH_SETTINGS
from teslashop.logger import get_logger
from teslashop.slugs import slugify

logger = get_logger(__name__)

CATEGORY_COLUMNS = (
    "id", "name", "slug", "description", "parent_id", "level",
    "is_active", "sort_order", "created_at",
)

PRODUCT_COLUMNS = (
    "id", "name", "sku", "slug", "description", "short_description", "price",
    "stock_quantity", "low_stock_threshold", "track_quantity", "compatible_models",
    "weight", "dimensions", "category_id", "is_active", "is_featured",
    "meta_title", "meta_description", "created_at",
)

SORT_CLAUSES = {
    "relevance": "p.created_at DESC",
    "newest": "p.created_at DESC",
    "price-low": "p.price ASC",
    "price-high": "p.price DESC",
    "name": "p.name ASC",
}


class DuplicateCategoryError(ValueError):
    """Raised when a rename would collide with another category's name or slug."""


def camelize(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def camelize_keys(record: dict[str, Any]) -> dict[str, Any]:
    """snake_case store record -> camelCase API payload."""
    return {camelize(key): value for key, value in record.items()}


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class CatalogStore:
    """
    Owns one DuckDB connection holding the categories and products tables.

    Use ``CatalogStore(":memory:")`` for throwaway stores in tests.
    """

    def __init__(self, db_path: str | Path | None = None):
        """
        Initialize the store.

        Args:
            db_path: Path to the DuckDB file, or ":memory:".
                     If None, uses default CATALOG_DB_PATH.
        """
        if db_path is None:
            db_path = CATALOG_DB_PATH

        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(db_path)
        self.con = duckdb.connect(self.db_path)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create tables if they don't exist."""
        self.con.execute("""
            CREATE TABLE IF NOT EXISTS categories (
                id VARCHAR PRIMARY KEY,
                name VARCHAR NOT NULL UNIQUE,
                slug VARCHAR NOT NULL UNIQUE,
                description VARCHAR,
                parent_id VARCHAR,
                level INTEGER NOT NULL DEFAULT 1,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                sort_order INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP
            )
        """)
        self.con.execute("""
            CREATE TABLE IF NOT EXISTS products (
                id VARCHAR PRIMARY KEY,
                name VARCHAR NOT NULL,
                sku VARCHAR NOT NULL UNIQUE,
                slug VARCHAR,
                description VARCHAR,
                short_description VARCHAR,
                price DOUBLE NOT NULL DEFAULT 0,
                stock_quantity INTEGER NOT NULL DEFAULT 0,
                low_stock_threshold INTEGER,
                track_quantity BOOLEAN,
                compatible_models VARCHAR,
                weight DOUBLE,
                dimensions VARCHAR,
                category_id VARCHAR,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                is_featured BOOLEAN NOT NULL DEFAULT FALSE,
                meta_title VARCHAR,
                meta_description VARCHAR,
                created_at TIMESTAMP
            )
        """)
        self.con.execute("""
            CREATE INDEX IF NOT EXISTS idx_products_category
            ON products (category_id)
        """)

    def _records(self, query: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        cursor = self.con.execute(query, params or [])
        columns = [d[0] for d in cursor.description]
        return [
            {col: _plain(value) for col, value in zip(columns, row)}
            for row in cursor.fetchall()
        ]

    def _record(self, query: str, params: list[Any] | None = None) -> dict[str, Any] | None:
        rows = self._records(query, params)
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_category(self, category_id: str) -> dict[str, Any] | None:
        return self._record(
            f"SELECT {', '.join(CATEGORY_COLUMNS)} FROM categories WHERE id = ?",
            [category_id],
        )

    def find_category(self, name: str, slug: str | None = None) -> dict[str, Any] | None:
        """Look up a category by exact name or by slug (derived from name if omitted)."""
        slug = slug if slug is not None else slugify(name)
        return self._record(
            f"""
            SELECT {', '.join(CATEGORY_COLUMNS)} FROM categories
            WHERE name = ? OR slug = ?
            ORDER BY CASE WHEN name = ? THEN 0 ELSE 1 END
            LIMIT 1
            """,
            [name, slug, name],
        )

    def find_category_by_name(self, name: str) -> dict[str, Any] | None:
        return self._record(
            f"SELECT {', '.join(CATEGORY_COLUMNS)} FROM categories WHERE name = ?",
            [name],
        )

    def max_sort_order(self) -> int:
        result = self.con.execute("SELECT COALESCE(MAX(sort_order), 0) FROM categories").fetchone()
        return int(result[0]) if result else 0

    def count_categories(self) -> int:
        return int(self.con.execute("SELECT COUNT(*) FROM categories").fetchone()[0])

    def insert_category(
        self,
        name: str,
        *,
        description: str | None = None,
        parent_id: str | None = None,
        level: int = 1,
        sort_order: int = 0,
        is_active: bool = True,
    ) -> tuple[str, bool]:
        """
        Insert a category unless one with the same name or slug exists.

        Returns:
            (category_id, created). ``created`` is False when the UNIQUE
            constraints turned the insert into a no-op; the id is then the
            existing row's.
        """
        new_id = str(uuid.uuid4())
        slug = slugify(name)
        try:
            self.con.execute(
                """
                INSERT OR IGNORE INTO categories
                    (id, name, slug, description, parent_id, level, is_active, sort_order, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [new_id, name, slug, description, parent_id, level, is_active, sort_order, datetime.now()],
            )
        except duckdb.ConstraintException as e:
            logger.debug(f"Insert of category '{name}' hit a constraint: {e}")

        existing = self.find_category(name, slug)
        if existing is None:
            raise duckdb.ConstraintException(f"Category '{name}' was neither inserted nor found")
        return existing["id"], existing["id"] == new_id

    def list_categories(self) -> list[dict[str, Any]]:
        """
        All categories ordered by sort order then name, with
        ``direct_product_count`` and ``product_count`` (rolled up over descendants).
        """
        rows = self._records(f"""
            SELECT {', '.join('c.' + col for col in CATEGORY_COLUMNS)},
                   COUNT(p.id) AS direct_product_count
            FROM categories c
            LEFT JOIN products p ON p.category_id = c.id
            GROUP BY {', '.join('c.' + col for col in CATEGORY_COLUMNS)}
            ORDER BY c.sort_order ASC, c.name ASC
        """)

        children: dict[str | None, list[dict[str, Any]]] = {}
        for row in rows:
            children.setdefault(row["parent_id"], []).append(row)

        totals: dict[str, int] = {}

        def rolled_up(row: dict[str, Any], seen: frozenset[str]) -> int:
            if row["id"] in totals:
                return totals[row["id"]]
            total = int(row["direct_product_count"])
            for child in children.get(row["id"], []):
                if child["id"] not in seen:
                    total += rolled_up(child, seen | {child["id"]})
            totals[row["id"]] = total
            return total

        for row in rows:
            row["direct_product_count"] = int(row["direct_product_count"])
            row["product_count"] = rolled_up(row, frozenset({row["id"]}))
        return rows

    def create_category(
        self,
        name: str,
        description: str | None = None,
        is_active: bool = True,
        parent_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a single category at the next sort order.

        Raises:
            DuplicateCategoryError: A category with this name or slug exists.
            KeyError: ``parent_id`` does not exist.
        """
        name = name.strip()
        if self.find_category(name) is not None:
            raise DuplicateCategoryError("Category with this name already exists")

        level = 1
        if parent_id:
            parent = self.get_category(parent_id)
            if parent is None:
                raise KeyError(parent_id)
            level = int(parent["level"]) + 1

        category_id, created = self.insert_category(
            name,
            description=description,
            parent_id=parent_id,
            level=level,
            sort_order=self.max_sort_order() + 1,
            is_active=is_active,
        )
        if not created:
            raise DuplicateCategoryError("Category with this name already exists")
        return self.get_category(category_id)

    def update_category(
        self,
        category_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        update_description: bool = False,
        is_active: bool | None = None,
    ) -> dict[str, Any]:
        """
        Update name (and slug), description and/or active flag.

        Raises:
            KeyError: Category does not exist.
            DuplicateCategoryError: Another category has the new name or slug.
        """
        current = self.get_category(category_id)
        if current is None:
            raise KeyError(category_id)

        assignments: list[str] = []
        params: list[Any] = []

        if name and name.strip():
            new_name = name.strip()
            new_slug = slugify(new_name)
            duplicate = self.con.execute(
                "SELECT id FROM categories WHERE id <> ? AND (name = ? OR slug = ?) LIMIT 1",
                [category_id, new_name, new_slug],
            ).fetchone()
            if duplicate:
                raise DuplicateCategoryError("Another category with this name already exists")
            # Unchanged indexed columns are left out of the UPDATE
            if new_name != current["name"]:
                assignments.append("name = ?")
                params.append(new_name)
            if new_slug != current["slug"]:
                assignments.append("slug = ?")
                params.append(new_slug)

        if update_description:
            assignments.append("description = ?")
            params.append(description.strip() if description and description.strip() else None)

        if is_active is not None:
            assignments.append("is_active = ?")
            params.append(bool(is_active))

        if assignments:
            self.con.execute(
                f"UPDATE categories SET {', '.join(assignments)} WHERE id = ?",
                params + [category_id],
            )
        return self.get_category(category_id)

    def delete_category(self, category_id: str) -> bool:
        existed = self.get_category(category_id) is not None
        if existed:
            self.con.execute("DELETE FROM categories WHERE id = ?", [category_id])
        return existed

    def delete_all_categories(self) -> int:
        count = self.count_categories()
        if count:
            self.con.execute("DELETE FROM categories")
        return count

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def count_products(self, category_id: str | None = None) -> int:
        if category_id is None:
            result = self.con.execute("SELECT COUNT(*) FROM products").fetchone()
        else:
            result = self.con.execute(
                "SELECT COUNT(*) FROM products WHERE category_id = ?", [category_id]
            ).fetchone()
        return int(result[0])

    def get_product_by_sku(self, sku: str) -> dict[str, Any] | None:
        return self._record(
            f"SELECT {', '.join(PRODUCT_COLUMNS)} FROM products WHERE sku = ?",
            [sku],
        )

    def insert_product(self, record: dict[str, Any]) -> str:
        """
        Insert one product row. Missing columns are stored as NULL.

        Raises:
            duckdb.ConstraintException: SKU already exists.
        """
        values = dict(record)
        values.setdefault("id", str(uuid.uuid4()))
        values.setdefault("created_at", datetime.now())
        columns = [col for col in PRODUCT_COLUMNS if col in values]
        self.con.execute(
            f"INSERT INTO products ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            [values[col] for col in columns],
        )
        return values["id"]

    def list_products(
        self,
        *,
        category_id: str | None = None,
        limit: int | None = None,
        exclude: str | None = None,
        model: str | None = None,
    ) -> list[dict[str, Any]]:
        """Active products, newest first, with their category's name and slug."""
        where = ["p.is_active"]
        params: list[Any] = []
        if category_id:
            where.append("p.category_id = ?")
            params.append(category_id)
        if exclude:
            where.append("p.id <> ?")
            params.append(exclude)
        if model:
            where.append("p.compatible_models ILIKE ?")
            params.append(f"%{model}%")

        query = f"""
            SELECT {', '.join('p.' + col for col in PRODUCT_COLUMNS)},
                   c.name AS category_name, c.slug AS category_slug
            FROM products p
            LEFT JOIN categories c ON c.id = p.category_id
            WHERE {' AND '.join(where)}
            ORDER BY p.created_at DESC, p.name ASC
        """
        if limit is not None and limit > 0:
            query += " LIMIT ?"
            params.append(int(limit))
        return self._records(query, params)

    def search_products(
        self,
        query: str,
        *,
        sort: str = "relevance",
        min_price: float = 0,
        max_price: float | None = None,
        categories: list[str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Case-insensitive substring search over name, description, sku and
        compatible models. Unknown sort keys fall back to newest first.
        """
        if not query.strip():
            return []

        pattern = f"%{query.strip()}%"
        where = [
            "p.is_active",
            "p.price >= ?",
            "(p.name ILIKE ? OR p.description ILIKE ? OR p.sku ILIKE ? OR p.compatible_models ILIKE ?)",
        ]
        params: list[Any] = [min_price, pattern, pattern, pattern, pattern]
        if max_price is not None:
            where.append("p.price <= ?")
            params.append(max_price)
        if categories:
            where.append(f"c.name IN ({', '.join('?' for _ in categories)})")
            params.extend(categories)

        order = SORT_CLAUSES.get(sort, SORT_CLAUSES["relevance"])
        params.append(int(limit or SEARCH_SETTINGS["max_results"]))
        return self._records(
            f"""
            SELECT {', '.join('p.' + col for col in PRODUCT_COLUMNS)},
                   c.name AS category_name, c.slug AS category_slug
            FROM products p
            LEFT JOIN categories c ON c.id = p.category_id
            WHERE {' AND '.join(where)}
            ORDER BY {order}, p.name ASC
            LIMIT ?
            """,
            params,
        )

    def close(self) -> None:
        """Close the DuckDB connection."""
        self.con.close()
