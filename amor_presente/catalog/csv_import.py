"""CSV import of creator products (`nome,preco,descricao,imagem_url,categoria`)."""

from __future__ import annotations

import csv
import io
import re
from decimal import Decimal
from typing import Any

import structlog

from amor_presente.catalog.products import DEFAULT_CATEGORY, insert_product
from amor_presente.catalog.site_products import link_product, next_position
from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import ValidationError

logger = structlog.get_logger()

CSV_COLUMNS = ("nome", "preco", "descricao", "imagem_url", "categoria")

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")


def parse_price(raw: str) -> Decimal:
    """Leading-number parse; anything unparsable or negative becomes 0."""
    value = raw.strip()
    if "," in value and "." not in value:
        value = value.replace(",", ".")
    match = _LEADING_NUMBER_RE.match(value)
    if not match:
        return Decimal("0.00")
    price = Decimal(match.group(0)).quantize(Decimal("0.01"))
    return price if price >= 0 else Decimal("0.00")


def parse_products_csv(content: str) -> list[dict[str, Any]]:
    """
    Parse CSV text into product fields.

    The first line is a header and is skipped whatever it contains. Rows
    need a name and a price; the rest are optional.
    """
    rows = list(csv.reader(io.StringIO(content.lstrip("\ufeff"))))
    products: list[dict[str, Any]] = []
    for values in rows[1:]:
        values = [v.strip() for v in values]
        if len(values) < 2 or not values[0] or not values[1]:
            continue
        values += [""] * (len(CSV_COLUMNS) - len(values))
        products.append(
            {
                "name": values[0],
                "price": parse_price(values[1]),
                "description": values[2] or None,
                "image_url": values[3] or None,
                "category": values[4] or DEFAULT_CATEGORY,
                "status": "active",
            }
        )
    return products


async def import_products_csv(site_id: str, creator_id: str, content: str) -> dict[str, Any]:
    """Create products from CSV and append them to the site after its last position."""
    products = parse_products_csv(content)
    if not products:
        raise ValidationError(
            message="Nenhum produto válido encontrado no arquivo CSV.",
            code="csv.no_valid_rows",
        )

    created: list[dict[str, Any]] = []
    async with get_db_session() as session:
        position = await next_position(session, site_id)
        for fields in products:
            product = await insert_product(session, fields, creator_id)
            site_product_id = await link_product(session, site_id, product["id"], position)
            created.append({**product, "site_product_id": site_product_id, "position": position})
            position += 1

    logger.info("Products imported from CSV", site_id=site_id, count=len(created))
    return {"imported": len(created), "products": created}
