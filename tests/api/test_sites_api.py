"""API tests for creator site management."""

from dataclasses import replace
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from amor_presente.auth.middleware import get_auth_context
from amor_presente.kernel.errors import NotFoundError

pytestmark = [pytest.mark.api, pytest.mark.asyncio]

SITE_ID = "22222222-2222-2222-2222-222222222222"
ROUTES = "amor_presente.api.routes.sites"


@pytest.fixture
def rejected_creator_context(pending_creator_context):
    return replace(pending_creator_context, approval_status="rejected")


@pytest_asyncio.fixture
async def rejected_client(app_no_auth, rejected_creator_context):
    async def rejected():
        return rejected_creator_context

    app_no_auth.dependency_overrides[get_auth_context] = rejected
    async with AsyncClient(transport=ASGITransport(app=app_no_auth), base_url="http://test") as client:
        yield client
    app_no_auth.dependency_overrides.clear()


@pytest_asyncio.fixture
async def pending_client(app_no_auth, pending_creator_context):
    async def pending():
        return pending_creator_context

    app_no_auth.dependency_overrides[get_auth_context] = pending
    async with AsyncClient(transport=ASGITransport(app=app_no_auth), base_url="http://test") as client:
        yield client
    app_no_auth.dependency_overrides.clear()


class TestSites:
    async def test_list_sites(self, async_client, creator_context):
        with patch(f"{ROUTES}.list_creator_sites", new_callable=AsyncMock, return_value=[{"id": SITE_ID}]) as listed:
            response = await async_client.get("/api/v1/sites")

        assert response.status_code == 200
        assert response.json() == [{"id": SITE_ID}]
        listed.assert_awaited_once_with(creator_context.subject_id)

    async def test_create_site(self, async_client):
        with patch(f"{ROUTES}.create_site", new_callable=AsyncMock, return_value={"id": SITE_ID, "slug": "cha"}) as create:
            response = await async_client.post("/api/v1/sites", json={"title": "Chá", "layout_id": "cha-casa-nova"})

        assert response.status_code == 201
        assert create.await_args.kwargs == {"title": "Chá", "description": None, "layout_id": "cha-casa-nova"}

    async def test_create_requires_title(self, async_client):
        response = await async_client.post("/api/v1/sites", json={"title": ""})
        assert response.status_code == 422

    async def test_pending_creator_cannot_create(self, pending_client):
        response = await pending_client.post("/api/v1/sites", json={"title": "Chá"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Seu cadastro ainda não foi aprovado"

    async def test_other_creators_site_is_404(self, async_client):
        with patch(
            f"{ROUTES}.get_owned_site",
            new_callable=AsyncMock,
            side_effect=NotFoundError(message="Site não encontrado", code="site.not_found"),
        ):
            response = await async_client.get(f"/api/v1/sites/{SITE_ID}")

        assert response.status_code == 404
        assert response.json()["code"] == "site.not_found"

    async def test_patch_sends_only_present_fields(self, async_client):
        with patch(f"{ROUTES}.update_site", new_callable=AsyncMock, return_value={"id": SITE_ID}) as update:
            response = await async_client.patch(
                f"/api/v1/sites/{SITE_ID}",
                json={"title": "Novo título", "event_location": None},
            )

        assert response.status_code == 200
        assert update.await_args.args[2] == {"title": "Novo título", "event_location": None}

    async def test_delete(self, async_client):
        with patch(f"{ROUTES}.delete_site", new_callable=AsyncMock) as delete:
            response = await async_client.delete(f"/api/v1/sites/{SITE_ID}")

        assert response.status_code == 204
        delete.assert_awaited_once()


class TestSiteProducts:
    @pytest.fixture(autouse=True)
    def owned(self):
        with patch(f"{ROUTES}.get_owned_site", new_callable=AsyncMock, return_value={"id": SITE_ID}) as owned:
            yield owned

    async def test_add_catalog_product(self, async_client, owned):
        added = {"id": "sp-1", "site_id": SITE_ID, "product_id": "prd_1", "position": 3}
        with patch(f"{ROUTES}.add_catalog_product", new_callable=AsyncMock, return_value=added):
            response = await async_client.post(f"/api/v1/sites/{SITE_ID}/products", json={"product_id": "prd_1"})

        assert response.status_code == 201
        assert response.json() == added
        owned.assert_awaited_once()

    async def test_update_site_product(self, async_client):
        with patch(f"{ROUTES}.update_site_product", new_callable=AsyncMock, return_value={"id": "sp-1"}) as update:
            response = await async_client.patch(
                f"/api/v1/sites/{SITE_ID}/products/sp-1",
                json={"custom_price": "150.00", "is_available": False},
            )

        assert response.status_code == 200
        changes = update.await_args.args[2]
        assert set(changes) == {"custom_price", "is_available"}
        assert changes["is_available"] is False

    async def test_negative_custom_price(self, async_client):
        response = await async_client.patch(
            f"/api/v1/sites/{SITE_ID}/products/sp-1", json={"custom_price": -1}
        )
        assert response.status_code == 422

    async def test_import_csv(self, async_client, creator_context):
        with patch(
            f"{ROUTES}.import_products_csv", new_callable=AsyncMock, return_value={"imported": 1, "products": []}
        ) as imported:
            response = await async_client.post(
                f"/api/v1/sites/{SITE_ID}/products/import",
                files={"file": ("lista.csv", "nome,preco\nToalha,39.90\n".encode("latin-1"), "text/csv")},
            )

        assert response.status_code == 200
        assert imported.await_args.args == (SITE_ID, creator_context.subject_id, "nome,preco\nToalha,39.90\n")

    async def test_import_latin1_fallback(self, async_client):
        with patch(
            f"{ROUTES}.import_products_csv", new_callable=AsyncMock, return_value={"imported": 1, "products": []}
        ) as imported:
            await async_client.post(
                f"/api/v1/sites/{SITE_ID}/products/import",
                files={"file": ("lista.csv", "nome,preco\nJogo de Pratos,99\nPão,1\n".encode("latin-1"), "text/csv")},
            )

        assert "Pão" in imported.await_args.args[2]

    async def test_seed(self, async_client):
        with patch(f"{ROUTES}.seed_default_products", new_callable=AsyncMock, return_value=8):
            response = await async_client.post(f"/api/v1/sites/{SITE_ID}/products/seed")
        assert response.json() == {"seeded": 8}

    async def test_remove(self, async_client):
        with patch(f"{ROUTES}.remove_site_product", new_callable=AsyncMock) as remove:
            response = await async_client.delete(f"/api/v1/sites/{SITE_ID}/products/sp-1")

        assert response.status_code == 204
        remove.assert_awaited_once_with(SITE_ID, "sp-1")


async def test_rsvps_and_orders(async_client, creator_context):
    summary = {"rsvps": [], "attending": 0, "not_attending": 0}
    with patch(f"{ROUTES}.list_site_rsvps", new_callable=AsyncMock, return_value=summary) as rsvps, patch(
        f"{ROUTES}.list_site_orders", new_callable=AsyncMock, return_value=[]
    ) as orders:
        rsvp_response = await async_client.get(f"/api/v1/sites/{SITE_ID}/rsvps")
        order_response = await async_client.get(f"/api/v1/sites/{SITE_ID}/orders")

    assert rsvp_response.json() == summary
    assert order_response.json() == []
    rsvps.assert_awaited_once_with(SITE_ID, creator_context)
    orders.assert_awaited_once_with(SITE_ID, creator_context)


class TestUnapprovedCreator:
    async def test_rejected_cannot_patch_or_delete(self, rejected_client):
        with patch(f"{ROUTES}.update_site", new_callable=AsyncMock) as update, patch(
            f"{ROUTES}.delete_site", new_callable=AsyncMock
        ) as delete:
            patch_response = await rejected_client.patch(f"/api/v1/sites/{SITE_ID}", json={"title": "Outro"})
            delete_response = await rejected_client.delete(f"/api/v1/sites/{SITE_ID}")

        assert patch_response.status_code == 403
        assert delete_response.status_code == 403
        update.assert_not_awaited()
        delete.assert_not_awaited()

    @pytest.mark.parametrize(
        "method,path,body",
        [
            ("post", "/products", {"product_id": "prd_1"}),
            ("post", "/products/custom", {"name": "Vaso", "price": "10"}),
            ("post", "/products/seed", None),
            ("patch", "/products/sp-1", {"is_available": False}),
            ("delete", "/products/sp-1", None),
        ],
    )
    async def test_pending_cannot_change_products(self, pending_client, method, path, body):
        kwargs = {"json": body} if body is not None else {}
        with patch(f"{ROUTES}.get_owned_site", new_callable=AsyncMock) as owned:
            response = await pending_client.request(method.upper(), f"/api/v1/sites/{SITE_ID}{path}", **kwargs)

        assert response.status_code == 403
        assert response.json()["detail"] == "Seu cadastro ainda não foi aprovado"
        owned.assert_not_awaited()

    async def test_rejected_cannot_upload(self, rejected_client):
        with patch("amor_presente.api.routes.uploads.upload_image", new_callable=AsyncMock) as upload:
            response = await rejected_client.post(
                "/api/v1/uploads/images", files={"file": ("casa.png", b"\x89PNG", "image/png")}
            )

        assert response.status_code == 403
        upload.assert_not_awaited()

    async def test_pending_can_still_read(self, pending_client):
        with patch(f"{ROUTES}.get_owned_site", new_callable=AsyncMock, return_value={"id": SITE_ID}):
            response = await pending_client.get(f"/api/v1/sites/{SITE_ID}")

        assert response.status_code == 200
