from uuid import uuid4

import pytest
from src.core.exceptions import errors
from src.domain.services.favorite_service import FavoriteService


class TestFavoriteService:
    """Test cases for FavoriteService"""

    async def test_add_is_idempotent(self, db_session, make_product):
        product = await make_product()
        service = FavoriteService(db_session)

        first = await service.add_favorite("u1", product.id)
        second = await service.add_favorite("u1", product.id)

        assert first.id == second.id
        assert len(await service.list_favorites("u1")) == 1

    async def test_add_unknown_product(self, db_session):
        with pytest.raises(errors.NotFoundError):
            await FavoriteService(db_session).add_favorite("u1", uuid4())

    async def test_favorite_ids_and_status(self, db_session, make_product):
        saved = await make_product()
        other = await make_product()
        service = FavoriteService(db_session)
        await service.add_favorite("u1", saved.id)

        assert await service.get_favorite_product_ids("u1") == {str(saved.id)}
        assert await service.is_favorited("u1", saved.id)
        assert not await service.is_favorited("u1", other.id)
        assert not await service.is_favorited(None, saved.id)
        assert not await service.is_favorited("u2", saved.id)

    async def test_remove(self, db_session, make_product):
        product = await make_product()
        service = FavoriteService(db_session)
        await service.add_favorite("u1", product.id)

        assert await service.remove_favorite("u1", product.id) is True
        assert await service.remove_favorite("u1", product.id) is False
        assert await service.get_favorite_product_ids("u1") == set()
