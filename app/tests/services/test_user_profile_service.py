import pytest
from src.core.exceptions import errors
from src.domain.enums import UserRole
from src.domain.schemas import PromotionCreate, PromotionUpdate, UserProfileUpdate
from src.domain.services.promotion_service import PromotionService
from src.domain.services.user_profile_service import UserProfileService


class TestUserProfileService:
    """Test cases for UserProfileService"""

    async def test_own_profile_is_created_on_first_read(self, db_session, customer):
        service = UserProfileService(db_session)

        profile = await service.get_profile(customer.user_id, customer)

        assert profile.id == customer.user_id
        assert profile.email == customer.email
        assert await service.get_role(customer.user_id) == UserRole.USER

    async def test_cannot_read_another_profile(self, db_session, customer, other_customer):
        with pytest.raises(errors.AuthorizationError):
            await UserProfileService(db_session).get_profile(other_customer.user_id, customer)

    async def test_admin_reading_missing_profile(self, db_session, admin):
        with pytest.raises(errors.NotFoundError):
            await UserProfileService(db_session).get_profile("nobody", admin)

    async def test_update_own_profile(self, db_session, customer):
        profile = await UserProfileService(db_session).update_profile(
            customer.user_id, UserProfileUpdate(first_name="Kato", phone="0700000000"), customer
        )

        assert profile.first_name == "Kato"
        assert profile.phone == "0700000000"

    async def test_customer_cannot_change_role(self, db_session, customer):
        with pytest.raises(errors.AuthorizationError):
            await UserProfileService(db_session).update_profile(
                customer.user_id, UserProfileUpdate(role=UserRole.ADMIN), customer
            )

    async def test_admin_promotes_customer(self, db_session, customer, admin):
        service = UserProfileService(db_session)
        await service.get_profile(customer.user_id, customer)

        profile = await service.update_profile(customer.user_id, UserProfileUpdate(role=UserRole.ADMIN), admin)

        assert profile.is_admin
        assert await service.count_customers() == 0

    async def test_count_customers(self, db_session, customer, other_customer, admin):
        service = UserProfileService(db_session)
        await service.get_profile(customer.user_id, customer)
        await service.get_profile(other_customer.user_id, other_customer)
        await service.get_profile(admin.user_id, admin)

        assert await service.count_customers() == 2


class TestPromotionService:
    """Test cases for PromotionService"""

    async def test_lifecycle(self, db_session):
        service = PromotionService(db_session)

        promotion = await service.create_promotion(PromotionCreate(title="Service week", discount=15))
        await service.create_promotion(PromotionCreate(title="Old banner", is_active=False))

        assert [p.id for p in await service.list_active()] == [promotion.id]

        updated = await service.update_promotion(promotion.id, PromotionUpdate(banner_text="15% off oil changes"))
        assert updated.banner_text == "15% off oil changes"
        assert updated.title == "Service week"

        await service.delete_promotion(promotion.id)
        with pytest.raises(errors.NotFoundError):
            await service.get_promotion(promotion.id)
