import uuid

import pytest

from orderflow.domain.errors import (
    AmountOutOfRange,
    DescriptionRequired,
    FirstNameRequired,
    PasswordTooShort,
    PriceInvalid,
    ProductNotFound,
    QuantityNegative,
    UserNotFound,
    UserTooYoung,
)


class TestProductService:
    def test_create_and_read_back(self, product_service):
        created = product_service.create_product(description="Desk lamp", tags=["home", "light"], quantity=3, price=2599)

        stored = product_service.get_product(created.id)
        assert stored.description == "Desk lamp"
        assert stored.tags == ["home", "light"]
        assert stored.quantity == 3
        assert stored.price == 2599

    @pytest.mark.parametrize(
        "fields, error",
        [
            ({"description": "", "quantity": 1, "price": 10}, DescriptionRequired),
            ({"description": "x", "quantity": 1, "price": 0}, PriceInvalid),
            ({"description": "x", "quantity": -1, "price": 10}, QuantityNegative),
            ({"description": "x", "quantity": 1, "price": 2**63}, AmountOutOfRange),
            ({"description": "x", "quantity": 2**31, "price": 10}, AmountOutOfRange),
        ],
    )
    def test_invalid_products_are_not_stored(self, product_service, fields, error):
        with pytest.raises(error):
            product_service.create_product(tags=None, **fields)
        assert product_service.list_products(10, 0) == ([], 0)

    def test_unknown_product(self, product_service, engine):
        with pytest.raises(ProductNotFound):
            product_service.get_product(uuid.uuid4())

    def test_list_pages_in_creation_order(self, product_service):
        ids = [product_service.create_product(description=f"item {n}", tags=[], quantity=1, price=10).id for n in range(4)]

        first, total = product_service.list_products(2, 0)
        assert [p.id for p in first] == ids[:2]
        assert total == 4
        second, total = product_service.list_products(2, 2)
        assert [p.id for p in second] == ids[2:]
        assert total == 4
        assert product_service.list_products(2, 4) == ([], 4)

    def test_update_changes_only_given_fields(self, product_service, product):
        updated = product_service.update_product(product.id, quantity=25)

        assert updated.quantity == 25
        stored = product_service.get_product(product.id)
        assert stored.quantity == 25
        assert stored.description == "Mechanical keyboard"
        assert stored.price == 1000

    def test_invalid_update_leaves_product_alone(self, product_service, product):
        with pytest.raises(PriceInvalid):
            product_service.update_product(product.id, description="Renamed", price=0)

        stored = product_service.get_product(product.id)
        assert stored.description == "Mechanical keyboard"
        assert stored.price == 1000

    def test_update_unknown_product(self, product_service, engine):
        with pytest.raises(ProductNotFound):
            product_service.update_product(uuid.uuid4(), quantity=1)


class TestUserService:
    def test_register_hashes_password(self, user_service):
        user = user_service.register_user(first_name="Grace", last_name="Hopper", age=40, password="compilers!")

        stored = user_service.get_user(user.id)
        assert stored.full_name == "Grace Hopper"
        assert stored.password_hash != "compilers!"
        assert stored.check_password("compilers!")
        assert not stored.check_password("wrong-password")

    def test_minimum_age_is_inclusive(self, user_service):
        assert user_service.register_user(first_name="A", last_name="B", age=18, password="longenough").age == 18

    @pytest.mark.parametrize(
        "fields, error",
        [
            ({"first_name": "", "last_name": "B", "age": 30, "password": "longenough"}, FirstNameRequired),
            ({"first_name": "A", "last_name": "B", "age": 17, "password": "longenough"}, UserTooYoung),
            ({"first_name": "A", "last_name": "B", "age": 30, "password": "short"}, PasswordTooShort),
        ],
    )
    def test_rejected_registrations(self, user_service, fields, error):
        with pytest.raises(error):
            user_service.register_user(**fields)

    def test_limits_are_configurable(self, transactions):
        from orderflow.services.users import UserService

        service = UserService(transactions, min_age=21, min_password_length=12)
        with pytest.raises(UserTooYoung):
            service.register_user(first_name="A", last_name="B", age=20, password="a-very-long-one")
        with pytest.raises(PasswordTooShort):
            service.register_user(first_name="A", last_name="B", age=30, password="elevenchars")

    def test_unknown_user(self, user_service, engine):
        with pytest.raises(UserNotFound):
            user_service.get_user(uuid.uuid4())
