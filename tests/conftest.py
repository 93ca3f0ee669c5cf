"""Pytest configuration and fixtures."""

import tempfile
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from supplier_eval.models.model_actor import Actor, UserRole
from supplier_eval.models.model_criteria import (
    Category,
    CategoryType,
    Provider,
    ProviderCriticality,
)
from supplier_eval.storage.permanent_storage.file_manager import FileManager


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def file_manager(temp_dir: Path) -> FileManager:
    """Create a FileManager with temporary directory."""
    return FileManager(data_dir=temp_dir)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Deterministic clock advancing one minute per call."""
    start = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    ticks = iter(range(10_000))
    return lambda: start + timedelta(minutes=next(ticks))


@pytest.fixture
def notifier() -> MagicMock:
    """Notifier double recording every notify() call."""
    return MagicMock()


@pytest.fixture
def goods_category() -> Category:
    return Category(id="cat-goods", name="Materiales eléctricos", category_type=CategoryType.BIENES)


@pytest.fixture
def services_category() -> Category:
    return Category(
        id="cat-services", name="Mantenimiento", category_type=CategoryType.SERVICIOS
    )


@pytest.fixture
def provider(goods_category: Category, services_category: Category) -> Provider:
    """Non-critical provider assigned to both sample categories."""
    return Provider(
        id="prov-1",
        business_name="Ferretería Andina",
        email="ventas@andina.example.com",
        category_ids=[goods_category.id, services_category.id],
        criticality=ProviderCriticality.NO_CRITICO,
    )


@pytest.fixture
def critical_provider(goods_category: Category) -> Provider:
    return Provider(
        id="prov-2",
        business_name="Eléctricos del Valle",
        email="contacto@valle.example.com",
        category_ids=[goods_category.id],
        criticality=ProviderCriticality.CRITICO,
    )


@pytest.fixture
def seeded_storage(
    file_manager: FileManager,
    goods_category: Category,
    services_category: Category,
    provider: Provider,
    critical_provider: Provider,
) -> FileManager:
    """FileManager pre-loaded with the sample categories and providers."""
    file_manager.save_category(goods_category)
    file_manager.save_category(services_category)
    file_manager.save_provider(provider)
    file_manager.save_provider(critical_provider)
    return file_manager


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="u-admin", role=UserRole.ADMIN)


@pytest.fixture
def evaluator() -> Actor:
    return Actor(user_id="u-eval", role=UserRole.EVALUATOR)


@pytest.fixture
def provider_user(provider: Provider) -> Actor:
    return Actor(user_id="u-prov", role=UserRole.PROVIDER, provider_id=provider.id)


@pytest.fixture
def all_fives_goods() -> dict[str, int]:
    return {
        "price": 5,
        "creditPolicies": 5,
        "deliveryTime": 5,
        "warrantyPolicies": 5,
        "customerService": 5,
        "responsiveness": 5,
        "availability": 5,
    }


@pytest.fixture
def all_threes_goods() -> dict[str, int]:
    return {
        "price": 3,
        "creditPolicies": 3,
        "deliveryTime": 3,
        "warrantyPolicies": 3,
        "customerService": 3,
        "responsiveness": 3,
        "availability": 3,
    }
