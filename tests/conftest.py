"""
Shared fixtures: every test gets its own configured kernel, so state,
registry and storages never leak between tests.
"""

import pytest

from entity_test.access.account import Account
from entity_test.entities.fields import FieldDefinition
from entity_test.infrastructure.configuration import Environment, EntityTestSettings
from entity_test.infrastructure.configurator import EntityTestConfigurator


@pytest.fixture
def settings():
    return EntityTestSettings.for_environment(Environment.TESTING)


@pytest.fixture
def make_kernel(settings):
    """Factory for kernels seeded with state values"""
    def factory(state=None, account=None):
        configurator = EntityTestConfigurator(settings).with_state(state or {})
        if account is not None:
            configurator.with_account(account)
        return configurator.configure()
    return factory


@pytest.fixture
def kernel(make_kernel):
    return make_kernel()


@pytest.fixture
def context(kernel):
    return kernel.context


@pytest.fixture
def registry(kernel):
    return kernel.registry


@pytest.fixture
def manager(kernel):
    return kernel.manager


@pytest.fixture
def storage(kernel):
    return kernel.storage("entity_test")


@pytest.fixture
def anonymous_account():
    return Account()


@pytest.fixture
def viewer():
    return Account(uid=2, name="viewer", permissions=["view test entity"])


@pytest.fixture
def administrator():
    return Account(uid=1, name="admin", is_admin=True)


@pytest.fixture
def field_test_text(manager):
    """A text field attached to every entity_test bundle"""
    definition = FieldDefinition.create("text", "field_test_text", label="Test text", translatable=True)
    manager.add_field("entity_test", definition)
    return definition
