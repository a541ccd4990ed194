import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def dining_bed():
    from dining.domain import dining

    bed = DomainFixture(dining)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(dining_bed):
    with dining_bed.domain_context():
        yield


@pytest.fixture()
def catalog():
    """A fresh in-memory menu catalog installed as the active one."""
    from dining.menu import set_catalog
    from dining.menu.fake_adapter import FakeMenuCatalog

    fake = FakeMenuCatalog()
    set_catalog(fake)
    return fake


@pytest.fixture()
def notifier():
    from dining.notifier import set_notifier
    from dining.notifier.fake_adapter import FakeNotifier

    fake = FakeNotifier()
    set_notifier(fake)
    return fake
