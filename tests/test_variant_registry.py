import pytest

from carbon_intensity.core.exceptions import ConfigError, DuplicateVariantError, UnknownVariantError
from carbon_intensity.data_sources.registry import DataSourceRegistry, register_data_source
from carbon_intensity.publishers.registry import PublisherRegistry
from carbon_intensity.readers.registry import ReaderRegistry, register_reader


def setup_function() -> None:
    DataSourceRegistry.clear()
    ReaderRegistry.clear()
    PublisherRegistry.clear()


def test_register_and_get_round_trip():
    class Dummy:
        pass

    DataSourceRegistry.register(name="dummy", variant_class=Dummy)

    assert DataSourceRegistry.get("dummy") is Dummy
    assert DataSourceRegistry.try_get("dummy") is Dummy
    assert DataSourceRegistry.try_get("missing") is None


def test_get_missing_lists_every_registered_option():
    class A:
        pass

    class B:
        pass

    ReaderRegistry.register(name="one-shot", variant_class=A)
    ReaderRegistry.register(name="time-reader", variant_class=B)

    with pytest.raises(UnknownVariantError) as excinfo:
        ReaderRegistry.get("hourly")

    message = str(excinfo.value)
    assert "reader" in message
    assert "'hourly'" in message
    assert "one-shot" in message
    assert "time-reader" in message
    assert excinfo.value.options == ["one-shot", "time-reader"]


def test_unknown_variant_is_a_config_error():
    with pytest.raises(ConfigError):
        PublisherRegistry.get("carrier-pigeon")


def test_roles_do_not_share_entries():
    class Dummy:
        pass

    DataSourceRegistry.register(name="shared-name", variant_class=Dummy)

    assert ReaderRegistry.try_get("shared-name") is None
    assert PublisherRegistry.try_get("shared-name") is None


def test_duplicate_registration_raises_by_default():
    class Dummy1:
        pass

    class Dummy2:
        pass

    DataSourceRegistry.register(name="dummy", variant_class=Dummy1)

    with pytest.raises(DuplicateVariantError, match="already registered"):
        DataSourceRegistry.register(name="dummy", variant_class=Dummy2)


def test_overwrite_allows_re_registration():
    class Dummy1:
        pass

    class Dummy2:
        pass

    DataSourceRegistry.register(name="dummy", variant_class=Dummy1)
    DataSourceRegistry.register(name="dummy", variant_class=Dummy2, overwrite=True)

    assert DataSourceRegistry.get("dummy") is Dummy2


def test_register_decorators_register_classes():
    @register_data_source("decorated")
    class Source:
        pass

    @register_reader("decorated")
    class Reader:
        pass

    assert DataSourceRegistry.get("decorated") is Source
    assert ReaderRegistry.get("decorated") is Reader
