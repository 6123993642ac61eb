import pytest

from dnsr.current import ProviderStateReader
from dnsr.errors import ProviderReadError

from conftest import ENV, ROOT, RecordingProvider, rec


def test_read_keeps_only_owned_suffix():
    reader = ProviderStateReader(ENV, ROOT)
    records = reader.read(
        [
            rec("web.stack.env.example.com", "10.0.0.1"),
            rec("web.stack.other.example.com", "10.0.0.2"),
            rec("env.example.com", "10.0.0.3"),
            rec("example.com", "10.0.0.4"),
        ]
    )
    assert list(records) == ["web.stack.env.example.com"]


def test_read_is_case_insensitive():
    reader = ProviderStateReader("ENV", "Example.Com.")
    records = reader.read([rec("WEB.Stack.Env.EXAMPLE.com", "10.0.0.1")])
    assert list(records) == ["web.stack.env.example.com"]


def test_suffix_needs_label_boundary():
    reader = ProviderStateReader(ENV, ROOT)
    assert not reader.owns("web.stack.myenv.example.com")
    assert reader.owns("web.stack.env.example.com")


def test_fetch_wraps_provider_failure():
    reader = ProviderStateReader(ENV, ROOT)
    with pytest.raises(ProviderReadError) as ei:
        reader.fetch(RecordingProvider(list_error=ConnectionError("boom")))
    assert "Provider error reading dns entries" in str(ei.value)
    assert isinstance(ei.value.__cause__, ConnectionError)
