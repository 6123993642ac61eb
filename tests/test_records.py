from dnsr.records import DEFAULT_TTL, RECORD_TYPE, DnsRecord, RecordSet, join_domain, ownership_suffix

from conftest import rec


def test_join_domain_lowercases_and_strips_trailing_dot():
    assert join_domain("Web", "Stack", "Env", "Example.COM.") == "web.stack.env.example.com"


def test_ownership_suffix():
    assert ownership_suffix("Prod", "example.com.") == ".prod.example.com"


def test_record_defaults_and_value_set():
    r = rec("a.example.com", "10.0.0.2", "10.0.0.1", "10.0.0.2")
    assert r.record_type == RECORD_TYPE == "A"
    assert r.ttl == DEFAULT_TTL == 300
    assert r.value_set == frozenset({"10.0.0.1", "10.0.0.2"})


def test_merge_appends_onto_existing_values():
    rs = RecordSet()
    rs.merge(rec("web.stack.env.example.com", "10.0.0.1"))
    merged = rs.merge(rec("web.stack.env.example.com", "10.0.0.2"))
    assert merged.values == ("10.0.0.1", "10.0.0.2")
    assert rs["web.stack.env.example.com"].values == ("10.0.0.1", "10.0.0.2")


def test_put_keys_by_lowercase_name_and_last_write_wins():
    rs = RecordSet()
    rs.put(DnsRecord("WEB.example.com", ("10.0.0.1",)))
    rs.put(DnsRecord("web.example.com", ("10.0.0.9",)))
    assert list(rs) == ["web.example.com"]
    assert rs["web.example.com"].values == ("10.0.0.9",)
