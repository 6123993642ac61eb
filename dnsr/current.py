from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from .errors import ProviderReadError
from .records import DnsRecord, RecordSet, normalize_domain, ownership_suffix

if TYPE_CHECKING:
    from .providers import Provider


class ProviderStateReader:
    """Narrows the provider's records to the ones under this environment's suffix."""

    def __init__(self, environment_name: str, root_domain: str):
        self.suffix = ownership_suffix(environment_name, root_domain)

    def owns(self, domain_name: str) -> bool:
        return normalize_domain(domain_name).endswith(self.suffix)

    def read(self, provider_records: Iterable[DnsRecord]) -> RecordSet:
        records = RecordSet()
        for rec in provider_records:
            if self.owns(rec.domain_name):
                records.put(rec)
        return records

    def fetch(self, provider: Provider) -> RecordSet:
        try:
            all_records = provider.list_records()
        except ProviderReadError:
            raise
        except Exception as e:
            raise ProviderReadError(f"Provider error reading dns entries: {e}") from e
        return self.read(all_records)
