from __future__ import annotations

from dataclasses import dataclass, field

from .records import DnsRecord, RecordSet


@dataclass
class RecordSetDiff:
    to_add: list[DnsRecord] = field(default_factory=list)
    to_remove: list[DnsRecord] = field(default_factory=list)
    to_update: list[DnsRecord] = field(default_factory=list)
    unchanged: list[DnsRecord] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.to_add or self.to_remove or self.to_update)

    def counts(self) -> dict[str, int]:
        return {
            "added": len(self.to_add),
            "removed": len(self.to_remove),
            "updated": len(self.to_update),
            "unchanged": len(self.unchanged),
        }


def diff(desired: RecordSet, current: RecordSet) -> RecordSetDiff:
    """Three-way difference between desired and current record sets.

    Values are compared as sets: order and duplicates do not trigger an update.
    Record type and TTL are never compared. Output lists are sorted by name.
    """
    out = RecordSetDiff()
    for name in sorted(desired):
        want = desired[name]
        have = current.get(name)
        if have is None:
            out.to_add.append(want)
        elif want.value_set != have.value_set:
            out.to_update.append(want)
        else:
            out.unchanged.append(want)
    for name in sorted(current):
        if name not in desired:
            out.to_remove.append(current[name])
    return out
