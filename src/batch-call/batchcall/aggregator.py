"""
Fold raw per-call outcomes into per-address records grouped by namespace.
"""

from typing import Any, Dict, Iterable, List, Optional

from .models import AddressState, RawCallResult

AddressRecord = Dict[str, Any]


def _find_record(records: List[AddressRecord], address: str) -> Optional[AddressRecord]:
    # Case-insensitive like the ABI cache; the first spelling seen is kept.
    key = address.lower()
    for record in records:
        if record["address"].lower() == key:
            return record
    return None


def _add_result(records: List[AddressRecord], address: str, namespace: str, result: RawCallResult) -> None:
    record = _find_record(records, address)
    existed = record is not None
    if record is None:
        record = {"address": address, "namespace": namespace}
        records.append(record)

    entry = result.to_entry()
    entries = record.setdefault(result.method, [])

    if not result.input:
        # Zero-argument results are capped at one entry; a repeat replaces it.
        # TODO: confirm whether a repeated zero-argument call should be a no-op instead.
        if existed:
            record[result.method] = [entry]
        elif not entries:
            entries.append(entry)
        return

    if any(existing.get("input") == result.input for existing in entries):
        return
    entries.append(entry)


def aggregate(states: Iterable[AddressState]) -> List[AddressRecord]:
    """Build address records in first-seen order; records keep their namespace."""
    records: List[AddressRecord] = []
    for state in states:
        for result in state.results:
            if result is None:
                continue
            _add_result(records, state.address, state.namespace, result)
    return records


def group_by_namespace(records: Iterable[AddressRecord]) -> Dict[str, List[AddressRecord]]:
    """Partition records by namespace and drop the now-redundant namespace key."""
    grouped: Dict[str, List[AddressRecord]] = {}
    for record in records:
        stripped = {key: value for key, value in record.items() if key != "namespace"}
        grouped.setdefault(record["namespace"], []).append(stripped)
    return grouped
