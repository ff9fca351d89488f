"""Collapse a batch to one record per identity key before upserting"""


def last_write_wins(existing, incoming):
    return incoming


def deduplicate(records, key, resolve=last_write_wins):
    """
    Keep one record per `key(record)`.

    `resolve(existing, incoming)` decides between two records with the same
    key; the default keeps the one seen later in input order.
    """
    unique = {}
    for record in records:
        record_key = key(record)
        if record_key in unique:
            unique[record_key] = resolve(unique[record_key], record)
        else:
            unique[record_key] = record
    return list(unique.values())
