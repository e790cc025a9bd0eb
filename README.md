# slidekit

Shared building blocks for the services of a meeting and assembly system.

- `slidekit.sets`: `Set`, a collection of unique items that keeps insertion
  order, with `add`, `merge`, `has`, `list` and `remove`, and the `equal`
  helper.
- `slidekit.oserror`: error helpers. `for_admin` builds an `AdminError`
  (shown as `ADMIN ERROR: ...`), `error_for_admin` finds one in an error's
  chain, `context_done` and `is_timeout` recognise cancellations and timeouts,
  and `handle` logs an error through `logging` unless it is a cancellation or
  an expired deadline. `set_body`/`body_from_context` and `add_tag`/`has_tag`
  keep a request body and tags in context variables.
- `slidekit.models`: `unmarshal` parses YAML model definitions (text, bytes or
  a file object) into a dict of `Model` objects. Each `Model` has `fields`, a
  dict of `Field` objects with `type`, `required`, `restriction_mode()` and
  `relation()`. Relation fields give an `AttributeRelation` or
  `AttributeGenericRelation` with `is_list` and `to_collections()`. Bad input
  raises `ModelError`.
- `slidekit.catalog`: the `TPermission` enum of every permission,
  `derived_permissions` for the permissions a permission implies, and the
  generator helpers `derivative`, `sub_perms` and `const_name`.
- `slidekit.permission`: `Permission` (`has`, `is_admin`, `in_group`),
  `OrganizationManagementLevel`, `permissions_from_groups`,
  `has_organization_management_level` and `management_level_committees`.
- `slidekit.stream`: parses stream read replies: `parse_stream`,
  `only_stream`, `parse_message_bus` and `logout_stream`, raising
  `StreamError` on malformed replies.
- `slidekit.bus`: `MessageBus` waits for the bus (`wait`), follows field
  updates (`update`, `single_update`) and reports revoked sessions
  (`logout_event`).
- `slidekit.metric`: `Metric` stores one value per running instance and
  combines the recent ones with a `Combiner`.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

Parsing models:

```python
from slidekit.models import unmarshal

with open("models.yml") as source:
    models = unmarshal(source)

field = models["motion"].fields["agenda_item_id"]
relation = field.relation()
if relation is not None:
    print(relation.is_list, relation.to_collections())
```

Checking permissions:

```python
from slidekit.catalog import TPermission
from slidekit.permission import Permission, permissions_from_groups

perms = permissions_from_groups([["motion.can_manage"]])
perm = Permission(admin=False, group_ids=[3], permissions=perms)
print(perm.has(TPermission.MotionCanSee), perm.in_group(3))
```

Following the message bus (host and port come from `MESSAGE_BUS_HOST` and
`MESSAGE_BUS_PORT`, defaulting to `localhost` and `6379`):

```python
import os
from slidekit.bus import MessageBus

bus = MessageBus(os.environ)
bus.wait(10)
print(bus.logout_event())
```

Sharing a metric between instances:

```python
from slidekit.bus import MessageBus
from slidekit.metric import Combiner, Metric

class Sum(Combiner[int]):
    def combine(self, value, acc):
        return (acc or 0) + int(value)

metric = Metric(MessageBus(), "connections", Sum(), too_old=60)
metric.save("3")
print(metric.get())
```

## Command line

`slidekit-perms` reads a permission tree in YAML (by default
`../meta/permission.yml`) and writes to standard output a Python module with
a `TPermission` enum and a `DERIVATE_PERMS` table mapping each permission to
the permissions it implies:

```
slidekit-perms permission.yml
```

It exits with status 1 and an error message if the file cannot be read or
decoded.

## What it does not do

`Permission` objects are built from values you pass in. The package does not
look up a user's groups, meeting membership, locked state or committee
management from a datastore, and it keeps no per-meeting cache of
permissions.