# kongdeck

kongdeck works out the changes needed to bring the entities configured in a
Kong gateway to a desired target configuration, and drives those changes
through a function you supply.

It is a library; it has no command-line entry point.

## Modules

- `kongdeck.dump` reads entities through a client object and collects them into
  a `KongRawState`. `get(client, config)` reads services, routes, plugins,
  certificates, CA certificates, SNIs, upstreams and the targets of every
  upstream, and, unless `Config.skip_consumers` is set, consumers and their
  key-auth, hmac-auth, jwt, basic-auth, oauth2 and ACL credentials.
  `Config.selector_tags` is passed to every listing except the credential
  ones. The per-kind helpers (`get_all_services`, `get_all_routes`,
  `get_all_targets`, ...) page through results with `ListOpt` (page size
  1000) until the client returns no next page. A client that raises
  `APINotFoundError` while listing CA certificates is treated as having none.
- `kongdeck.entities` defines `EntityDiff` and one instance each for
  services, routes, upstreams, targets, certificates, CA certificates and
  plugins. `EntityDiff.deletions(current, target)` yields a delete `Event` for
  every current entity missing from the target; `EntityDiff.changes(current,
  target)` yields create events for new entities and update events for ones
  that differ apart from `created_at`/`updated_at`. `foreign_names(plugin)`
  returns the service, route and consumer IDs a plugin is attached to, with
  `""` for any that is missing.
- `kongdeck.consumers` holds the diffs for consumers and their credentials;
  `consumer_diffs()` returns them in order.
- `kongdeck.syncer.Syncer(current, target)` runs all diffs in phases, waiting
  for each phase to finish before starting the next. Creates and updates go:
  certificates; services; routes; consumers; credentials; upstreams; targets;
  plugins and CA certificates. Deletes then go: plugins; routes; services;
  credentials; consumers; targets; upstreams and CA certificates;
  certificates. `Syncer.run(done, parallelism, do)` hands every event to `do`
  on `parallelism` worker threads. `do` must return a non-`None` result; the
  event is then applied back onto the current state through
  `kongdeck.postprocess`. The run stops at the first error or when the
  `threading.Event` `done` is set, and returns the list of errors (empty on
  success). A `parallelism` below 1 returns a single error.
- `kongdeck.postprocess.build_registry()` returns a `Registry` with a
  `CollectionPostAction` for every entity kind.
- `kongdeck.crud` holds `Registry`, the abstract `Actions`, `Op` with the
  values `CREATE`, `UPDATE` and `DELETE`, and `CrudError`.
- `kongdeck.events` holds `Event`, `NotFoundError` and `is_placeholder`.
- `kongdeck.counter.Counter` is a thread-safe counter.

## State objects

Diffing and syncing work on any state object that exposes one collection per
kind as an attribute (`services`, `routes`, `upstreams`, `targets`,
`certificates`, `ca_certificates`, `plugins`, `consumers`, `key_auths`,
`hmac_auths`, `jwt_auths`, `basic_auths`, `oauth2_creds`, `acl_groups`).
A collection provides `get_all()`, a lookup (`get`, or `get_by_prop` for
plugins) that raises `NotFoundError` when nothing matches, and `add`,
`update` and `delete`.

## Example

```python
from kongdeck.crud import Actions, Registry


class Echo(Actions):
    def create(self, *args):
        return ("create", *args)

    def update(self, *args):
        return ("update", *args)

    def delete(self, *args):
        return ("delete", *args)


registry = Registry()
registry.register("service", Echo())
print(registry.create("service", "svc-1"))  # ('create', 'svc-1')
```

Registry errors are raised as `CrudError`.

## What it does not do

kongdeck does not talk HTTP itself, does not read or write configuration
files, and does not provide an in-memory state store: you supply the Admin
API client, the state objects and the `do` function that performs each
change.

## Tests

```
pip install -e .[test]
pytest
```