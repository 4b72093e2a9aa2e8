from clickhub.container.binding import AliasOf, Factory, SelfConstruct, as_strategy
from clickhub.container.registry import Registry


class Repo:
    pass


class SqlRepo(Repo):
    pass


def make_repo(container, params):
    return SqlRepo()


def test_bind_without_concrete_is_self_construct():
    registry = Registry()
    registry.bind(Repo)
    binding = registry.binding(Repo)
    assert binding is not None
    assert binding.strategy == SelfConstruct()
    assert binding.shared is False
    assert registry.get_concrete(Repo) is Repo


def test_get_concrete_for_alias_and_factory():
    registry = Registry()
    registry.bind(Repo, SqlRepo)
    assert registry.get_concrete(Repo) is SqlRepo
    registry.bind("repo", make_repo)
    concrete = registry.get_concrete("repo")
    assert isinstance(concrete, Factory)
    assert concrete.fn is make_repo


def test_get_concrete_for_unbound_id_is_the_id():
    assert Registry().get_concrete("anything") == "anything"


def test_singleton_marks_binding_shared():
    registry = Registry()
    registry.singleton(Repo, SqlRepo)
    assert registry.is_shared(Repo)
    assert not registry.is_shared(SqlRepo)


def test_instance_is_shared_and_cached():
    registry = Registry()
    repo = SqlRepo()
    assert registry.instance(Repo, repo) is repo
    assert registry.is_shared(Repo)
    assert registry.cached(Repo) == (True, repo)
    assert registry.cached(SqlRepo) == (False, None)


def test_instance_can_cache_none():
    registry = Registry()
    registry.instance("nothing", None)
    assert registry.cached("nothing") == (True, None)


def test_remember_keeps_first_value():
    registry = Registry()
    first, second = SqlRepo(), SqlRepo()
    assert registry.remember(Repo, first) is first
    assert registry.remember(Repo, second) is first


def test_instance_overwrites_remembered_value():
    registry = Registry()
    registry.remember(Repo, SqlRepo())
    replacement = SqlRepo()
    registry.instance(Repo, replacement)
    assert registry.cached(Repo) == (True, replacement)


def test_has_covers_bindings_and_instances():
    registry = Registry()
    assert not registry.has(Repo)
    registry.bind(Repo)
    registry.instance("name", "clickhub")
    assert registry.has(Repo)
    assert registry.has("name")


def test_as_strategy_normalisation():
    assert as_strategy(Repo, None) == SelfConstruct()
    assert as_strategy(Repo, Repo) == SelfConstruct()
    assert as_strategy(Repo, SqlRepo) == AliasOf(SqlRepo)
    assert as_strategy("repo", "sql.repo") == AliasOf("sql.repo")
    assert as_strategy(Repo, make_repo) == Factory(make_repo)
    explicit = AliasOf(SqlRepo)
    assert as_strategy(Repo, explicit) is explicit
